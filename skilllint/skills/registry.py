"""
skilllint Skills Registry: resolves skill paths, indexes and searches skills.
"""

import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from skilllint.skills.models import SkillDocument
from skilllint.skills.skill_loader import REFERENCES_DIRNAME, SKILL_FILENAME, SkillLoader
from skilllint.validation.rules import extract_trigger_words

logger = logging.getLogger(__name__)


def _has_skill_file(directory: Path) -> bool:
    return (directory / SKILL_FILENAME).exists()


def _child_skill_dirs(directory: Path) -> List[Path]:
    found = []
    for sub in directory.iterdir():
        try:
            if sub.is_dir() and _has_skill_file(sub):
                found.append(sub)
        except OSError:
            # unreadable entry
            continue
    return found


def resolve_skill_dirs(
    paths: Iterable[Union[str, Path]],
    skills_dir: Union[str, Path] = "skills",
) -> List[Path]:
    """Turn command-line arguments into the skill directories they touch.

    Args:
        paths: Files or directories. Empty means every skill in skills_dir.
        skills_dir: Corpus root used when no paths are given.

    Returns:
        Sorted, de-duplicated absolute skill directories.
    """
    paths = list(paths)
    if not paths:
        root = Path(skills_dir).resolve()
        if not root.is_dir():
            logger.info("Skills directory not found: %s", root)
            return []
        return sorted(_child_skill_dirs(root))

    skill_dirs: Set[Path] = set()
    for arg in paths:
        resolved = Path(arg).resolve()
        if not resolved.exists():
            logger.info("Skipping missing path: %s", arg)
            continue

        if resolved.is_file() and resolved.name.endswith(".md"):
            directory = resolved.parent
            if directory.name == REFERENCES_DIRNAME:
                directory = directory.parent
            if _has_skill_file(directory):
                skill_dirs.add(directory)
        elif resolved.is_dir():
            if _has_skill_file(resolved):
                skill_dirs.add(resolved)
            else:
                skill_dirs.update(_child_skill_dirs(resolved))

    return sorted(skill_dirs)


class SkillRegistry:
    """Registry that indexes all skills and provides lookup by name and text."""

    def __init__(self, skills_dir: Optional[Union[str, Path]] = None):
        self.loader = SkillLoader(skills_dir)
        self._index: Dict[str, SkillDocument] = {}
        self._triggers: Dict[str, Set[str]] = {}
        self._scan()

    def _scan(self):
        """Scan skills directory and index all skills."""
        self._index = {}
        self._triggers = {}
        for doc in self.loader.list_skills():
            if doc.name in self._index:
                logger.warning(
                    "Duplicate skill name %s in %s (already indexed from %s)",
                    doc.name, doc.directory, self._index[doc.name].directory,
                )
                continue
            self._index[doc.name] = doc
            self._triggers[doc.name] = extract_trigger_words(doc.description)

        if self._index:
            logger.info("Skills registry: %d skills indexed", len(self._index))
        else:
            logger.info("Skills registry: no skills found")

    def refresh(self):
        """Re-scan skills directory (call when skills are added/removed)."""
        self._scan()

    def get(self, name: str) -> Optional[SkillDocument]:
        """Get skill by name."""
        return self._index.get(name)

    def list_all(self) -> List[SkillDocument]:
        """List all indexed skills, sorted by name."""
        return [self._index[name] for name in sorted(self._index)]

    def names(self) -> Set[str]:
        """Directory names of every indexed skill."""
        return {doc.dir_name for doc in self._index.values()}

    def descriptions(self) -> Dict[str, str]:
        return {name: doc.description for name, doc in sorted(self._index.items()) if doc.description}

    def match(self, message: str, limit: Optional[int] = None) -> List[SkillDocument]:
        """Match skills for a free-text request.

        A skill matches when its description shares trigger words with the
        message (or its name appears verbatim). Results are ordered by the
        number of shared words, then by name.
        """
        if not message:
            return []
        msg_lower = message.lower()
        msg_words = extract_trigger_words(message)

        scored = []
        for name, doc in self._index.items():
            score = len(self._triggers.get(name, set()) & msg_words)
            if re.search(rf"(?<![\w-]){re.escape(name)}(?![\w-])", msg_lower):
                score += len(name.split("-")) + 1
            if score:
                scored.append((-score, name, doc))

        scored.sort(key=lambda item: (item[0], item[1]))
        matched = [doc for _, _, doc in scored]
        return matched[:limit] if limit is not None else matched

    def delegation_graph(self) -> Dict[str, List[str]]:
        """Skill name -> skills named in its Delegation section."""
        return {name: list(doc.delegations) for name, doc in sorted(self._index.items())}

    def unknown_delegations(self) -> Dict[str, List[str]]:
        """Delegation targets that are not skills in this corpus."""
        known = self.names()
        missing = {}
        for name, targets in self.delegation_graph().items():
            unknown = [t for t in targets if t not in known]
            if unknown:
                missing[name] = unknown
        return missing
