"""
skilllint Skills: Markdown skill loader

Skills live at ``skills/<name>/SKILL.md`` with YAML frontmatter and an
optional ``references/`` folder of deeper detail pages.
"""

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

import yaml

from skilllint.errors import FrontmatterError, SkillNotFoundError
from skilllint.skills.models import (
    Frontmatter,
    MarkdownTable,
    ReferenceDocument,
    SkillDocument,
)

logger = logging.getLogger(__name__)

SKILL_FILENAME = "SKILL.md"
REFERENCES_DIRNAME = "references"

_REFERENCE_LINK_RE = re.compile(r"\(references/([^)]+\.md)\)")
_TABLE_SEPARATOR_RE = re.compile(r"^\|?\s*:?-+:?\s*(\|\s*:?-+:?\s*)*\|?$")
_CELL_SPLIT_RE = re.compile(r"(?<!\\)\|")
# `name` skill / **name** skill
_DELEGATE_MARKED_RE = re.compile(r"(?:`|\*\*)([a-z0-9]+(?:-[a-z0-9]+)*)(?:`|\*\*)\s+skill\b")
# `kebab-name` / **kebab-name**, only when it names a known skill
_DELEGATE_KEBAB_RE = re.compile(r"(?:`|\*\*)([a-z0-9]+(?:-[a-z0-9]+)+)(?:`|\*\*)")
# kebab-name skill
_DELEGATE_PHRASE_RE = re.compile(r"(?<![`*\w-])([a-z0-9]+(?:-[a-z0-9]+)+)\s+skill\b")
# [...](../kebab-name/SKILL.md)
_DELEGATE_LINK_RE = re.compile(r"\(\.\./([a-z0-9][a-z0-9-]*)/SKILL\.md\)")
_DELEGATE_PATTERNS = (_DELEGATE_MARKED_RE, _DELEGATE_KEBAB_RE, _DELEGATE_PHRASE_RE, _DELEGATE_LINK_RE)


# ----------------------------------------------------------------------
# Frontmatter / markdown parsing
# ----------------------------------------------------------------------

def parse_frontmatter(content: str) -> Tuple[Frontmatter, str]:
    """Parse YAML frontmatter from markdown content.

    Returns:
        (Frontmatter, body). On failure the Frontmatter carries ``error``
        and the body is the whole content.
    """
    if not content.startswith("---"):
        return Frontmatter(error="YAML frontmatter must start with --- on line 1"), content

    lines = content.split("\n")
    end_idx = -1
    for i in range(1, len(lines)):
        if lines[i].strip() == "---":
            end_idx = i
            break

    if end_idx == -1:
        return Frontmatter(error="Invalid YAML frontmatter: missing closing ---"), content

    header_text = "\n".join(lines[1:end_idx])
    body = "\n".join(lines[end_idx + 1:])

    try:
        data = yaml.safe_load(header_text)
    except yaml.YAMLError as e:
        problem = getattr(e, "problem", None) or str(e).splitlines()[0]
        mark = getattr(e, "problem_mark", None)
        if mark is not None:
            # +2: 1-based, plus the opening --- line
            problem = f"{problem} (line {mark.line + 2})"
        logger.debug("YAML parse error: %s", e)
        return Frontmatter(error=f"Invalid YAML frontmatter: {problem}", line_count=end_idx + 1), body

    if data is None:
        data = {}
    if not isinstance(data, dict):
        return Frontmatter(error="Invalid YAML frontmatter: expected a mapping", line_count=end_idx + 1), body

    return Frontmatter(data=data, line_count=end_idx + 1), body


def _is_fence(line: str) -> bool:
    return line.strip().startswith("```")


def split_sections(body: str) -> Dict[str, str]:
    """Map each ``## `` heading to the text under it (code fences respected)."""
    sections: Dict[str, str] = {}
    current: Optional[str] = None
    current_lines: List[str] = []
    in_code = False

    for line in body.split("\n"):
        if _is_fence(line):
            in_code = not in_code
        if not in_code and line.startswith("## "):
            if current is not None:
                _store_section(sections, current, current_lines)
            current = line[3:].strip()
            current_lines = []
        elif current is not None:
            current_lines.append(line)

    # Last section
    if current is not None:
        _store_section(sections, current, current_lines)
    return sections


def _store_section(sections: Dict[str, str], title: str, lines: List[str]):
    text = "\n".join(lines).strip()
    if title in sections:
        sections[title] = sections[title] + "\n" + text
    else:
        sections[title] = text


def extract_reference_links(content: str) -> List[str]:
    """Return the unique ``references/<file>.md`` targets, in order of appearance."""
    seen = []
    for match in _REFERENCE_LINK_RE.finditer(content):
        target = match.group(1)
        if target not in seen:
            seen.append(target)
    return seen


def split_cells(line: str) -> List[str]:
    text = line.strip()
    if text.startswith("|"):
        text = text[1:]
    if text.endswith("|") and not text.endswith("\\|"):
        text = text[:-1]
    return [cell.strip() for cell in _CELL_SPLIT_RE.split(text)]


def extract_tables(content: str, first_line: int = 1) -> List[MarkdownTable]:
    """Find pipe tables outside fenced code.

    Args:
        content: Markdown text.
        first_line: Line number of the first line of ``content`` in its file.
    """
    lines = content.split("\n")
    tables: List[MarkdownTable] = []
    in_code = False
    i = 0
    while i < len(lines):
        line = lines[i]
        if _is_fence(line):
            in_code = not in_code
            i += 1
            continue
        if (
            not in_code
            and "|" in line
            and i + 1 < len(lines)
            and "-" in lines[i + 1]
            and _TABLE_SEPARATOR_RE.match(lines[i + 1].strip())
        ):
            table = MarkdownTable(header=split_cells(line), rows=[], line=first_line + i)
            j = i + 2
            while j < len(lines) and lines[j].strip() and "|" in lines[j] and not _is_fence(lines[j]):
                table.rows.append(split_cells(lines[j]))
                j += 1
            tables.append(table)
            i = j
            continue
        i += 1
    return tables


def extract_delegations(section_text: Optional[str], known_skills: Optional[Set[str]] = None) -> List[str]:
    """Skill names mentioned in a Delegation section.

    A name followed by "skill" or linked as ``../<name>/SKILL.md`` always
    counts. A bare backticked or bold kebab-case token counts only when it
    is one of ``known_skills``; agents and commands look the same.
    """
    if not section_text:
        return []
    names: List[str] = []
    for pattern in _DELEGATE_PATTERNS:
        for match in pattern.finditer(section_text):
            name = match.group(1)
            if pattern is _DELEGATE_KEBAB_RE and name not in (known_skills or ()):
                continue
            if name not in names:
                names.append(name)
    return names


def sibling_skill_names(skill_dir: Union[str, Path]) -> Set[str]:
    """Directory names of the skills that share a parent with skill_dir."""
    parent = Path(skill_dir).parent
    if not parent.is_dir():
        return set()
    return {d.name for d in parent.iterdir() if d.is_dir() and (d / SKILL_FILENAME).exists()}


# ----------------------------------------------------------------------
# Loader
# ----------------------------------------------------------------------

class SkillLoader:
    """Load and parse skill directories."""

    def __init__(self, skills_dir: Optional[Union[str, Path]] = None):
        if skills_dir:
            self.skills_dir = Path(skills_dir)
        else:
            self.skills_dir = Path.cwd() / "skills"

    def _resolve_dir(self, name_or_dir: Union[str, Path]) -> Path:
        candidate = Path(name_or_dir)
        if candidate.is_dir():
            return candidate
        return self.skills_dir / str(name_or_dir)

    def load_skill(self, name_or_dir: Union[str, Path], strict: bool = False) -> Optional[SkillDocument]:
        """Load a skill by name (under skills_dir) or by directory path.

        Args:
            name_or_dir: Skill directory name or path.
            strict: Raise instead of returning None / a document with a
                frontmatter error.

        Returns:
            SkillDocument, or None if SKILL.md is missing or unreadable.
        """
        skill_dir = self._resolve_dir(name_or_dir)
        path = skill_dir / SKILL_FILENAME
        if not path.exists():
            if strict:
                raise SkillNotFoundError(f"{SKILL_FILENAME} not found in {skill_dir}")
            logger.warning("Skill not found: %s", name_or_dir)
            return None

        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            if strict:
                raise
            logger.error("Failed to read skill %s: %s", path, e)
            return None

        frontmatter, body = parse_frontmatter(content)
        if strict and frontmatter.error:
            raise FrontmatterError(frontmatter.error, path)

        sections = split_sections(body)
        doc = SkillDocument(
            directory=skill_dir,
            path=path,
            frontmatter=frontmatter,
            body=body,
            content=content,
            sections=sections,
            reference_links=extract_reference_links(content),
            tables=extract_tables(body, first_line=frontmatter.line_count + 1),
        )
        doc.delegations = extract_delegations(doc.section("Delegation"), sibling_skill_names(skill_dir))

        for ref_path in self.iter_reference_files(skill_dir):
            ref = self.load_reference(ref_path)
            if ref is not None:
                doc.references.append(ref)
        return doc

    def load_reference(self, path: Union[str, Path]) -> Optional[ReferenceDocument]:
        path = Path(path)
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.error("Failed to read reference %s: %s", path, e)
            return None

        frontmatter, body = parse_frontmatter(content)
        return ReferenceDocument(
            path=path,
            frontmatter=frontmatter,
            body=body,
            line_count=len(content.split("\n")),
            tables=extract_tables(body, first_line=frontmatter.line_count + 1),
        )

    def list_skill_dirs(self) -> List[Path]:
        if not self.skills_dir.is_dir():
            return []
        return sorted(
            d for d in self.skills_dir.iterdir()
            if d.is_dir() and (d / SKILL_FILENAME).exists()
        )

    def list_skills(self) -> List[SkillDocument]:
        """Load every skill under skills_dir, skipping unreadable ones."""
        skills = []
        for skill_dir in self.list_skill_dirs():
            doc = self.load_skill(skill_dir)
            if doc is not None:
                skills.append(doc)
        return skills

    @staticmethod
    def iter_reference_files(skill_dir: Union[str, Path]) -> List[Path]:
        """``references/*.md`` files, excluding ``_``-prefixed partials."""
        refs_dir = Path(skill_dir) / REFERENCES_DIRNAME
        if not refs_dir.is_dir():
            return []
        return sorted(
            p for p in refs_dir.iterdir()
            if p.is_file() and p.name.endswith(".md") and not p.name.startswith("_")
        )
