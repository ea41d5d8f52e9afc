"""Data models for parsed skill and reference documents."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional


@dataclass
class Frontmatter:
    """Parsed YAML header of a markdown document."""

    data: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    line_count: int = 0

    def get(self, key: str, default=None):
        return self.data.get(key, default)

    def nested(self, dotted_key: str, default=None):
        """Look up ``metadata.author`` style keys."""
        node: Any = self.data
        for part in dotted_key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node


@dataclass
class MarkdownTable:
    header: List[str]
    rows: List[List[str]]
    line: int  # 1-based line of the header row

    @property
    def column_count(self) -> int:
        return len(self.header)


@dataclass
class ReferenceDocument:
    path: Path
    frontmatter: Frontmatter
    body: str
    line_count: int
    tables: List[MarkdownTable] = field(default_factory=list)

    @property
    def title(self) -> str:
        return str(self.frontmatter.get("title") or "").strip()

    @property
    def tags(self) -> List[str]:
        tags = self.frontmatter.get("tags") or []
        if isinstance(tags, str):
            return [t.strip() for t in tags.split(",") if t.strip()]
        return [str(t) for t in tags]


@dataclass
class SkillDocument:
    """A ``skills/<name>/SKILL.md`` file plus everything linked from it."""

    directory: Path
    path: Path
    frontmatter: Frontmatter
    body: str
    content: str
    sections: Dict[str, str] = field(default_factory=dict)
    reference_links: List[str] = field(default_factory=list)
    delegations: List[str] = field(default_factory=list)
    tables: List[MarkdownTable] = field(default_factory=list)
    references: List[ReferenceDocument] = field(default_factory=list)

    @property
    def dir_name(self) -> str:
        return self.directory.name

    @property
    def name(self) -> str:
        value = self.frontmatter.get("name")
        return str(value) if value else self.dir_name

    @property
    def description(self) -> str:
        value = self.frontmatter.get("description")
        return str(value) if value else ""

    @property
    def license(self) -> Optional[str]:
        return self.frontmatter.get("license")

    @property
    def author(self) -> Optional[str]:
        return self.frontmatter.nested("metadata.author")

    @property
    def version(self) -> Optional[str]:
        value = self.frontmatter.nested("metadata.version")
        return str(value) if value is not None else None

    @property
    def source(self) -> Optional[str]:
        return self.frontmatter.nested("metadata.source")

    @property
    def user_invocable(self) -> bool:
        return self.frontmatter.get("user-invocable", True) is not False

    @property
    def model_invocation_disabled(self) -> bool:
        return self.frontmatter.get("disable-model-invocation", False) is True

    @property
    def line_count(self) -> int:
        return len(self.content.split("\n"))

    def section(self, heading: str) -> Optional[str]:
        """Case-insensitive section lookup."""
        wanted = heading.strip().lower()
        for title, text in self.sections.items():
            if title.lower() == wanted:
                return text
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "path": str(self.path),
            "license": self.license,
            "author": self.author,
            "version": self.version,
            "references": [str(r.path.name) for r in self.references],
            "delegations": list(self.delegations),
        }
