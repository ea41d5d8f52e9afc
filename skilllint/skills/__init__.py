"""
skilllint Skills

A skill is a markdown manual at ``skills/<name>/SKILL.md`` with YAML
frontmatter, optionally backed by ``references/*.md`` detail pages.
They are documents, not code; this package only reads them.
"""

from skilllint.skills.skill_loader import SkillLoader, parse_frontmatter
from skilllint.skills.registry import SkillRegistry, resolve_skill_dirs

__all__ = ["SkillLoader", "SkillRegistry", "parse_frontmatter", "resolve_skill_dirs"]
