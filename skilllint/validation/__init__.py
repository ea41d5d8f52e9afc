"""
skilllint Validation

Document-integrity checks for a skill corpus: frontmatter fields, size
limits, code fences, tables, reference links, and description overlap.
"""

from skilllint.validation.report import CorpusReport, Issue, Severity, ValidationResult
from skilllint.validation.validator import (
    check_description_conflicts,
    validate_corpus,
    validate_reference_md,
    validate_skill,
    validate_skill_md,
)

__all__ = [
    "CorpusReport",
    "Issue",
    "Severity",
    "ValidationResult",
    "check_description_conflicts",
    "validate_corpus",
    "validate_reference_md",
    "validate_skill",
    "validate_skill_md",
]
