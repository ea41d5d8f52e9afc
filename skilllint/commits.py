"""
Conventional-commit lint for skill corpus repositories.

Header format: ``type(scope)!: subject``. Scopes are limited to the areas
of a skill repository; the header may be long (200 chars) because skill
commits often name several skills.
"""

import logging
import re
from typing import List, Optional

from skilllint.validation.report import ValidationResult

logger = logging.getLogger(__name__)

COMMIT_TYPES = [
    "build", "chore", "ci", "docs", "feat", "fix",
    "perf", "refactor", "revert", "style", "test",
]

COMMIT_SCOPES = ["skills", "validator", "docs", "config", "deps", "ci"]

HEADER_MAX_LENGTH = 200

ALIASES = {
    "fd": "docs: fix typos",
    "b": "chore(deps): bump dependencies",
}

SCISSORS = "# ------------------------ >8 ------------------------"

_HEADER_RE = re.compile(
    r"^(?P<type>[^\s(!:]+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?: (?P<subject>.*)$"
)


def expand_alias(alias: str) -> Optional[str]:
    return ALIASES.get(alias.strip())


def strip_comments(text: str) -> List[str]:
    """Drop git's comment lines and everything below the scissors line."""
    lines = []
    for line in text.splitlines():
        if line.startswith(SCISSORS):
            break
        if line.startswith("#"):
            continue
        lines.append(line.rstrip())
    # trailing blank lines
    while lines and not lines[-1].strip():
        lines.pop()
    while lines and not lines[0].strip():
        lines.pop(0)
    return lines


def _split_scopes(scope: str) -> List[str]:
    return [s.strip() for s in re.split(r"[,/]", scope) if s.strip()]


def lint_header(header: str) -> ValidationResult:
    result = ValidationResult()

    if len(header) > HEADER_MAX_LENGTH:
        result.error(f"Header is {len(header)} characters (max {HEADER_MAX_LENGTH})")

    match = _HEADER_RE.match(header)
    if not match:
        result.error("Header must match 'type(scope): subject'")
        return result

    commit_type = match.group("type")
    if commit_type != commit_type.lower():
        result.error(f"Type '{commit_type}' must be lower-case")
    if commit_type.lower() not in COMMIT_TYPES:
        result.error(f"Type '{commit_type}' is not one of: {', '.join(COMMIT_TYPES)}")

    scope = match.group("scope")
    if scope is not None:
        scopes = _split_scopes(scope)
        if not scopes:
            result.error("Scope must not be empty when parentheses are given")
        for name in scopes:
            if name not in COMMIT_SCOPES:
                result.error(f"Scope '{name}' is not one of: {', '.join(COMMIT_SCOPES)}")

    subject = match.group("subject").strip()
    if not subject:
        result.error("Subject must not be empty")
        return result
    if subject.endswith("."):
        result.error("Subject must not end with a full stop")
    if subject[0].isupper():
        result.error("Subject must not start with an upper-case letter")
    return result


def lint_commit_message(text: str) -> ValidationResult:
    """Lint a full commit message (header, optional body and footer)."""
    lines = strip_comments(text)
    if not lines:
        return ValidationResult(errors=["Commit message is empty"])

    header = lines[0]
    # git generated merge/revert headers are accepted as-is
    if header.startswith("Merge ") or header.startswith('Revert "'):
        logger.debug("Skipping generated header: %s", header)
        return ValidationResult()

    result = lint_header(header)
    if len(lines) > 1 and lines[1].strip():
        result.warn("Body must be separated from the header by a blank line")
    return result
