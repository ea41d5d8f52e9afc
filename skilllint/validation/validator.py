"""
skilllint Validator: integrity checks for a skill corpus.

Each check returns a ValidationResult of plain-string errors and warnings.
Errors fail the skill; warnings are advisory.
"""

import logging
import stat
from itertools import combinations
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Union

from skilllint.skills.models import MarkdownTable
from skilllint.skills.skill_loader import (
    REFERENCES_DIRNAME,
    SKILL_FILENAME,
    SkillLoader,
    extract_delegations,
    extract_reference_links,
    extract_tables,
    parse_frontmatter,
    split_sections,
)
from skilllint.validation import rules
from skilllint.validation.report import CorpusReport, SkillReport, ValidationResult

logger = logging.getLogger(__name__)


# ----------------------------------------------------------------------
# Frontmatter fields
# ----------------------------------------------------------------------

def _is_blank(value) -> bool:
    return value is None or value == ""


def validate_frontmatter_name(name, dir_name: str) -> ValidationResult:
    result = ValidationResult()
    if _is_blank(name):
        result.error("Missing required field: 'name' in frontmatter")
        return result

    name = str(name)
    if len(name) > rules.MAX_NAME_LENGTH:
        result.error(f"Field 'name' exceeds {rules.MAX_NAME_LENGTH} characters ({len(name)} chars)")
    elif len(name) < rules.MIN_NAME_LENGTH:
        result.error(
            f"Field 'name' is too short ({len(name)} chars, min {rules.MIN_NAME_LENGTH}). "
            "Use a descriptive name, not an abbreviation"
        )
    elif not rules.NAME_RE.match(name):
        result.error("Field 'name' must use only lowercase letters, numbers, and hyphens")

    if name.startswith("-") or name.endswith("-"):
        result.error("Field 'name' must not start or end with a hyphen")
    if "--" in name:
        result.error("Field 'name' must not contain consecutive hyphens (--)")
    for word in rules.RESERVED_WORDS:
        if word in name:
            result.error(f"Field 'name' contains reserved word '{word}'")
    if rules.XML_TAG_RE.search(name):
        result.error("Field 'name' must not contain XML tags")
    if name != dir_name:
        result.error(f"Field 'name' ({name}) must match directory name ({dir_name})")
    return result


def validate_description(description) -> ValidationResult:
    result = ValidationResult()
    if _is_blank(description):
        result.error("Missing required field: 'description' in frontmatter")
        return result

    desc = str(description)
    if len(desc) > rules.MAX_DESCRIPTION_LENGTH:
        result.error(
            f"Field 'description' exceeds {rules.MAX_DESCRIPTION_LENGTH} characters ({len(desc)} chars)"
        )
        return result

    if rules.XML_TAG_RE.search(desc):
        result.error("Field 'description' must not contain XML tags")

    words = desc.strip().split()
    first_word = words[0].lower() if words else ""
    if first_word in rules.FIRST_PERSON_OPENERS:
        result.warn(
            "Description should use third-person voice "
            "('Extracts text from PDFs', not 'I help you' or 'You can use')"
        )

    desc_lower = desc.lower()
    if "use when" not in desc_lower and "use for" not in desc_lower:
        result.warn("Description should include trigger phrases like 'Use when...' or 'Use for...'")

    for pattern, term in rules.VAGUE_PATTERNS:
        if pattern.search(desc_lower):
            result.warn(f"Vague term '{term}' in description - use specific triggers instead")
            break

    if "use for" in desc_lower:
        after_use_for = desc_lower.split("use for")[1]
        triggers = rules.extract_trigger_words(after_use_for)
        if len(triggers) < rules.MIN_TRIGGER_WORDS:
            result.warn(
                f"Low trigger density: only {len(triggers)} keywords after 'Use for' "
                f"(recommend {rules.RECOMMENDED_TRIGGER_WORDS}+)"
            )
    return result


def validate_optional_fields(data: Dict) -> ValidationResult:
    """Type checks for the optional frontmatter keys."""
    result = ValidationResult()
    for flag in rules.BOOLEAN_FLAGS:
        if flag in data and not isinstance(data[flag], bool):
            result.error(f"Field '{flag}' must be a boolean (true or false)")
    if "metadata" in data and not isinstance(data["metadata"], dict):
        result.error("Field 'metadata' must be a mapping (author, version, source)")
    return result


# ----------------------------------------------------------------------
# Markdown structure
# ----------------------------------------------------------------------

def validate_code_blocks(lines: List[str]) -> ValidationResult:
    result = ValidationResult()
    in_code_block = False
    code_block_start = 0
    for i, line in enumerate(lines):
        stripped = line.strip()
        if not stripped.startswith("```"):
            continue
        if not in_code_block:
            code_block_start = i + 1
            if not stripped[3:].strip():
                result.error(f"Line {i + 1}: Code block missing language specifier (MD040)")
        in_code_block = not in_code_block

    if in_code_block:
        result.error(f"Unclosed code block starting at line {code_block_start}")
    return result


def validate_tables(tables: Iterable[MarkdownTable], prefix: str = "") -> ValidationResult:
    """Every row must have as many cells as its header."""
    result = ValidationResult()
    for table in tables:
        expected = table.column_count
        for offset, row in enumerate(table.rows):
            if len(row) != expected:
                # rows start two lines below the header (after the separator)
                line_no = table.line + 2 + offset
                result.error(f"{prefix}Line {line_no}: Table row has {len(row)} columns, header has {expected}")
    return result


def validate_skill_md(file_path: Union[str, Path], content: str) -> ValidationResult:
    """Check a SKILL.md file's frontmatter, size, code fences, sections, and tables."""
    file_path = Path(file_path)
    result = ValidationResult()
    lines = content.split("\n")
    line_count = len(lines)

    frontmatter, body = parse_frontmatter(content)
    if frontmatter.error:
        result.error(frontmatter.error)
    else:
        dir_name = file_path.parent.name
        result.extend(validate_frontmatter_name(frontmatter.get("name"), dir_name))
        result.extend(validate_description(frontmatter.get("description")))
        result.extend(validate_optional_fields(frontmatter.data))

    if line_count > rules.SKILL_MAX_LINES:
        result.error(f"SKILL.md is {line_count} lines (max {rules.SKILL_MAX_LINES}). Split to references/")
    elif line_count > rules.SKILL_WARN_LINES:
        result.warn(
            f"SKILL.md is {line_count} lines "
            f"(target ~{rules.SKILL_TARGET_LINES}, max {rules.SKILL_MAX_LINES})"
        )

    result.extend(validate_code_blocks(lines))

    content_lower = content.lower()
    if "## common mistakes" not in content_lower:
        result.warn("Missing '## Common Mistakes' section")
    if "## delegation" not in content_lower:
        result.warn("Missing '## Delegation' section")

    result.extend(validate_tables(extract_tables(body, first_line=frontmatter.line_count + 1)))
    return result


def validate_reference_md(file_path: Union[str, Path], content: str) -> ValidationResult:
    """Check a references/*.md page. Frontmatter problems are warnings here."""
    result = ValidationResult()
    lines = content.split("\n")
    line_count = len(lines)
    file_name = Path(file_path).name

    if line_count > rules.REF_MAX_LINES:
        result.error(f"{file_name}: {line_count} lines (max {rules.REF_MAX_LINES})")
    elif line_count > rules.REF_WARN_LINES:
        result.warn(f"{file_name}: {line_count} lines (consider splitting at ~{rules.REF_WARN_LINES})")

    frontmatter, body = parse_frontmatter(content)
    result.extend(validate_tables(extract_tables(body, first_line=frontmatter.line_count + 1), f"{file_name}: "))

    if not content.startswith("---"):
        result.warn(f"{file_name}: Missing YAML frontmatter (title, description, tags required)")
        return result

    if frontmatter.error:
        result.warn(f"{file_name}: {frontmatter.error}")
        return result

    if _is_blank(frontmatter.get("title")):
        result.warn(f"{file_name}: Missing 'title' in frontmatter")
    if _is_blank(frontmatter.get("description")):
        result.warn(f"{file_name}: Missing 'description' in frontmatter")
    if not frontmatter.get("tags"):
        result.warn(f"{file_name}: Missing 'tags' in frontmatter")
    return result


# ----------------------------------------------------------------------
# Skill directory
# ----------------------------------------------------------------------

def cross_validate_references(skill_dir: Union[str, Path], skill_content: str) -> ValidationResult:
    """Links in SKILL.md and files in references/ must match one to one."""
    result = ValidationResult()
    linked = extract_reference_links(skill_content)
    actual = [p.name for p in SkillLoader.iter_reference_files(skill_dir)]
    actual_set = set(actual)
    linked_set = set(linked)

    for target in linked:
        if target not in actual_set:
            result.error(f"Broken reference link: {REFERENCES_DIRNAME}/{target} (file not found)")
    for name in actual:
        if name not in linked_set:
            result.error(f"Orphan reference file: {REFERENCES_DIRNAME}/{name} (not linked in SKILL.md)")
    return result


def _check_scripts(skill_dir: Path) -> ValidationResult:
    result = ValidationResult()
    scripts_dir = skill_dir / "scripts"
    if not scripts_dir.is_dir():
        return result
    for script in sorted(scripts_dir.iterdir()):
        if not script.name.endswith(rules.EXECUTABLE_SCRIPT_SUFFIXES):
            continue
        mode = script.stat().st_mode
        if not mode & (stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH):
            result.warn(f"Script not executable: scripts/{script.name} (run chmod +x)")
    return result


def _read_markdown(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def validate_skill(skill_dir: Union[str, Path]) -> ValidationResult:
    """Run every per-skill check against one skill directory."""
    skill_dir = Path(skill_dir)
    result = ValidationResult()

    dir_name = skill_dir.name
    if len(dir_name) < rules.MIN_NAME_LENGTH:
        result.error(
            f"Directory name '{dir_name}' is too short ({len(dir_name)} chars, "
            f"min {rules.MIN_NAME_LENGTH}). Use a descriptive name, not an abbreviation"
        )

    skill_file = skill_dir / SKILL_FILENAME
    if not skill_file.exists():
        return ValidationResult(errors=[f"{SKILL_FILENAME} not found"], warnings=result.warnings)

    try:
        skill_content = _read_markdown(skill_file)
    except (OSError, UnicodeDecodeError) as e:
        result.error(f"Could not read {SKILL_FILENAME}: {e}")
    else:
        result.extend(validate_skill_md(skill_file, skill_content))
        result.extend(cross_validate_references(skill_dir, skill_content))

    for ref_path in SkillLoader.iter_reference_files(skill_dir):
        try:
            ref_content = _read_markdown(ref_path)
        except (OSError, UnicodeDecodeError) as e:
            result.error(f"{ref_path.name}: could not read ({e})")
            continue
        result.extend(validate_reference_md(ref_path, ref_content))

    for entry in sorted(skill_dir.iterdir()):
        if rules.is_cli_excluded(entry.name):
            result.warn(f"'{entry.name}' is excluded by the skills CLI during installation")

    result.extend(_check_scripts(skill_dir))
    return result


# ----------------------------------------------------------------------
# Corpus
# ----------------------------------------------------------------------

def check_description_conflicts(
    descriptions: Dict[str, str],
    threshold: float = rules.DEFAULT_CONFLICT_THRESHOLD,
) -> List[str]:
    """Warn about skill pairs whose descriptions share most of their trigger words."""
    warnings = []
    words = {name: rules.extract_trigger_words(desc) for name, desc in descriptions.items()}

    for (name1, words1), (name2, words2) in combinations(words.items(), 2):
        if not words1 or not words2:
            continue
        similarity = rules.jaccard(words1, words2)
        if similarity >= threshold:
            common = sorted(words1 & words2)[:5]
            warnings.append(
                f"Similar descriptions: '{name1}' and '{name2}' "
                f"({int(similarity * 100 + 0.5)}% overlap, common: {', '.join(common)})"
            )
    return warnings


def check_delegations(skill_file: Path, known_skills: Set[str]) -> ValidationResult:
    """Delegation targets must be skills that exist in the corpus."""
    result = ValidationResult()
    try:
        content = _read_markdown(skill_file)
    except (OSError, UnicodeDecodeError) as e:
        # validate_skill already reports the unreadable file
        logger.warning("Could not read %s: %s", skill_file, e)
        return result
    _, body = parse_frontmatter(content)
    section = None
    for title, text in split_sections(body).items():
        if title.lower() == "delegation":
            section = text
            break
    for target in extract_delegations(section, known_skills):
        if target not in known_skills:
            result.warn(f"Delegation to unknown skill '{target}'")
    return result


def _read_description(skill_file: Path) -> Optional[str]:
    try:
        frontmatter, _ = parse_frontmatter(_read_markdown(skill_file))
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", skill_file, e)
        return None
    value = frontmatter.get("description")
    return str(value) if value else None


def validate_corpus(
    skill_dirs: Iterable[Union[str, Path]],
    conflict_threshold: float = rules.DEFAULT_CONFLICT_THRESHOLD,
    known_skills: Optional[Set[str]] = None,
) -> CorpusReport:
    """Validate several skills and cross-check their descriptions.

    Args:
        skill_dirs: Skill directories to validate.
        conflict_threshold: Jaccard similarity at which descriptions conflict.
        known_skills: Names of every skill in the corpus. When given,
            Delegation targets are checked against it.
    """
    report = CorpusReport()
    descriptions: Dict[str, str] = {}

    for skill_dir in skill_dirs:
        skill_dir = Path(skill_dir)
        name = skill_dir.name
        result = validate_skill(skill_dir)
        skill_file = skill_dir / SKILL_FILENAME

        description = ""
        if skill_file.exists():
            if known_skills is not None:
                result.extend(check_delegations(skill_file, known_skills))
            description = _read_description(skill_file) or ""
            if description:
                descriptions[name] = description

        report.skills.append(SkillReport(name=name, path=skill_dir, result=result, description=description))
        logger.debug("%s: %d error(s), %d warning(s)", name, len(result.errors), len(result.warnings))

    if not report.single and len(descriptions) > 1:
        report.conflicts = check_description_conflicts(descriptions, conflict_threshold)

    logger.info(
        "Validated %d skill(s): %d failed, %d warning(s)",
        len(report.skills),
        len(report.failed_skills),
        report.total_warnings,
    )
    return report
