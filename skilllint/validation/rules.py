"""Limits, word lists, and small helpers shared by the validators."""

import re
from typing import List, Pattern, Set, Tuple

# Line limits
SKILL_MAX_LINES = 500
SKILL_WARN_LINES = 400
SKILL_TARGET_LINES = 150
REF_MAX_LINES = 750
REF_WARN_LINES = 500

# Frontmatter limits
MIN_NAME_LENGTH = 4
MAX_NAME_LENGTH = 64
MAX_DESCRIPTION_LENGTH = 1024
RESERVED_WORDS = ["anthropic", "claude"]
MIN_TRIGGER_WORDS = 5
RECOMMENDED_TRIGGER_WORDS = 8

# Optional boolean flags
BOOLEAN_FLAGS = ["user-invocable", "disable-model-invocation"]

# Files the skills CLI drops when installing a skill
SKILLS_CLI_EXCLUDED = {"README.md", "metadata.json"}

EXECUTABLE_SCRIPT_SUFFIXES = (".py", ".sh")

DEFAULT_CONFLICT_THRESHOLD = 0.5

NAME_RE = re.compile(r"^[a-z0-9-]+$")
XML_TAG_RE = re.compile(r"<[^>]+>")

COMMON_WORDS: Set[str] = {
    "use", "when", "for", "the", "and", "or", "to", "in", "on", "with",
    "this", "that", "is", "are", "be", "been", "being", "have", "has", "had",
    "do", "does", "did", "will", "would", "could", "should", "may", "might",
    "must", "shall", "can", "need", "about", "into", "through", "during",
    "before", "after", "above", "below", "from", "up", "down", "out", "off",
    "over", "under", "again", "further", "then", "once", "here", "there",
    "all", "each", "few", "more", "most", "other", "some", "such", "no",
    "nor", "not", "only", "own", "same", "so", "than", "too", "very", "just",
    "also", "now", "of", "a", "an", "as", "at", "by", "if", "it", "its",
    "any", "how", "what", "which", "who", "whom", "these", "those", "am",
    "was", "were", "you", "your", "they", "them", "their", "we", "our", "i",
    "me", "my", "he", "she", "him", "her", "his", "hers",
    # skill-writing filler
    "skill", "skills", "best", "practices", "patterns", "creating",
    "building", "implementing", "working", "handling", "managing", "using",
}

# Checked in order; only the first hit is reported.
VAGUE_PATTERNS: List[Tuple[Pattern, str]] = [
    (re.compile(r"\bhelps?\s+with\b"), "helps with"),
    (re.compile(r"\bworks?\s+with\b"), "works with"),
    (re.compile(r"\bassists?\s+with\b"), "assists with"),
    (re.compile(r"\bfor\s+working\s+with\b"), "for working with"),
    (re.compile(r"\bhandles?\b"), "handles"),
    (re.compile(r"\bmanages?\b"), "manages"),
]

FIRST_PERSON_OPENERS = {"i", "you", "we"}

_WORD_RE = re.compile(r"[a-z]+")


def extract_trigger_words(text: str) -> Set[str]:
    """Distinctive lowercase words of a description."""
    return {w for w in _WORD_RE.findall(text.lower()) if w not in COMMON_WORDS}


def jaccard(a: Set[str], b: Set[str]) -> float:
    union = a | b
    if not union:
        return 0.0
    return len(a & b) / len(union)


def is_cli_excluded(filename: str) -> bool:
    return filename in SKILLS_CLI_EXCLUDED or filename.startswith("_")
