"""Exceptions raised by the skilllint API.

Lint findings are reported as ``Issue`` objects, not exceptions; these are
only raised when a caller asks for strict loading.
"""

from pathlib import Path
from typing import Optional


class SkillLintError(Exception):
    """Base class for skilllint errors."""


class FrontmatterError(SkillLintError):
    def __init__(self, message: str, path: Optional[Path] = None):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)
        self.message = message


class SkillNotFoundError(SkillLintError):
    pass
