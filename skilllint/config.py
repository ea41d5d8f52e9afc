"""Runtime settings for skilllint, read from the environment (and .env)."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_SKILLS_DIR = "skills"
DEFAULT_HISTORY_DB = str(Path("data") / "skilllint.db")


def _env_float(key: str, default: float) -> float:
    raw = os.getenv(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %s=%r (using %s)", key, raw, default)
        return default


@dataclass
class LintConfig:
    skills_dir: Path = Path(DEFAULT_SKILLS_DIR)
    conflict_threshold: float = 0.5
    history_db: str = DEFAULT_HISTORY_DB
    watch_interval: float = 2.0
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "LintConfig":
        """Build settings from SKILLLINT_* environment variables."""
        if load_env_file:
            load_dotenv()
        threshold = _env_float("SKILLLINT_CONFLICT_THRESHOLD", 0.5)
        if not 0.0 < threshold <= 1.0:
            logger.warning("SKILLLINT_CONFLICT_THRESHOLD out of range: %s (using 0.5)", threshold)
            threshold = 0.5
        return cls(
            skills_dir=Path(os.getenv("SKILLLINT_SKILLS_DIR", DEFAULT_SKILLS_DIR)),
            conflict_threshold=threshold,
            history_db=os.getenv("SKILLLINT_HISTORY_DB", DEFAULT_HISTORY_DB),
            watch_interval=_env_float("SKILLLINT_WATCH_INTERVAL", 2.0),
            log_level=os.getenv("SKILLLINT_LOG_LEVEL", "WARNING").upper(),
        )
