"""File-change watcher that re-runs validation when skill files change."""

import logging
import time
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

WATCH_PATTERNS = [
    "**/*.md",
    "**/scripts/*",
    "**/metadata.json",
]


class SkillWatcher:
    """Polls mtimes under one or more roots and reports changed files."""

    def __init__(
        self,
        roots: Iterable[Path],
        on_change: Optional[Callable[[List[Path]], None]] = None,
        check_interval: float = 2.0,
    ):
        self.roots = [Path(r) for r in roots]
        self.on_change = on_change
        self.check_interval = check_interval
        self._last_check = 0.0
        self._watch_mtimes: Dict[str, float] = {}
        self.refresh_snapshot()

    def _iter_watch_files(self):
        """Yield files whose changes should trigger re-validation."""
        for root in self.roots:
            if root.is_file():
                yield root
                continue
            for pattern in WATCH_PATTERNS:
                yield from root.glob(pattern)

    def _snapshot(self) -> Dict[str, float]:
        snapshot: Dict[str, float] = {}
        for path in self._iter_watch_files():
            if not path.is_file():
                continue
            try:
                snapshot[str(path)] = path.stat().st_mtime
            except OSError:
                continue
        return snapshot

    def refresh_snapshot(self):
        """Capture latest file mtimes for watched files."""
        self._watch_mtimes = self._snapshot()

    def detect_changes(self) -> List[Path]:
        """Return files added, modified, or removed since the last snapshot."""
        current = self._snapshot()
        changed = [
            Path(key) for key, mtime in current.items()
            if key not in self._watch_mtimes or mtime > self._watch_mtimes[key]
        ]
        changed.extend(Path(key) for key in self._watch_mtimes if key not in current)
        self._watch_mtimes = current
        return sorted(changed)

    def check_and_apply(self) -> List[Path]:
        """Run the callback if anything changed and the interval has elapsed."""
        now = time.time()
        if now - self._last_check < self.check_interval:
            return []
        self._last_check = now

        changed = self.detect_changes()
        if not changed:
            return []

        logger.info("Changes detected: %s", [str(p) for p in changed])
        if self.on_change is not None:
            self.on_change(changed)
        return changed

    def run_forever(self, max_cycles: Optional[int] = None):
        """Poll until interrupted (or for max_cycles polls)."""
        cycles = 0
        try:
            while max_cycles is None or cycles < max_cycles:
                self.check_and_apply()
                cycles += 1
                time.sleep(self.check_interval)
        except KeyboardInterrupt:
            logger.info("Watcher stopped")
