"""
skilllint Run History: SQLite audit trail of validation runs.
"""

import json
import os
import sqlite3
from datetime import datetime, timezone
from typing import Dict, List, Optional

from skilllint.validation.report import CorpusReport


class RunHistory:
    """Records the outcome of every recorded validation run to SQLite."""

    def __init__(self, db_path: str):
        directory = os.path.dirname(db_path)
        if directory:
            os.makedirs(directory, exist_ok=True)

        self.db_path = db_path
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self._create_table()

    def _create_table(self):
        self.conn.execute("""
            CREATE TABLE IF NOT EXISTS runs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                timestamp TEXT,
                skills INTEGER,
                errors INTEGER,
                warnings INTEGER,
                failed_skills TEXT,
                exit_code INTEGER
            )
        """)
        self.conn.commit()

    def _row_to_dict(self, row: sqlite3.Row) -> Dict:
        record = dict(row)
        record["failed_skills"] = json.loads(record["failed_skills"] or "[]")
        return record

    def record(self, report: CorpusReport, exit_code: Optional[int] = None) -> int:
        """Insert a run record; returns its id."""
        cursor = self.conn.execute(
            """INSERT INTO runs (timestamp, skills, errors, warnings, failed_skills, exit_code)
               VALUES (?, ?, ?, ?, ?, ?)""",
            (
                datetime.now(timezone.utc).isoformat(),
                len(report.skills),
                report.total_errors,
                report.total_warnings,
                json.dumps(report.failed_skills, ensure_ascii=False),
                report.exit_code() if exit_code is None else exit_code,
            ),
        )
        self.conn.commit()
        return cursor.lastrowid

    def get_recent(self, limit: int = 10) -> List[Dict]:
        """Return the most recent run records."""
        cursor = self.conn.execute(
            "SELECT * FROM runs ORDER BY id DESC LIMIT ?", (limit,)
        )
        return [self._row_to_dict(r) for r in cursor.fetchall()]

    def export_json(self) -> str:
        cursor = self.conn.execute("SELECT * FROM runs ORDER BY id ASC")
        rows = [self._row_to_dict(r) for r in cursor.fetchall()]
        return json.dumps(rows, ensure_ascii=False, indent=2)

    def close(self):
        self.conn.close()
