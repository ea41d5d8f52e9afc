"""Validation results and their console / JSON renderings."""

import json
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional


class Severity(Enum):
    ERROR = "error"      # Fails the skill
    WARNING = "warning"  # Reported, does not fail (unless --strict)


@dataclass
class Issue:
    severity: Severity
    message: str
    skill: Optional[str] = None

    def to_dict(self) -> Dict:
        return {"severity": self.severity.value, "message": self.message, "skill": self.skill}


@dataclass
class ValidationResult:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def error(self, message: str):
        self.errors.append(message)

    def warn(self, message: str):
        self.warnings.append(message)

    def extend(self, other: "ValidationResult"):
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)

    def issues(self, skill: Optional[str] = None) -> List[Issue]:
        return [Issue(Severity.ERROR, e, skill) for e in self.errors] + [
            Issue(Severity.WARNING, w, skill) for w in self.warnings
        ]


@dataclass
class SkillReport:
    name: str
    path: Path
    result: ValidationResult
    description: str = ""

    @property
    def failed(self) -> bool:
        return not self.result.ok


@dataclass
class CorpusReport:
    skills: List[SkillReport] = field(default_factory=list)
    conflicts: List[str] = field(default_factory=list)

    @property
    def single(self) -> bool:
        return len(self.skills) == 1

    @property
    def failed_skills(self) -> List[str]:
        return [s.name for s in self.skills if s.failed]

    @property
    def total_errors(self) -> int:
        return sum(len(s.result.errors) for s in self.skills)

    @property
    def total_warnings(self) -> int:
        return sum(len(s.result.warnings) for s in self.skills) + len(self.conflicts)

    def exit_code(self, strict: bool = False) -> int:
        if self.failed_skills:
            return 1
        if strict and self.total_warnings:
            return 1
        return 0

    def issues(self) -> List[Issue]:
        """Every finding, flattened; conflicts belong to no single skill."""
        found: List[Issue] = []
        for s in self.skills:
            found.extend(s.result.issues(s.name))
        found.extend(Issue(Severity.WARNING, c) for c in self.conflicts)
        return found

    def to_dict(self) -> Dict:
        return {
            "skills": [
                {
                    "name": s.name,
                    "path": str(s.path),
                    "description": s.description,
                    "passed": not s.failed,
                    "errors": list(s.result.errors),
                    "warnings": list(s.result.warnings),
                }
                for s in self.skills
            ],
            "conflicts": list(self.conflicts),
            "issues": [i.to_dict() for i in self.issues()],
            "failed_skills": self.failed_skills,
            "total_errors": self.total_errors,
            "total_warnings": self.total_warnings,
        }


# ----------------------------------------------------------------------
# Rendering
# ----------------------------------------------------------------------

def _render_single(report: SkillReport) -> List[str]:
    out: List[str] = []
    errors, warnings = report.result.errors, report.result.warnings
    if errors:
        out.append(f"x {report.name}: FAILED")
        out.append("")
        out.append("Errors:")
        out.extend(f"  x {e}" for e in errors)
        out.append("")
    if warnings:
        out.append("Warnings:")
        out.extend(f"  ! {w}" for w in warnings)
        out.append("")
    if not errors and not warnings:
        out.append(f"  {report.name}: passed")
    elif not errors:
        out.append(f"  {report.name}: valid (with warnings)")
    return out


def _render_compact(report: SkillReport) -> List[str]:
    errors, warnings = report.result.errors, report.result.warnings
    if errors:
        return [f"x {report.name}: FAILED"] + [f"   x {e}" for e in errors]
    if warnings:
        return [f"  {report.name}: valid ({len(warnings)} warning(s))"]
    return [f"  {report.name}: passed"]


def render_text(report: CorpusReport) -> str:
    """Console layout: verbose for one skill, compact with a summary for many."""
    if report.single:
        return "\n".join(_render_single(report.skills[0]))

    out = [f"Validating {len(report.skills)} skill(s)...", ""]
    for skill in report.skills:
        out.extend(_render_compact(skill))

    if report.conflicts:
        out.append("")
        out.append("! Description conflicts:")
        out.extend(f"   {w}" for w in report.conflicts)

    out.append("")
    failed = report.failed_skills
    if failed:
        out.append(f"x {len(failed)} skill(s) failed: {', '.join(failed)}")
    else:
        out.append(f"  All {len(report.skills)} skill(s) passed")
    if report.total_warnings:
        out.append(f"  {report.total_warnings} total warning(s)")
    return "\n".join(out)


def render_json(report: CorpusReport) -> str:
    return json.dumps(report.to_dict(), ensure_ascii=False, indent=2)
