"""
bind_directory.validation.runner
--------------------------------
Runs the four corpus validators in a fixed order (Structure, Manifests,
JWKS, Logos) and folds their findings into one report. The run passes
when no validator reported an error; warnings never fail it.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bind_directory.logger import get_logger
from bind_directory.storage import ParticipantRepository, load_repository
from .jwks import validate_jwks
from .logos import validate_logos
from .manifest import validate_manifests
from .structure import validate_structure

log = get_logger("bind_directory.validation")


@dataclass
class ValidationResult:
    name: str
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def to_dict(self) -> Dict[str, Any]:
        return {"name": self.name, "errors": list(self.errors), "warnings": list(self.warnings)}


@dataclass
class ValidationReport:
    results: List[ValidationResult] = field(default_factory=list)

    @property
    def total_errors(self) -> int:
        return sum(len(r.errors) for r in self.results)

    @property
    def total_warnings(self) -> int:
        return sum(len(r.warnings) for r in self.results)

    @property
    def ok(self) -> bool:
        return self.total_errors == 0

    @property
    def exit_code(self) -> int:
        return 0 if self.ok else 1

    def get(self, name: str) -> Optional[ValidationResult]:
        return next((r for r in self.results if r.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "ok": self.ok,
            "errors": self.total_errors,
            "warnings": self.total_warnings,
            "results": [r.to_dict() for r in self.results],
        }

    def render(self) -> str:
        lines = []
        for r in self.results:
            lines.append(f"{'✓' if r.ok else '✗'} {r.name}")
            lines.extend(f"    ⚠ {w}" for w in r.warnings)
            lines.extend(f"    ✗ {e}" for e in r.errors)
        lines.append("")
        lines.append(f"Summary: {self.total_errors} error(s), {self.total_warnings} warning(s)")
        return "\n".join(lines)


def run_all(repo: ParticipantRepository, now: Optional[int] = None) -> ValidationReport:
    report = ValidationReport([
        ValidationResult("Structure", *validate_structure(repo)),
        ValidationResult("Manifests", *validate_manifests(repo)),
        ValidationResult("JWKS", *validate_jwks(repo, now=now)),
        ValidationResult("Logos", *validate_logos(repo)),
    ])
    log.info(f"validation finished: {report.total_errors} error(s), {report.total_warnings} warning(s)")
    return report


def main(config: Optional[dict] = None) -> int:
    report = run_all(load_repository(config))
    print(report.render())
    return report.exit_code
