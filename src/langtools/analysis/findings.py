"""Result records shared by both analysis layers."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Finding:
    category: str
    name: str
    line: int  # 1-based
    column: int  # 0-based
    enclosing_scope: str
    message: str

    def to_dict(self) -> dict:
        return {
            "category": self.category,
            "name": self.name,
            "line": self.line,
            "column": self.column,
            "enclosingScope": self.enclosing_scope,
            "message": self.message,
        }


@dataclass
class FileReport:
    file: str
    findings: list[Finding] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        d = {"file": self.file, "findings": [f.to_dict() for f in self.findings]}
        if self.error is not None:
            d["error"] = self.error
        return d


def sort_findings(findings: list[Finding]) -> list[Finding]:
    return sorted(findings, key=lambda f: (f.line, f.column, f.category, f.name))
