"""Plain-text and JSON output helpers for the CLI."""

from __future__ import annotations

import json as _json
from datetime import datetime, timezone

# Envelope schema versioning (semver: major.minor.patch)
ENVELOPE_SCHEMA_VERSION = "1.0.0"
ENVELOPE_SCHEMA_NAME = "lang-tools-envelope-v1"


def loc(path: str, line: int | None = None, column: int | None = None) -> str:
    if line is None:
        return path
    if column is None:
        return f"{path}:{line}"
    return f"{path}:{line}:{column}"


def finding_line(path: str, finding: dict) -> str:
    """``file:line:col  category  message`` for one finding dict."""
    return "  ".join([
        loc(path, finding.get("line"), finding.get("column")),
        finding.get("category", ""),
        finding.get("message", ""),
    ])


def format_table(headers: list[str], rows: list[list[str]]) -> str:
    if not rows:
        return "(none)"
    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(str(cell)))
    lines = ["  ".join(h.ljust(widths[i]) for i, h in enumerate(headers))]
    lines.append("  ".join("-" * w for w in widths))
    for row in rows:
        lines.append("  ".join(str(cell).ljust(widths[i]) for i, cell in enumerate(row)))
    return "\n".join(lines)


def to_json(data) -> str:
    """Serialize data to a JSON string with deterministic key ordering.

    Uses ``sort_keys=True`` so that identical data always produces
    byte-identical output.
    """
    return _json.dumps(data, indent=2, default=str, sort_keys=True)


def json_envelope(command: str, summary: dict | None = None, **payload) -> dict:
    """Wrap command output in a self-describing envelope.

    Returns a dict with at minimum::

        {
            "schema":         "lang-tools-envelope-v1",
            "schema_version": "1.0.0",
            "command":        "dead-code",
            "version":        "<current>",
            "summary":        {"verdict": "...", ...},
            "_meta":          {"timestamp": "2026-02-12T14:30:00Z"},
            ...payload
        }

    The timestamp lives in ``_meta`` so the content keys stay identical
    across invocations on unchanged input.
    """
    ts = datetime.now(timezone.utc).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    out: dict = {
        "schema": ENVELOPE_SCHEMA_NAME,
        "schema_version": ENVELOPE_SCHEMA_VERSION,
        "command": command,
        "version": _get_version(),
        "summary": summary or {},
    }
    out.update(payload)
    out["_meta"] = {"timestamp": ts}
    return out


def _get_version() -> str:
    """Return lang-tools version string."""
    from langtools import __version__

    return __version__
