"""JSON output envelope shared by every CLI command.

Every ``--json`` invocation prints exactly one object of this shape, so
scripts and UI layers can tell "no data yet" (success with empty data) from
a failure (``success: false`` with errors).
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import IO, Any, Optional

SCHEMA_VERSION = "1.0"


@dataclass
class Envelope:
    """Result of one command."""

    command: str
    success: bool = True
    data: dict[str, Any] = field(default_factory=dict)
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)
    suggestions: list[str] = field(default_factory=list)
    human_summary: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "command": self.command,
            "data": self.data,
            "errors": self.errors,
            "warnings": self.warnings,
            "suggestions": self.suggestions,
            "human_summary": self.human_summary,
            "timestamp": datetime.now().isoformat(),
            "schema_version": SCHEMA_VERSION,
        }

    def to_json(self, indent: int = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def ok(
    command: str,
    data: Optional[dict[str, Any]] = None,
    human_summary: str = "",
    warnings: Optional[list[str]] = None,
) -> Envelope:
    """Successful result."""
    return Envelope(
        command=command,
        data=data or {},
        human_summary=human_summary,
        warnings=warnings or [],
    )


def failure(command: str, error: str, suggestions: Optional[list[str]] = None) -> Envelope:
    """Failed result with a single error message."""
    return Envelope(
        command=command,
        success=False,
        errors=[error],
        suggestions=suggestions or [],
        human_summary=f"Error: {error}",
    )


def emit(envelope: Envelope, file: Optional[IO[str]] = None) -> None:
    """Print the envelope as JSON to stdout or ``file``."""
    text = envelope.to_json()
    if file is not None:
        file.write(text)
    else:
        print(text)
