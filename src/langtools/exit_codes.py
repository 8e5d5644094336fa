"""Standardized CLI exit codes for lang-tools.

Exit code scheme (POSIX + SAST tool conventions):

    0  SUCCESS        -- command completed, no dead code found (or info-only output)
    1  GENERAL_ERROR  -- unexpected failure, crash, unhandled exception
    2  USAGE_ERROR    -- invalid arguments, bad flags, unknown command (Click default)
    3  CONFIG_ERROR   -- config file or profile definition cannot be interpreted
    5  GATE_FAILURE   -- findings reported and --fail-on-findings was given
    6  PARTIAL        -- command completed but some files could not be analyzed

CI tools can differentiate between "analysis found dead code" (5),
"policy is broken" (3) and "tool crashed" (1).
"""

from __future__ import annotations

import click

# ---------------------------------------------------------------------------
# Exit code constants
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_ERROR: int = 1
EXIT_USAGE: int = 2
EXIT_CONFIG: int = 3
EXIT_GATE_FAILURE: int = 5
EXIT_PARTIAL: int = 6

# ---------------------------------------------------------------------------
# Custom exceptions (caught by Click's error handler)
# ---------------------------------------------------------------------------


class LangToolsError(click.ClickException):
    """Base class for lang-tools errors with exit codes."""

    def __init__(self, message: str, exit_code: int = EXIT_ERROR):
        super().__init__(message)
        self.exit_code = exit_code

    def format_message(self) -> str:
        return self.message


class ConfigurationError(LangToolsError):
    """Raised when the active profiles or the config file are invalid."""

    def __init__(self, message: str = "Invalid lang-tools configuration."):
        super().__init__(message, EXIT_CONFIG)

