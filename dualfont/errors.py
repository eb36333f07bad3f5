"""Error definitions and policy helpers for the dual-font formatter."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import Optional


class ErrorCategory(Enum):
    """Categorises runtime errors to apply policy thresholds."""

    FORMAT = auto()
    MARKUP = auto()


class DualFontError(Exception):
    """Base exception for all custom errors."""


class MarkupParseError(DualFontError):
    """Raised when a label looks like markup but cannot be parsed."""

    def __init__(self, message: str, *, tag: Optional[str] = None, offset: Optional[int] = None):
        super().__init__(message)
        self.tag = tag
        self.offset = offset


class AbortRequested(DualFontError):
    """Raised when the user elects to abort processing."""


class NonInteractiveAbort(DualFontError):
    """Raised when non-interactive policy dictates termination."""


class UnsupportedFileTypeError(DualFontError):
    """Raised when a given file extension is not supported."""


class OverwriteRefusedError(DualFontError):
    """Raised when attempting to overwrite an output without consent."""


class DiagramFormatError(DualFontError):
    """Raised when a diagram file cannot be read as draw.io XML."""


class ConfigurationError(DualFontError):
    """Raised when the configuration is invalid."""


@dataclass
class ErrorRecord:
    """Stores context for a handled error."""

    category: ErrorCategory
    message: str
    details: Optional[str] = None


class ErrorTracker:
    """Tracks consecutive and aggregate errors to satisfy policy rules."""

    CONSECUTIVE_LIMIT = 3
    TOTAL_LIMIT = 10

    def __init__(self) -> None:
        self.last_category: Optional[ErrorCategory] = None
        self.consecutive: int = 0
        self.total: int = 0

    def register(self, category: ErrorCategory) -> tuple[int, int, bool]:
        """Register a new error and return counters."""

        if self.last_category == category:
            self.consecutive += 1
        else:
            self.last_category = category
            self.consecutive = 1

        self.total += 1

        threshold_reached = (
            self.consecutive >= self.CONSECUTIVE_LIMIT
            or self.total >= self.TOTAL_LIMIT
        )

        return self.consecutive, self.total, threshold_reached

    def reset_consecutive(self) -> None:
        """Reset the consecutive counter after successful work."""

        self.consecutive = 0
        self.last_category = None
