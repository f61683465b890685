"""
Exception hierarchy for oncalldash.

Collectors raise these internally; the backend's fail-safe decorator turns
them into CollectorFailed events so that nothing propagates into the UI loop.
"""

from typing import Optional


class OnCallError(Exception):
    """Base class for all oncalldash errors."""


class CollectorError(OnCallError):
    """An external tool or endpoint failed for one data source."""

    def __init__(self, source, message: str, output: Optional[str] = None):
        super().__init__(message)
        self.source = source
        self.message = message
        self.output = output

    def __str__(self) -> str:
        if self.output:
            return f"{self.message}\n{self.output.strip()}"
        return self.message


class ConfigError(OnCallError):
    """Configuration file could not be read or is invalid."""
