"""Error types for bundle-building flows."""

from __future__ import annotations


class PropParlayError(Exception):
    """Base error for prop-parlay operations."""


class CandidateDataError(PropParlayError):
    """Raised when one upstream candidate row cannot be parsed."""


class ConfigError(PropParlayError):
    """Raised when runtime or engine configuration is invalid."""


class InputFileError(PropParlayError):
    """Raised when an input table is missing or has an unsupported format."""
