"""Exception hierarchy for wayfind."""
from __future__ import annotations

from typing import Any, Dict, Optional


class WayfindError(Exception):
    """Base exception for all wayfind-specific errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(WayfindError):
    """Raised when configuration is invalid or missing."""


class GenerationError(WayfindError):
    """Base class for instruction generation errors."""


class ProviderError(GenerationError):
    """Raised when the generative text service fails or returns an error status."""


class GenerationFailed(GenerationError):
    """Raised when a completed stream yields no descriptive steps."""


class GenerationCancelled(GenerationError):
    """Raised when a streaming read is aborted by the caller."""
