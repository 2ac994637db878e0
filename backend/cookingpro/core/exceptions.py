"""
Exception hierarchy for the CookingPro backend.

Network and configuration failures inherit from CookingProError so the
session and API layers can catch them broadly or specifically. Parsing and
normalization of model output never raise.
"""
from typing import Optional


class CookingProError(Exception):
    """Base exception for all CookingPro errors."""


class ConfigurationError(CookingProError):
    """Raised when no model credential is available. Fatal for the session."""


class PromptRenderError(CookingProError):
    """Raised when a rendered prompt still contains a placeholder token."""


class ModelCallError(CookingProError):
    """Raised when a model call fails. Surfaced to the caller as a failed turn."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientModelError(ModelCallError):
    """Timeouts, transport failures, rate limits and 5xx responses. Retried."""


class ModelRequestError(ModelCallError):
    """The provider rejected the request (4xx). Not retried."""


class SessionBusyError(CookingProError):
    """Raised when a turn is sent while the previous one is still outstanding."""
