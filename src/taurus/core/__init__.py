"""Taurus core module - shared types, errors, and masking helpers."""

from taurus.core.errors import (
    ConfigError,
    NotFoundError,
    NotificationFault,
    ProbeFault,
    TaurusError,
    ValidationError,
)
from taurus.core.security import (
    mask_api_key,
    mask_endpoint,
    sanitize_for_logging,
)
from taurus.core.types import Result

__all__ = [
    # Types
    "Result",
    # Errors
    "TaurusError",
    "ConfigError",
    "ValidationError",
    "NotFoundError",
    "ProbeFault",
    "NotificationFault",
    # Security utilities
    "mask_api_key",
    "mask_endpoint",
    "sanitize_for_logging",
]
