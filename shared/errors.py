"""
Shared error handling for the integrity enforcer.
"""

from typing import Dict, Any, Optional


class EnforcerException(Exception):
    """Base exception for enforcer services."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a plain error payload."""
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class PolicyFormatError(EnforcerException):
    """Policy violates a structural invariant."""

    def __init__(self, message: str = "Invalid policy format", details: Optional[Dict[str, Any]] = None):
        super().__init__("POLICY_FORMAT_ERROR", message, details)


class ValidationError(EnforcerException):
    """Validation-related errors."""

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class ExternalServiceError(EnforcerException):
    """External service errors."""

    def __init__(self, service: str, message: str = "External service error", details: Optional[Dict[str, Any]] = None):
        super().__init__("EXTERNAL_SERVICE_ERROR", f"{service}: {message}", details)


class IdentityNotFoundError(EnforcerException):
    """Requested service identity does not exist."""

    def __init__(self, message: str = "Service identity not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("IDENTITY_NOT_FOUND", message, details)
