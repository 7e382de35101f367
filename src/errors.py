"""Exception types raised inside tool adapters.

Adapters raise these internally and convert them into error ``ToolResult``
values at their boundary. ``ConfigurationError`` is the exception that
escapes: it is raised at construction time when required settings are absent.
"""

from typing import Optional

from src.models import ToolErrorKind


class ToolAdapterError(Exception):
    """Base class for failures that become error results."""

    kind: ToolErrorKind = ToolErrorKind.INTERNAL

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(ToolAdapterError):
    """The external service rejected the credentials (HTTP 401/403)."""

    kind = ToolErrorKind.AUTHENTICATION


class TransportError(ToolAdapterError):
    """The request never produced an HTTP response (network error, timeout)."""

    kind = ToolErrorKind.TRANSPORT


class ValidationError(ToolAdapterError):
    """The invocation is missing a required parameter or has an invalid one."""

    kind = ToolErrorKind.VALIDATION


class ServiceError(ToolAdapterError):
    """The external service answered but reported a failure or a malformed body."""

    kind = ToolErrorKind.SERVICE


class ConfigurationError(Exception):
    """Required configuration is missing when an adapter is constructed."""
