"""Structured exceptions for the Zendesk connector."""

from __future__ import annotations

from typing import Any, Optional


class ConnectorError(Exception):
    """Base exception for all connector errors."""


class ConfigError(ConnectorError):
    """Missing or invalid connector configuration."""


# ── Upstream transport ───────────────────────────────────────────

class TransportError(ConnectorError):
    """Network failure or non-2xx response from the Zendesk API."""

    def __init__(
        self,
        operation: str,
        message: str,
        status_code: Optional[int] = None,
        detail: Any = None,
        request_id: Optional[str] = None,
    ) -> None:
        self.operation = operation
        self.status_code = status_code
        self.message = message
        self.detail = detail
        self.request_id = request_id
        if status_code is None:
            super().__init__(f"zendesk-connector: {operation} failed: {message}")
        else:
            super().__init__(f"zendesk-connector: {operation} failed: [{status_code}] {message}")


class AuthError(TransportError):
    """401 Unauthorized — bad email or API token."""
    pass


class ForbiddenError(TransportError):
    """403 Forbidden — token lacks the required permission."""
    pass


class NotFoundError(TransportError):
    """404 Not Found — upstream object does not exist."""
    pass


class ValidationError(TransportError):
    """422 Unprocessable Entity — upstream rejected the payload."""
    pass


class RateLimitedError(TransportError):
    """429 Too Many Requests."""
    pass


class ServerError(TransportError):
    """500+ — server-side error."""
    pass


# ── Pagination / identifiers ─────────────────────────────────────

class MalformedCursorError(ConnectorError):
    """A page cursor could not be derived or parsed."""

    def __init__(self, cursor: str, reason: str = "invalid page token") -> None:
        self.cursor = cursor
        super().__init__(f"zendesk-connector: {reason}: {cursor!r}")


class IdentifierParseError(ConnectorError):
    """A resource id expected to be numeric is not."""

    def __init__(self, value: str) -> None:
        self.value = value
        super().__init__(f"zendesk-connector: resource id is not numeric: {value!r}")


# ── Grant / revoke preconditions ─────────────────────────────────

class InvalidPrincipalTypeError(ConnectorError):
    """The principal's resource type cannot receive this entitlement."""

    def __init__(self, principal_type: str, expected: str, action: str = "granted") -> None:
        self.principal_type = principal_type
        self.expected = expected
        super().__init__(
            f"zendesk-connector: only {expected} principals can be {action} this entitlement "
            f"(got {principal_type})"
        )


class NotATeamMemberError(ConnectorError):
    """The upstream user is an end-user and cannot join a group."""

    def __init__(self, user_id: int, role: str) -> None:
        self.user_id = user_id
        self.role = role
        super().__init__(f"zendesk-connector: user {user_id} must be a team member (role={role})")


class MutationNotSupportedError(ConnectorError):
    """Grant/revoke requested on a read-only resource type."""

    def __init__(self, resource_type: str, action: str) -> None:
        self.resource_type = resource_type
        self.action = action
        super().__init__(f"zendesk-connector: {action} is not supported for {resource_type} resources")
