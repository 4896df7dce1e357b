"""Zendesk connector — syncs Zendesk identities into an access graph."""

from zendesk_connector.client import ZendeskClient
from zendesk_connector.config import Settings, load_settings
from zendesk_connector.connector import Connector, SyncRunner
from zendesk_connector.errors import (
    AuthError,
    ConfigError,
    ConnectorError,
    ForbiddenError,
    IdentifierParseError,
    InvalidPrincipalTypeError,
    MalformedCursorError,
    MutationNotSupportedError,
    NotATeamMemberError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
    ValidationError,
)

__version__ = "1.0.0"

__all__ = [
    "Connector",
    "Settings",
    "SyncRunner",
    "ZendeskClient",
    "load_settings",
    "AuthError",
    "ConfigError",
    "ConnectorError",
    "ForbiddenError",
    "IdentifierParseError",
    "InvalidPrincipalTypeError",
    "MalformedCursorError",
    "MutationNotSupportedError",
    "NotATeamMemberError",
    "NotFoundError",
    "RateLimitedError",
    "ServerError",
    "TransportError",
    "ValidationError",
]
