"""Resource/entitlement/grant synchronization engine."""

from zendesk_connector.connector.base import MutationResult, ResourceSyncer
from zendesk_connector.connector.connector import Connector
from zendesk_connector.connector.resources import (
    Entitlement,
    Grant,
    Resource,
    ResourceId,
    ResourceType,
)
from zendesk_connector.connector.sync import SyncResult, SyncRunner

__all__ = [
    "Connector",
    "Entitlement",
    "Grant",
    "MutationResult",
    "Resource",
    "ResourceId",
    "ResourceSyncer",
    "ResourceType",
    "SyncResult",
    "SyncRunner",
]
