"""ResourceSyncer contract shared by every resource-type handler."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from zendesk_connector.client.client import ZendeskClient
from zendesk_connector.connector.resources import (
    Entitlement,
    Grant,
    PURPOSE_PERMISSION,
    Resource,
    ResourceId,
    ResourceType,
)
from zendesk_connector.errors import InvalidPrincipalTypeError, MutationNotSupportedError

logger = logging.getLogger("zendesk_connector.connector")

ACTION_GRANT = "grant"
ACTION_REVOKE = "revoke"


@dataclass(frozen=True)
class MutationResult:
    """Outcome of a grant or revoke applied upstream."""

    action: str
    entitlement_id: str
    principal_id: ResourceId
    upstream_id: Optional[int] = None
    already_applied: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "action": self.action,
            "entitlement_id": self.entitlement_id,
            "principal_id": self.principal_id.to_dict(),
            "upstream_id": self.upstream_id,
            "already_applied": self.already_applied,
        }


class ResourceSyncer(ABC):
    """One resource type: list its resources, entitlements and grants.

    Every paged call takes the cursor returned by the previous call ("" for
    the first page) and returns ``(items, next_page_token)``; "" as the next
    token means the listing is complete.
    """

    resource_type_descriptor: ResourceType

    def __init__(self, client: ZendeskClient, page_size: int = 100) -> None:
        self.client = client
        self.page_size = page_size

    def resource_type(self) -> ResourceType:
        return self.resource_type_descriptor

    @abstractmethod
    def list(self, parent_id: Optional[ResourceId], page_token: str = "") -> Tuple[List[Resource], str]: ...

    @abstractmethod
    def entitlements(self, resource: Resource, page_token: str = "") -> Tuple[List[Entitlement], str]: ...

    @abstractmethod
    def grants(self, resource: Resource, page_token: str = "") -> Tuple[List[Grant], str]: ...

    # Read-only by default; group and org override these.

    def grant(self, principal: Resource, entitlement: Entitlement) -> MutationResult:
        raise MutationNotSupportedError(self.resource_type_descriptor.id, ACTION_GRANT)

    def revoke(self, grant: Grant) -> MutationResult:
        raise MutationNotSupportedError(self.resource_type_descriptor.id, ACTION_REVOKE)


# ── Shared helpers ───────────────────────────────────────────────

def require_principal_type(principal_id: ResourceId, expected: ResourceType, action: str) -> None:
    """Reject a principal of the wrong type before anything reaches upstream."""
    if principal_id.resource_type == expected.id:
        return
    logger.warning(
        "zendesk-connector: only %s principals can be %s",
        expected.id,
        "granted" if action == ACTION_GRANT else "revoked",
        extra={"principal_type": principal_id.resource_type, "principal_id": principal_id.resource},
    )
    raise InvalidPrincipalTypeError(
        principal_id.resource_type,
        expected.id,
        action="granted" if action == ACTION_GRANT else "revoked",
    )


def membership_entitlement(
    resource: Resource,
    slug: str,
    kind: str,
    grantable_to: Tuple[str, ...],
    purpose: str = PURPOSE_PERMISSION,
) -> Entitlement:
    """Entitlement with the display name/description pattern used for groups and roles."""
    return Entitlement(
        resource=resource,
        slug=slug,
        display_name=f"{resource.display_name} Role {slug}",
        description=f"{slug} of Zendesk {resource.display_name} {kind}",
        grantable_to=grantable_to,
        purpose=purpose,
    )
