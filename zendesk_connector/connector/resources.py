"""Access-graph data model: ResourceId, Resource, Entitlement, Grant.

All models are frozen dataclasses with to_dict() for serialization. They are
produced fresh on every sync pass and never mutated afterwards.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

TRAIT_USER = "user"
TRAIT_GROUP = "group"
TRAIT_ROLE = "role"

STATUS_ENABLED = "enabled"
STATUS_DISABLED = "disabled"
STATUS_UNSPECIFIED = "unspecified"

PURPOSE_ASSIGNMENT = "assignment"
PURPOSE_PERMISSION = "permission"


def _iso(value: Optional[datetime.datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.isoformat().replace("+00:00", "Z")


@dataclass(frozen=True)
class ResourceType:
    """Descriptor for one kind of resource the connector syncs."""

    id: str
    display_name: str
    traits: Tuple[str, ...] = ()
    annotations: Dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "display_name": self.display_name,
            "traits": list(self.traits),
            "annotations": dict(self.annotations),
        }


@dataclass(frozen=True)
class ResourceId:
    """Identity of a resource: (resource type id, upstream id as text)."""

    resource_type: str
    resource: str

    def __str__(self) -> str:
        return f"{self.resource_type}:{self.resource}"

    def to_dict(self) -> Dict[str, str]:
        return {"resource_type": self.resource_type, "resource": self.resource}


# ── Traits ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class UserTrait:
    profile: Dict[str, Any]
    emails: Tuple[str, ...] = ()
    status: str = STATUS_UNSPECIFIED
    login: str = ""
    account_type: str = "human"
    last_login: Optional[datetime.datetime] = None
    created_at: Optional[datetime.datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "profile": dict(self.profile),
            "emails": [{"address": e, "is_primary": i == 0} for i, e in enumerate(self.emails)],
            "status": self.status,
            "login": self.login,
            "account_type": self.account_type,
            "last_login": _iso(self.last_login),
            "created_at": _iso(self.created_at),
        }


@dataclass(frozen=True)
class GroupTrait:
    profile: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"profile": dict(self.profile)}


@dataclass(frozen=True)
class RoleTrait:
    profile: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"profile": dict(self.profile)}


# ── Graph nodes and edges ────────────────────────────────────────

@dataclass(frozen=True)
class Resource:
    """A node of the access graph."""

    id: ResourceId
    display_name: str
    parent_id: Optional[ResourceId] = None
    # trait name -> UserTrait / GroupTrait / RoleTrait
    trait_payload: Dict[str, Any] = field(default_factory=dict, compare=False)
    annotations: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def traits(self) -> frozenset:
        return frozenset(self.trait_payload)

    @property
    def resource_type(self) -> str:
        return self.id.resource_type

    def trait(self, name: str) -> Any:
        return self.trait_payload.get(name)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id.to_dict(),
            "display_name": self.display_name,
            "parent_id": self.parent_id.to_dict() if self.parent_id else None,
            "traits": {name: t.to_dict() for name, t in sorted(self.trait_payload.items())},
            "annotations": dict(self.annotations),
        }


@dataclass(frozen=True)
class Entitlement:
    """A capability or membership class exposed by a resource."""

    resource: Resource
    slug: str
    display_name: str = ""
    description: str = ""
    grantable_to: Tuple[str, ...] = ()
    purpose: str = PURPOSE_PERMISSION
    annotations: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def id(self) -> str:
        return entitlement_id(self.resource.id, self.slug)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resource_id": self.resource.id.to_dict(),
            "slug": self.slug,
            "display_name": self.display_name,
            "description": self.description,
            "grantable_to": list(self.grantable_to),
            "purpose": self.purpose,
            "annotations": dict(self.annotations),
        }


@dataclass(frozen=True)
class Grant:
    """An edge: principal holds entitlement_slug on resource."""

    resource: Resource
    entitlement_slug: str
    principal_id: ResourceId
    annotations: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def entitlement_id(self) -> str:
        return entitlement_id(self.resource.id, self.entitlement_slug)

    @property
    def id(self) -> str:
        return f"{self.entitlement_id}:{self.principal_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "entitlement_id": self.entitlement_id,
            "resource_id": self.resource.id.to_dict(),
            "entitlement_slug": self.entitlement_slug,
            "principal_id": self.principal_id.to_dict(),
            "annotations": dict(self.annotations),
        }


def entitlement_id(resource_id: ResourceId, slug: str) -> str:
    return f"{resource_id.resource_type}:{resource_id.resource}:{slug}"
