"""Pure mappings from Zendesk objects to access-graph resources.

No network calls and no side effects beyond constructing the Resource.
"""

from __future__ import annotations

import datetime
from typing import Optional, Tuple

from zendesk_connector.client.models import CustomRole, Group, Organization, User
from zendesk_connector.connector.resource_types import (
    RESOURCE_TYPE_GROUP,
    RESOURCE_TYPE_ORG,
    RESOURCE_TYPE_ROLE,
    RESOURCE_TYPE_TEAM,
    RESOURCE_TYPE_USER,
)
from zendesk_connector.connector.resources import (
    STATUS_DISABLED,
    STATUS_ENABLED,
    TRAIT_GROUP,
    TRAIT_ROLE,
    TRAIT_USER,
    GroupTrait,
    Resource,
    ResourceId,
    RoleTrait,
    UserTrait,
)
from zendesk_connector.errors import IdentifierParseError

ROLE_END_USER = "end-user"
ROLE_AGENT = "agent"
ROLE_ADMIN = "admin"

# Zendesk serializes timestamps with and without microseconds.
_TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%SZ", "%Y-%m-%dT%H:%M:%S.%fZ")


# ── Helpers ──────────────────────────────────────────────────────

def split_full_name(name: str) -> Tuple[str, str]:
    """Split on the first space only: "Ada King Lovelace" -> ("Ada", "King Lovelace")."""
    first, _, last = (name or "").partition(" ")
    return first, last


def is_valid_team_member(user: User) -> bool:
    """Agents always count; admins only while not suspended."""
    return user.role == ROLE_AGENT or (user.role == ROLE_ADMIN and not user.suspended)


def parse_timestamp(value: Optional[str]) -> Optional[datetime.datetime]:
    """Parse an upstream timestamp, returning None if it matches no known format."""
    if not value:
        return None
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.datetime.strptime(value, fmt).replace(tzinfo=datetime.timezone.utc)
        except ValueError:
            continue
    return None


def parse_resource_id(value: str) -> int:
    """Upstream numeric id of a resource; raises IdentifierParseError otherwise."""
    try:
        return int(value)
    except (TypeError, ValueError):
        raise IdentifierParseError(value) from None


def resource_id(resource_type: str, upstream_id) -> ResourceId:
    return ResourceId(resource_type=resource_type, resource=str(upstream_id))


def team_member_id(user_id: int) -> ResourceId:
    return resource_id(RESOURCE_TYPE_TEAM.id, user_id)


# ── Users ────────────────────────────────────────────────────────

def user_resource(user: User, parent_id: Optional[ResourceId] = None) -> Resource:
    """Plain identity projection of any upstream account."""
    first_name, last_name = split_full_name(user.name)
    trait = UserTrait(
        profile={
            "user_id": user.id,
            "first_name": first_name,
            "last_name": last_name,
            "login": user.email,
        },
        emails=(user.email,) if user.email else (),
        status=STATUS_ENABLED if user.active else STATUS_DISABLED,
        login=user.email,
    )
    return Resource(
        id=resource_id(RESOURCE_TYPE_USER.id, user.id),
        display_name=user.name,
        parent_id=parent_id,
        trait_payload={TRAIT_USER: trait},
    )


def team_member_resource(user: User, parent_id: Optional[ResourceId] = None) -> Resource:
    """Staff projection of an upstream account (agents and admins)."""
    first_name, last_name = split_full_name(user.name)
    disabled = not user.active or user.suspended
    trait = UserTrait(
        profile={
            "user_id": user.id,
            "login": user.email,
            "first_name": first_name,
            "last_name": last_name,
            "email": user.email,
        },
        emails=(user.email,) if user.email else (),
        status=STATUS_DISABLED if disabled else STATUS_ENABLED,
        login=user.email,
        last_login=parse_timestamp(user.last_login_at),
        created_at=parse_timestamp(user.created_at),
    )
    return Resource(
        id=team_member_id(user.id),
        display_name=user.name or user.email,
        parent_id=parent_id,
        trait_payload={TRAIT_USER: trait},
    )


# ── Groups, roles, organizations ─────────────────────────────────

def group_resource(group: Group, parent_id: Optional[ResourceId] = None) -> Resource:
    return Resource(
        id=resource_id(RESOURCE_TYPE_GROUP.id, group.id),
        display_name=group.name,
        parent_id=parent_id,
        trait_payload={TRAIT_GROUP: GroupTrait(profile={"group_id": group.id, "group_name": group.name})},
    )


def role_resource(role: CustomRole, parent_id: Optional[ResourceId] = None) -> Resource:
    return Resource(
        id=resource_id(RESOURCE_TYPE_ROLE.id, role.id),
        display_name=role.name,
        parent_id=parent_id,
        trait_payload={TRAIT_ROLE: RoleTrait(profile={"role_id": role.id, "role_name": role.name})},
    )


def org_resource(
    org: Organization,
    child_resource_type: str = RESOURCE_TYPE_TEAM.id,
    parent_id: Optional[ResourceId] = None,
) -> Resource:
    annotations = {
        "v1_identifier": f"org:{org.id}",
        "child_resource_type": child_resource_type,
    }
    if org.url:
        annotations["external_link"] = org.url
    return Resource(
        id=resource_id(RESOURCE_TYPE_ORG.id, org.id),
        display_name=org.name,
        parent_id=parent_id,
        annotations=annotations,
    )
