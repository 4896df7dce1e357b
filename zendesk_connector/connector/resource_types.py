"""Resource type descriptors for everything the connector syncs."""

from __future__ import annotations

from zendesk_connector.connector.resources import (
    TRAIT_GROUP,
    TRAIT_ROLE,
    TRAIT_USER,
    ResourceType,
)


def v1_annotations(resource_type_id: str) -> dict:
    return {"v1_identifier": resource_type_id}


RESOURCE_TYPE_USER = ResourceType(
    id="user",
    display_name="User",
    traits=(TRAIT_USER,),
    annotations=v1_annotations("user"),
)

RESOURCE_TYPE_GROUP = ResourceType(
    id="group",
    display_name="Group",
    traits=(TRAIT_GROUP,),
)

RESOURCE_TYPE_ORG = ResourceType(
    id="org",
    display_name="Org",
    annotations=v1_annotations("org"),
)

RESOURCE_TYPE_ROLE = ResourceType(
    id="role",
    display_name="Role",
    traits=(TRAIT_ROLE,),
)

# Staff accounts (agents and admins); a projection of the same upstream
# user records as RESOURCE_TYPE_USER.
RESOURCE_TYPE_TEAM = ResourceType(
    id="team_member",
    display_name="Team Member",
    traits=(TRAIT_USER,),
    annotations=v1_annotations("team_member"),
)
