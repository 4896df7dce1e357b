"""Team-member syncer: the staff projection of upstream users."""

from __future__ import annotations

from typing import List, Optional, Tuple

from zendesk_connector.client.models import UserListOptions
from zendesk_connector.client.pagination import convert_page_token
from zendesk_connector.connector.base import ResourceSyncer
from zendesk_connector.connector.mapper import is_valid_team_member, team_member_resource
from zendesk_connector.connector.resource_types import RESOURCE_TYPE_TEAM
from zendesk_connector.connector.resources import Entitlement, Grant, Resource, ResourceId

TEAM_ACCESS_LEVELS = (
    "member",
    "admin",
    "agent",
    "contributor",
    "legacy agent",
    "light agent",
    "custom roles",
)


class TeamSyncer(ResourceSyncer):
    resource_type_descriptor = RESOURCE_TYPE_TEAM

    def list(self, parent_id: Optional[ResourceId], page_token: str = "") -> Tuple[List[Resource], str]:
        page = convert_page_token(page_token)
        users, next_page = self.client.list_users(UserListOptions(page=page, per_page=self.page_size))
        rv = [team_member_resource(u, parent_id) for u in users if is_valid_team_member(u)]
        return rv, next_page

    def entitlements(self, resource: Resource, page_token: str = "") -> Tuple[List[Entitlement], str]:
        """The fixed role-tier catalog; descriptive only, no upstream lookup."""
        rv = [
            Entitlement(
                resource=resource,
                slug=level,
                display_name=f"{resource.display_name} Team Member {level.title()}",
                description=f"Access to {resource.display_name} team member in Zendesk",
                grantable_to=(RESOURCE_TYPE_TEAM.id,),
                annotations={"v1_identifier": f"team_member:{resource.id.resource}:role:{level}"},
            )
            for level in TEAM_ACCESS_LEVELS
        ]
        return rv, ""

    def grants(self, resource: Resource, page_token: str = "") -> Tuple[List[Grant], str]:
        # Team members are grant targets; their edges come from group/role grants.
        return [], ""
