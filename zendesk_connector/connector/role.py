"""Custom role syncer.

Custom roles are flat upstream, so holders are derived by cross-referencing
every user and every group against the role list. That materialization is
the most expensive step of a sync pass and is held on the syncer instance,
which lives for one pass only.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from zendesk_connector.client.models import Group, PageOptions, User, UserListOptions
from zendesk_connector.client.pagination import convert_page_token
from zendesk_connector.connector.base import ResourceSyncer, membership_entitlement
from zendesk_connector.connector.mapper import (
    ROLE_ADMIN,
    group_resource,
    is_valid_team_member,
    parse_resource_id,
    role_resource,
    team_member_resource,
)
from zendesk_connector.connector.resource_types import (
    RESOURCE_TYPE_GROUP,
    RESOURCE_TYPE_ROLE,
    RESOURCE_TYPE_TEAM,
)
from zendesk_connector.connector.resources import (
    PURPOSE_ASSIGNMENT,
    PURPOSE_PERMISSION,
    Entitlement,
    Grant,
    Resource,
    ResourceId,
)

logger = logging.getLogger("zendesk_connector.connector")

MEMBER_ENTITLEMENT = "member"
ADMIN_ENTITLEMENT = "admin"


@dataclass(frozen=True)
class Directory:
    """Every upstream user and group, fetched once."""

    users: Tuple[User, ...]
    groups: Tuple[Group, ...]


class RoleSyncer(ResourceSyncer):
    resource_type_descriptor = RESOURCE_TYPE_ROLE

    def __init__(self, client, page_size: int = 100) -> None:
        super().__init__(client, page_size)
        self._directory: Optional[Directory] = None

    def list(self, parent_id: Optional[ResourceId], page_token: str = "") -> Tuple[List[Resource], str]:
        roles, next_page = self.client.list_custom_roles()
        return [role_resource(r, parent_id) for r in roles], next_page

    def entitlements(self, resource: Resource, page_token: str = "") -> Tuple[List[Entitlement], str]:
        grantable = (RESOURCE_TYPE_TEAM.id, RESOURCE_TYPE_GROUP.id)
        return [
            membership_entitlement(resource, MEMBER_ENTITLEMENT, "role", grantable, PURPOSE_ASSIGNMENT),
            membership_entitlement(resource, ADMIN_ENTITLEMENT, "role", grantable, PURPOSE_PERMISSION),
        ], ""

    def grants(self, resource: Resource, page_token: str = "") -> Tuple[List[Grant], str]:
        """Holders of the role: team members by custom_role_id, groups by name.

        Team-member holders get ``admin`` when their built-in role is admin
        and ``member`` otherwise, emitted in both directions. Groups whose
        name equals the role name hold ``member``.
        """
        role_id = parse_resource_id(resource.id.resource)
        directory = self.refresh_directory()

        rv: List[Grant] = []
        for user in directory.users:
            if not is_valid_team_member(user) or user.custom_role_id != role_id:
                continue
            member = team_member_resource(user)
            slug = ADMIN_ENTITLEMENT if user.role == ROLE_ADMIN else MEMBER_ENTITLEMENT
            rv.append(Grant(resource=resource, entitlement_slug=slug, principal_id=member.id))
            rv.append(Grant(resource=member, entitlement_slug=slug, principal_id=resource.id))

        for group in directory.groups:
            if group.name == resource.display_name:
                rv.append(Grant(
                    resource=resource,
                    entitlement_slug=MEMBER_ENTITLEMENT,
                    principal_id=group_resource(group).id,
                ))

        return rv, ""

    @property
    def directory(self) -> Optional[Directory]:
        return self._directory

    def refresh_directory(self) -> Directory:
        """Re-fetch every user and group; never reuses a previous snapshot."""
        users: List[User] = []
        page = 0
        while True:
            batch, next_page = self.client.list_users(UserListOptions(page=page, per_page=self.page_size))
            users.extend(batch)
            if not next_page:
                break
            page = convert_page_token(next_page)

        groups: List[Group] = []
        page = 0
        while True:
            batch, next_page = self.client.list_groups(PageOptions(page=page, per_page=self.page_size))
            groups.extend(batch)
            if not next_page:
                break
            page = convert_page_token(next_page)

        self._directory = Directory(users=tuple(users), groups=tuple(groups))
        logger.debug(
            "role directory refreshed",
            extra={"user_count": len(users), "group_count": len(groups)},
        )
        return self._directory
