"""Group syncer: groups, member/admin entitlements, membership grants."""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from zendesk_connector.client.models import GroupMembership, GroupMembershipListOptions, PageOptions
from zendesk_connector.client.pagination import convert_page_token
from zendesk_connector.connector.base import (
    ACTION_GRANT,
    ACTION_REVOKE,
    MutationResult,
    ResourceSyncer,
    membership_entitlement,
    require_principal_type,
)
from zendesk_connector.connector.mapper import (
    ROLE_ADMIN,
    ROLE_END_USER,
    group_resource,
    is_valid_team_member,
    parse_resource_id,
    team_member_id,
    team_member_resource,
)
from zendesk_connector.connector.resource_types import RESOURCE_TYPE_GROUP, RESOURCE_TYPE_TEAM
from zendesk_connector.connector.resources import (
    PURPOSE_ASSIGNMENT,
    PURPOSE_PERMISSION,
    Entitlement,
    Grant,
    Resource,
    ResourceId,
)
from zendesk_connector.errors import NotATeamMemberError

logger = logging.getLogger("zendesk_connector.connector")

MEMBER_ENTITLEMENT = "member"
ADMIN_ENTITLEMENT = "admin"


class GroupSyncer(ResourceSyncer):
    resource_type_descriptor = RESOURCE_TYPE_GROUP

    def list(self, parent_id: Optional[ResourceId], page_token: str = "") -> Tuple[List[Resource], str]:
        page = convert_page_token(page_token)
        groups, next_page = self.client.list_groups(PageOptions(page=page, per_page=self.page_size))
        return [group_resource(g, parent_id) for g in groups], next_page

    def entitlements(self, resource: Resource, page_token: str = "") -> Tuple[List[Entitlement], str]:
        grantable = (RESOURCE_TYPE_TEAM.id,)
        return [
            membership_entitlement(resource, MEMBER_ENTITLEMENT, "group", grantable, PURPOSE_ASSIGNMENT),
            membership_entitlement(resource, ADMIN_ENTITLEMENT, "group", grantable, PURPOSE_PERMISSION),
        ], ""

    def grants(self, resource: Resource, page_token: str = "") -> Tuple[List[Grant], str]:
        """Member grant for every membership, admin grant for upstream admins.

        Each grant is emitted twice, group -> team member and team member ->
        group, so the edge can be walked from either end. Members that are
        not valid team members (end-users, suspended admins) only get the
        group-owned edge.
        """
        group_id = parse_resource_id(resource.id.resource)
        page = convert_page_token(page_token)
        memberships, next_page = self.client.list_group_memberships(
            GroupMembershipListOptions(group_id=group_id, page=page, per_page=self.page_size)
        )

        rv: List[Grant] = []
        for membership in memberships:
            user = self.client.get_user(membership.user_id)
            principal_id = team_member_id(user.id)
            # Only listed team members own reverse edges.
            member = team_member_resource(user) if is_valid_team_member(user) else None

            slugs = [MEMBER_ENTITLEMENT]
            if user.role == ROLE_ADMIN:
                slugs.append(ADMIN_ENTITLEMENT)
            for slug in slugs:
                rv.append(Grant(resource=resource, entitlement_slug=slug, principal_id=principal_id))
                if member is not None:
                    rv.append(Grant(resource=member, entitlement_slug=slug, principal_id=resource.id))

        return rv, next_page

    def grant(self, principal: Resource, entitlement: Entitlement) -> MutationResult:
        require_principal_type(principal.id, RESOURCE_TYPE_TEAM, ACTION_GRANT)
        user_id = parse_resource_id(principal.id.resource)
        group_id = parse_resource_id(entitlement.resource.id.resource)

        user = self.client.get_user(user_id)
        if user.role == ROLE_END_USER:
            logger.warning(
                "user must be a team member",
                extra={"user_id": user.id, "user_role": user.role},
            )
            raise NotATeamMemberError(user.id, user.role)

        membership = self.client.create_group_membership(GroupMembership(user_id=user_id, group_id=group_id))
        logger.info(
            "group membership created",
            extra={
                "membership_id": membership.id,
                "user_id": membership.user_id,
                "group_id": membership.group_id,
                "created_at": membership.created_at,
            },
        )
        return MutationResult(
            action=ACTION_GRANT,
            entitlement_id=entitlement.id,
            principal_id=principal.id,
            upstream_id=membership.id,
        )

    def revoke(self, grant: Grant) -> MutationResult:
        require_principal_type(grant.principal_id, RESOURCE_TYPE_TEAM, ACTION_REVOKE)
        user_id = parse_resource_id(grant.principal_id.resource)
        group_id = parse_resource_id(grant.resource.id.resource)

        membership_id = self.client.remove_group_membership(user_id, group_id)
        if membership_id is None:
            logger.warning(
                "group membership not found, treating as already revoked",
                extra={"user_id": user_id, "group_id": group_id},
            )
            return MutationResult(
                action=ACTION_REVOKE,
                entitlement_id=grant.entitlement_id,
                principal_id=grant.principal_id,
                already_applied=True,
            )

        logger.info("group membership revoked", extra={"membership_id": membership_id})
        return MutationResult(
            action=ACTION_REVOKE,
            entitlement_id=grant.entitlement_id,
            principal_id=grant.principal_id,
            upstream_id=membership_id,
        )
