"""Organization syncer: orgs, built-in role entitlements, membership grants."""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Set, Tuple

from zendesk_connector.client.models import (
    OrganizationMembership,
    OrganizationMembershipListOptions,
    PageOptions,
    UserListOptions,
)
from zendesk_connector.client.pagination import convert_page_token
from zendesk_connector.connector.base import (
    ACTION_GRANT,
    ACTION_REVOKE,
    MutationResult,
    ResourceSyncer,
    require_principal_type,
)
from zendesk_connector.connector.mapper import (
    ROLE_ADMIN,
    ROLE_AGENT,
    ROLE_END_USER,
    org_resource,
    parse_resource_id,
    team_member_id,
)
from zendesk_connector.connector.resource_types import RESOURCE_TYPE_ORG, RESOURCE_TYPE_TEAM
from zendesk_connector.connector.resources import Entitlement, Grant, Resource, ResourceId

logger = logging.getLogger("zendesk_connector.connector")

ORG_ACCESS_LEVELS = (ROLE_END_USER, ROLE_ADMIN, ROLE_AGENT)


class OrgSyncer(ResourceSyncer):
    """Organizations visible to the connector.

    With an allow-list only the named organizations are synced. Without one,
    an organization is synced when at least one admin belongs to it.
    """

    resource_type_descriptor = RESOURCE_TYPE_ORG

    def __init__(
        self,
        client,
        page_size: int = 100,
        allowed_orgs: Iterable[str] = (),
        child_resource_type: str = RESOURCE_TYPE_TEAM.id,
    ) -> None:
        super().__init__(client, page_size)
        self.allowed_orgs = frozenset(allowed_orgs)
        self.child_resource_type = child_resource_type

    def list(self, parent_id: Optional[ResourceId], page_token: str = "") -> Tuple[List[Resource], str]:
        page = convert_page_token(page_token)
        orgs, next_page = self.client.list_organizations(PageOptions(page=page, per_page=self.page_size))

        admins: Optional[Tuple[Set[int], Set[int]]] = None
        rv: List[Resource] = []
        for org in orgs:
            if self.allowed_orgs:
                if org.name not in self.allowed_orgs:
                    continue
            else:
                if admins is None:
                    admins = self._admins()
                if not self._has_admin_member(org.id, *admins):
                    continue
            rv.append(org_resource(org, self.child_resource_type, parent_id))

        return rv, next_page

    def _admins(self) -> Tuple[Set[int], Set[int]]:
        """Ids of every admin, and the primary organization ids they belong to."""
        admin_ids: Set[int] = set()
        admin_orgs: Set[int] = set()
        page = 0
        while True:
            users, next_page = self.client.list_users(
                UserListOptions(roles=[ROLE_ADMIN], page=page, per_page=self.page_size)
            )
            for user in users:
                admin_ids.add(user.id)
                if user.organization_id is not None:
                    admin_orgs.add(user.organization_id)
            if not next_page:
                return admin_ids, admin_orgs
            page = convert_page_token(next_page)

    def _has_admin_member(self, org_id: int, admin_ids: Set[int], admin_orgs: Set[int]) -> bool:
        if org_id in admin_orgs:
            return True
        page = 0
        while True:
            memberships, next_page = self.client.list_organization_memberships(
                OrganizationMembershipListOptions(organization_id=org_id, page=page, per_page=self.page_size)
            )
            if any(m.user_id in admin_ids for m in memberships):
                return True
            if not next_page:
                return False
            page = convert_page_token(next_page)

    def entitlements(self, resource: Resource, page_token: str = "") -> Tuple[List[Entitlement], str]:
        rv = [
            Entitlement(
                resource=resource,
                slug=level,
                display_name=f"{resource.display_name} Organization {level.title()}",
                description=f"Access to {resource.display_name} organization in Zendesk",
                grantable_to=(RESOURCE_TYPE_TEAM.id,),
                annotations={"v1_identifier": f"org:{resource.id.resource}:role:{level}"},
            )
            for level in ORG_ACCESS_LEVELS
        ]
        return rv, ""

    def grants(self, resource: Resource, page_token: str = "") -> Tuple[List[Grant], str]:
        """One grant per organization user, keyed by the user's built-in role.

        Role names outside ORG_ACCESS_LEVELS are logged and skipped.
        """
        org_id = parse_resource_id(resource.id.resource)
        page = convert_page_token(page_token)
        users, next_page = self.client.list_organization_users(
            org_id, PageOptions(page=page, per_page=self.page_size)
        )

        rv: List[Grant] = []
        for user in users:
            role_name = (user.role or "").lower()
            if role_name not in ORG_ACCESS_LEVELS:
                logger.warning(
                    "Unknown Zendesk role name",
                    extra={"role_name": role_name, "zendesk_username": user.name, "org_id": org_id},
                )
                continue
            rv.append(Grant(
                resource=resource,
                entitlement_slug=role_name,
                principal_id=team_member_id(user.id),
                annotations={"v1_identifier": f"org-grant:{resource.id.resource}:{user.id}:{role_name}"},
            ))

        return rv, next_page

    def grant(self, principal: Resource, entitlement: Entitlement) -> MutationResult:
        require_principal_type(principal.id, RESOURCE_TYPE_TEAM, ACTION_GRANT)
        user_id = parse_resource_id(principal.id.resource)
        org_id = parse_resource_id(entitlement.resource.id.resource)

        membership = self.client.create_organization_membership(
            OrganizationMembership(user_id=user_id, organization_id=org_id)
        )
        logger.info(
            "organization membership created",
            extra={
                "membership_id": membership.id,
                "user_id": membership.user_id,
                "organization_id": membership.organization_id,
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
        org_id = parse_resource_id(grant.resource.id.resource)

        membership_id = self.client.remove_organization_membership(user_id, org_id)
        if membership_id is None:
            logger.warning(
                "organization membership not found, treating as already revoked",
                extra={"user_id": user_id, "organization_id": org_id},
            )
            return MutationResult(
                action=ACTION_REVOKE,
                entitlement_id=grant.entitlement_id,
                principal_id=grant.principal_id,
                already_applied=True,
            )

        logger.info("organization membership revoked", extra={"membership_id": membership_id})
        return MutationResult(
            action=ACTION_REVOKE,
            entitlement_id=grant.entitlement_id,
            principal_id=grant.principal_id,
            upstream_id=membership_id,
        )
