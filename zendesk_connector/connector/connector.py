"""Connector — the registry of resource syncers plus grant/revoke dispatch."""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, List, Optional

from zendesk_connector.client.client import ZendeskClient
from zendesk_connector.config import Settings
from zendesk_connector.connector.base import MutationResult, ResourceSyncer
from zendesk_connector.connector.group import GroupSyncer
from zendesk_connector.connector.org import OrgSyncer
from zendesk_connector.connector.resource_types import RESOURCE_TYPE_TEAM, RESOURCE_TYPE_USER
from zendesk_connector.connector.resources import Entitlement, Grant, Resource
from zendesk_connector.connector.role import RoleSyncer
from zendesk_connector.connector.team import TeamSyncer
from zendesk_connector.connector.users import UserSyncer
from zendesk_connector.errors import ConnectorError

logger = logging.getLogger("zendesk_connector.connector")

DISPLAY_NAME = "Zendesk Connector"
DESCRIPTION = "Connector syncing users, groups, organizations and roles from Zendesk."


class Connector:
    """Entry point used by the host sync engine.

    Usage::

        connector = Connector.from_settings(load_settings())
        for syncer in connector.resource_syncers():
            resources, next_page = syncer.list(None, "")
    """

    def __init__(
        self,
        client: ZendeskClient,
        orgs: Iterable[str] = (),
        sync_users: bool = False,
        page_size: int = 100,
    ) -> None:
        self.client = client
        self.orgs = tuple(orgs)
        self.sync_users = sync_users
        self.page_size = page_size

    @classmethod
    def from_settings(cls, settings: Settings, client: Optional[ZendeskClient] = None) -> "Connector":
        return cls(
            client or ZendeskClient.from_settings(settings),
            orgs=settings.orgs,
            sync_users=settings.sync_users,
            page_size=settings.page_size,
        )

    def close(self) -> None:
        self.client.close()

    # ── Registry ─────────────────────────────────────────────────

    def resource_syncers(self) -> List[ResourceSyncer]:
        """Fresh syncer instances for one sync pass.

        Instances carry pass-scoped state (the role directory), so a new
        list is built on every call and never shared between passes.
        """
        child_type = RESOURCE_TYPE_USER.id if self.sync_users else RESOURCE_TYPE_TEAM.id
        syncers: List[ResourceSyncer] = [
            TeamSyncer(self.client, self.page_size),
            GroupSyncer(self.client, self.page_size),
            OrgSyncer(self.client, self.page_size, allowed_orgs=self.orgs, child_resource_type=child_type),
            RoleSyncer(self.client, self.page_size),
        ]
        if self.sync_users:
            syncers.insert(0, UserSyncer(self.client, self.page_size))
        return syncers

    def syncer_for(self, resource_type: str) -> ResourceSyncer:
        for syncer in self.resource_syncers():
            if syncer.resource_type().id == resource_type:
                return syncer
        raise ConnectorError(f"zendesk-connector: unknown resource type {resource_type!r}")

    # ── Metadata / validation ────────────────────────────────────

    def metadata(self) -> Dict[str, Any]:
        return {
            "display_name": DISPLAY_NAME,
            "description": DESCRIPTION,
            "resource_types": [s.resource_type().to_dict() for s in self.resource_syncers()],
        }

    def validate(self) -> str:
        """Exercise the credentials; returns the authenticated account's email."""
        me = self.client.get_current_user()
        logger.info("credentials validated", extra={"account_email": me.email, "account_role": me.role})
        return me.email

    # ── Grant / revoke ───────────────────────────────────────────

    def grant(self, principal: Resource, entitlement: Entitlement) -> MutationResult:
        syncer = self.syncer_for(entitlement.resource.resource_type)
        result = syncer.grant(principal, entitlement)
        logger.info(
            "grant applied",
            extra={"entitlement_id": result.entitlement_id, "principal": str(result.principal_id)},
        )
        return result

    def revoke(self, grant: Grant) -> MutationResult:
        syncer = self.syncer_for(grant.resource.resource_type)
        result = syncer.revoke(grant)
        logger.info(
            "revoke applied",
            extra={
                "entitlement_id": result.entitlement_id,
                "principal": str(result.principal_id),
                "already_applied": result.already_applied,
            },
        )
        return result
