"""User syncer: a flat identity projection of every upstream account."""

from __future__ import annotations

from typing import List, Optional, Tuple

from zendesk_connector.client.models import UserListOptions
from zendesk_connector.client.pagination import convert_page_token
from zendesk_connector.connector.base import ResourceSyncer
from zendesk_connector.connector.mapper import user_resource
from zendesk_connector.connector.resource_types import RESOURCE_TYPE_USER
from zendesk_connector.connector.resources import Entitlement, Grant, Resource, ResourceId


class UserSyncer(ResourceSyncer):
    resource_type_descriptor = RESOURCE_TYPE_USER

    def list(self, parent_id: Optional[ResourceId], page_token: str = "") -> Tuple[List[Resource], str]:
        page = convert_page_token(page_token)
        users, next_page = self.client.list_users(UserListOptions(page=page, per_page=self.page_size))
        return [user_resource(u, parent_id) for u in users], next_page

    # Entitlements always returns an empty list for users.
    def entitlements(self, resource: Resource, page_token: str = "") -> Tuple[List[Entitlement], str]:
        return [], ""

    # Grants always returns an empty list for users since they have no entitlements.
    def grants(self, resource: Resource, page_token: str = "") -> Tuple[List[Grant], str]:
        return [], ""
