"""Upstream access client for the Zendesk REST API."""

from zendesk_connector.client.client import ZendeskClient
from zendesk_connector.client.models import (
    CustomRole,
    Group,
    GroupMembership,
    GroupMembershipListOptions,
    Organization,
    OrganizationMembership,
    OrganizationMembershipListOptions,
    PageOptions,
    User,
    UserListOptions,
)

__all__ = [
    "ZendeskClient",
    "CustomRole",
    "Group",
    "GroupMembership",
    "GroupMembershipListOptions",
    "Organization",
    "OrganizationMembership",
    "OrganizationMembershipListOptions",
    "PageOptions",
    "User",
    "UserListOptions",
]
