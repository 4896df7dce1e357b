"""Shared fixtures: an in-memory Zendesk stand-in with call counters."""

from __future__ import annotations

from collections import Counter
from typing import Dict, List, Optional, Tuple

import pytest

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
from zendesk_connector.errors import NotFoundError


def make_user(id: int, role: str = "agent", **kwargs) -> User:
    kwargs.setdefault("name", f"User {id}")
    kwargs.setdefault("email", f"user{id}@example.com")
    return User(id=id, role=role, **kwargs)


class FakeZendeskClient:
    """Implements the ZendeskClient surface over plain lists.

    ``calls`` counts every method invocation by name so tests can assert
    which upstream operations happened. Lists are paged with per_page from
    the options (default 100), and cursors are page numbers as text.
    """

    def __init__(self) -> None:
        self.users: Dict[int, User] = {}
        self.groups: List[Group] = []
        self.organizations: List[Organization] = []
        self.group_memberships: List[GroupMembership] = []
        self.organization_memberships: List[OrganizationMembership] = []
        self.custom_roles: List[CustomRole] = []
        self.me: Optional[User] = None
        self.calls: Counter = Counter()
        self._next_id = 9000

    # ── Seeding ──────────────────────────────────────────────────

    def add_user(self, user: User) -> User:
        self.users[user.id] = user
        return user

    def add_group_member(self, user_id: int, group_id: int) -> GroupMembership:
        m = GroupMembership(id=self._new_id(), user_id=user_id, group_id=group_id)
        self.group_memberships.append(m)
        return m

    def add_org_member(self, user_id: int, org_id: int) -> OrganizationMembership:
        m = OrganizationMembership(id=self._new_id(), user_id=user_id, organization_id=org_id)
        self.organization_memberships.append(m)
        return m

    def _new_id(self) -> int:
        self._next_id += 1
        return self._next_id

    @staticmethod
    def _page(items: list, opts: PageOptions) -> Tuple[list, str]:
        per_page = opts.per_page or 100
        page = opts.page or 1
        start = (page - 1) * per_page
        chunk = items[start:start + per_page]
        has_more = start + per_page < len(items)
        return chunk, str(page + 1) if has_more else ""

    # ── Users ────────────────────────────────────────────────────

    def list_users(self, opts: Optional[UserListOptions] = None):
        self.calls["list_users"] += 1
        opts = opts or UserListOptions()
        users = sorted(self.users.values(), key=lambda u: u.id)
        if opts.roles:
            users = [u for u in users if u.role in opts.roles]
        return self._page(users, opts)

    def get_user(self, user_id: int) -> User:
        self.calls["get_user"] += 1
        if user_id not in self.users:
            raise NotFoundError("get user", "RecordNotFound", 404)
        return self.users[user_id]

    def get_current_user(self) -> User:
        self.calls["get_current_user"] += 1
        return self.me

    # ── Groups ───────────────────────────────────────────────────

    def list_groups(self, opts: Optional[PageOptions] = None):
        self.calls["list_groups"] += 1
        return self._page(list(self.groups), opts or PageOptions())

    def list_group_memberships(self, opts: Optional[GroupMembershipListOptions] = None):
        self.calls["list_group_memberships"] += 1
        opts = opts or GroupMembershipListOptions()
        items = [
            m for m in self.group_memberships
            if (opts.group_id is None or m.group_id == opts.group_id)
            and (opts.user_id is None or m.user_id == opts.user_id)
        ]
        return self._page(items, opts)

    def create_group_membership(self, membership: GroupMembership) -> GroupMembership:
        self.calls["create_group_membership"] += 1
        return self.add_group_member(membership.user_id, membership.group_id)

    def remove_group_membership(self, user_id: int, group_id: int) -> Optional[int]:
        self.calls["remove_group_membership"] += 1
        for m in self.group_memberships:
            if m.user_id == user_id and m.group_id == group_id:
                self.group_memberships.remove(m)
                return m.id
        return None

    # ── Organizations ────────────────────────────────────────────

    def list_organizations(self, opts: Optional[PageOptions] = None):
        self.calls["list_organizations"] += 1
        return self._page(list(self.organizations), opts or PageOptions())

    def list_organization_users(self, org_id: int, opts: Optional[PageOptions] = None):
        self.calls["list_organization_users"] += 1
        member_ids = [m.user_id for m in self.organization_memberships if m.organization_id == org_id]
        users = [self.users[uid] for uid in sorted(set(member_ids)) if uid in self.users]
        return self._page(users, opts or PageOptions())

    def list_organization_memberships(self, opts: Optional[OrganizationMembershipListOptions] = None):
        self.calls["list_organization_memberships"] += 1
        opts = opts or OrganizationMembershipListOptions()
        items = [
            m for m in self.organization_memberships
            if (opts.organization_id is None or m.organization_id == opts.organization_id)
            and (opts.user_id is None or m.user_id == opts.user_id)
        ]
        return self._page(items, opts)

    def create_organization_membership(self, membership: OrganizationMembership) -> OrganizationMembership:
        self.calls["create_organization_membership"] += 1
        return self.add_org_member(membership.user_id, membership.organization_id)

    def remove_organization_membership(self, user_id: int, organization_id: int) -> Optional[int]:
        self.calls["remove_organization_membership"] += 1
        for m in self.organization_memberships:
            if m.user_id == user_id and m.organization_id == organization_id:
                self.organization_memberships.remove(m)
                return m.id
        return None

    # ── Custom roles ─────────────────────────────────────────────

    def list_custom_roles(self):
        self.calls["list_custom_roles"] += 1
        return list(self.custom_roles), ""

    def create_custom_role(self, role: CustomRole) -> CustomRole:
        self.calls["create_custom_role"] += 1
        created = role.model_copy(update={"id": self._new_id()})
        self.custom_roles.append(created)
        return created

    def close(self) -> None:
        self.calls["close"] += 1

    def mutation_calls(self) -> int:
        return sum(
            self.calls[name]
            for name in (
                "create_group_membership",
                "remove_group_membership",
                "create_organization_membership",
                "remove_organization_membership",
                "create_custom_role",
            )
        )


@pytest.fixture
def fake_client() -> FakeZendeskClient:
    return FakeZendeskClient()


@pytest.fixture
def seeded_client(fake_client) -> FakeZendeskClient:
    """A small helpdesk: two staff, one end-user, one suspended admin.

    Group 100 "Support" has agent 1 and admin 2. Org 500 "Acme" has admin 2
    and end-user 3. Custom role 700 "Tier 2" is held by agent 1.
    """
    fake_client.add_user(make_user(1, "agent", name="Ada Lovelace", custom_role_id=700))
    fake_client.add_user(make_user(2, "admin", name="Grace Hopper", organization_id=500))
    fake_client.add_user(make_user(3, "end-user", name="Carl Customer"))
    fake_client.add_user(make_user(4, "admin", name="Sam Suspended", suspended=True))
    fake_client.groups.append(Group(id=100, name="Support"))
    fake_client.organizations.append(Organization(id=500, name="Acme", url="https://acme.zendesk.com/org/500"))
    fake_client.custom_roles.append(CustomRole(id=700, name="Tier 2"))
    fake_client.add_group_member(1, 100)
    fake_client.add_group_member(2, 100)
    fake_client.add_org_member(2, 500)
    fake_client.add_org_member(3, 500)
    fake_client.me = fake_client.users[2]
    return fake_client
