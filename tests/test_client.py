"""Tests for the Zendesk access client.

Uses httpx.MockTransport as the underlying transport. No network calls.
"""

from __future__ import annotations

import base64
import json
from typing import Callable, List

import httpx
import pytest

from zendesk_connector.client import (
    CustomRole,
    GroupMembership,
    GroupMembershipListOptions,
    OrganizationMembership,
    UserListOptions,
    ZendeskClient,
)
from zendesk_connector.errors import (
    AuthError,
    MalformedCursorError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
)

BASE = "https://acme.zendesk.com/api/v2"


class Recorder:
    """Routes requests to a handler and keeps every request it saw."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)

    @property
    def methods(self) -> List[str]:
        return [r.method for r in self.requests]


def _make_client(handler, **kwargs) -> ZendeskClient:
    return ZendeskClient(
        "acme",
        email="ops@acme.com",
        api_token="tok123",
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _user(id: int, role: str = "agent") -> dict:
    return {"id": id, "name": f"User {id}", "email": f"u{id}@acme.com", "role": role}


# ── Listing and pagination ───────────────────────────────────────

class TestListing:
    def test_list_users_parses_items_and_cursor(self):
        rec = Recorder(lambda r: httpx.Response(200, json={
            "users": [_user(1), _user(2, "admin")],
            "next_page": f"{BASE}/users.json?page=2&per_page=100",
        }))
        users, next_page = _make_client(rec).list_users()
        assert [u.id for u in users] == [1, 2]
        assert users[1].role == "admin"
        assert next_page == "2"
        assert rec.requests[0].url.path == "/api/v2/users.json"
        assert rec.requests[0].url.params["per_page"] == "100"

    def test_last_page_returns_empty_cursor(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"groups": [{"id": 5, "name": "Ops"}], "next_page": None}))
        groups, next_page = _make_client(rec).list_groups()
        assert groups[0].name == "Ops"
        assert next_page == ""

    def test_role_filter_and_page_sent(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"users": []}))
        _make_client(rec).list_users(UserListOptions(roles=["admin", "agent"], page=3, per_page=25))
        params = rec.requests[0].url.params
        assert params.get_list("role[]") == ["admin", "agent"]
        assert params["page"] == "3"
        assert params["per_page"] == "25"

    def test_next_page_without_page_param_is_malformed(self):
        rec = Recorder(lambda r: httpx.Response(200, json={
            "users": [_user(1)],
            "next_page": f"{BASE}/users.json?cursor=abc",
        }))
        with pytest.raises(MalformedCursorError):
            _make_client(rec).list_users()

    def test_group_memberships_scoped_to_group(self):
        rec = Recorder(lambda r: httpx.Response(200, json={
            "group_memberships": [{"id": 1, "user_id": 7, "group_id": 42}],
        }))
        memberships, _ = _make_client(rec).list_group_memberships(GroupMembershipListOptions(group_id=42))
        assert rec.requests[0].url.path == "/api/v2/groups/42/memberships.json"
        assert memberships[0].user_id == 7

    def test_organization_users_path(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"users": [_user(3, "end-user")]}))
        users, _ = _make_client(rec).list_organization_users(500)
        assert rec.requests[0].url.path == "/api/v2/organizations/500/users.json"
        assert users[0].role == "end-user"

    def test_custom_roles_unpaginated(self):
        rec = Recorder(lambda r: httpx.Response(200, json={
            "custom_roles": [{"id": 700, "name": "Tier 2", "role_type": 0}],
            "next_page": None,
        }))
        roles, next_page = _make_client(rec).list_custom_roles()
        assert roles[0].name == "Tier 2"
        assert next_page == ""
        assert "per_page" not in rec.requests[0].url.params

    def test_get_group(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"group": {"id": 100, "name": "Support", "extra": 1}}))
        with _make_client(rec) as client:
            group = client.get_group(100)
        assert group.name == "Support"
        assert rec.requests[0].url.path == "/api/v2/groups/100.json"

    def test_get_org_name(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"organization": {"id": 9, "name": "Acme"}}))
        assert _make_client(rec).get_org_name(9) == "Acme"
        assert rec.requests[0].url.path == "/api/v2/organizations/9.json"


# ── Headers ──────────────────────────────────────────────────────

class TestHeaders:
    def test_basic_token_auth(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"user": _user(1)}))
        _make_client(rec).get_user(1)
        expected = base64.b64encode(b"ops@acme.com/token:tok123").decode()
        assert rec.requests[0].headers["authorization"] == f"Basic {expected}"

    def test_sets_request_id(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"user": _user(1)}))
        _make_client(rec).get_user(1)
        assert len(rec.requests[0].headers["x-request-id"]) == 12


# ── Errors ───────────────────────────────────────────────────────

class TestErrors:
    @pytest.mark.parametrize("status,exc", [
        (401, AuthError),
        (404, NotFoundError),
        (429, RateLimitedError),
        (500, ServerError),
        (503, ServerError),
    ])
    def test_status_maps_to_error(self, status, exc):
        rec = Recorder(lambda r: httpx.Response(status, json={"error": "Oops", "description": "went wrong"}))
        with pytest.raises(exc) as info:
            _make_client(rec).get_user(1)
        assert info.value.status_code == status
        assert info.value.operation == "get user"
        assert "went wrong" in str(info.value)

    def test_other_4xx_is_plain_transport_error(self):
        rec = Recorder(lambda r: httpx.Response(400, text="bad request"))
        with pytest.raises(TransportError) as info:
            _make_client(rec).list_groups()
        assert type(info.value) is TransportError
        assert info.value.status_code == 400

    def test_redirect_on_get_is_transport_error(self):
        rec = Recorder(lambda r: httpx.Response(301, headers={"location": f"{BASE}/elsewhere.json"}))
        with pytest.raises(TransportError) as info:
            _make_client(rec).get_user(1)
        assert type(info.value) is TransportError
        assert info.value.status_code == 301

    def test_redirect_on_delete_is_not_a_removal(self):
        def handler(request):
            if request.method == "DELETE":
                return httpx.Response(302, headers={"location": "https://acme.zendesk.com/access/unauthenticated"})
            return httpx.Response(200, json={
                "group_memberships": [{"id": 55, "user_id": 1, "group_id": 2}],
            })

        rec = Recorder(handler)
        with pytest.raises(TransportError) as info:
            _make_client(rec).remove_group_membership(1, 2)
        assert info.value.status_code == 302
        assert info.value.operation == "delete group membership"

    def test_retry_after_header_sets_delay(self, monkeypatch):
        slept = []
        monkeypatch.setattr("zendesk_connector.client.utils.time.sleep", slept.append)
        responses = [
            httpx.Response(429, headers={"retry-after": "7"}, text="slow down"),
            httpx.Response(200, json={"user": _user(1)}),
        ]
        rec = Recorder(lambda r: responses.pop(0))
        _make_client(rec, retries=2).get_user(1)
        assert slept == [7.0]

    def test_network_failure_is_transport_error(self):
        def boom(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(TransportError) as info:
            _make_client(boom).list_users()
        assert info.value.status_code is None
        assert info.value.operation == "list users"

    def test_error_message_redacts_credentials(self):
        rec = Recorder(lambda r: httpx.Response(
            401, json={"error": "Couldn't authenticate ops@acme.com/token:tok123"},
        ))
        with pytest.raises(AuthError) as info:
            _make_client(rec).get_current_user()
        assert "tok123" not in str(info.value)

    def test_retry_on_503_then_success(self, monkeypatch):
        monkeypatch.setattr("zendesk_connector.client.utils.time.sleep", lambda s: None)
        responses = [httpx.Response(503, text="busy"), httpx.Response(200, json={"user": _user(1)})]
        rec = Recorder(lambda r: responses.pop(0))
        user = _make_client(rec, retries=1).get_user(1)
        assert user.id == 1
        assert len(rec.requests) == 2

    def test_no_retry_by_default(self):
        rec = Recorder(lambda r: httpx.Response(503, text="busy"))
        with pytest.raises(ServerError):
            _make_client(rec).get_user(1)
        assert len(rec.requests) == 1


# ── Mutations ────────────────────────────────────────────────────

class TestMutations:
    def test_create_group_membership_wraps_payload(self):
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(201, json={"group_membership": {"id": 77, **body["group_membership"]}})

        rec = Recorder(handler)
        created = _make_client(rec).create_group_membership(GroupMembership(user_id=1, group_id=42))
        assert json.loads(rec.requests[0].content) == {"group_membership": {"user_id": 1, "group_id": 42}}
        assert rec.requests[0].url.path == "/api/v2/group_memberships.json"
        assert created.id == 77

    def test_create_organization_membership_wraps_payload(self):
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(201, json={"organization_membership": {"id": 88, **body["organization_membership"]}})

        rec = Recorder(handler)
        created = _make_client(rec).create_organization_membership(
            OrganizationMembership(user_id=1, organization_id=500)
        )
        assert json.loads(rec.requests[0].content) == {
            "organization_membership": {"user_id": 1, "organization_id": 500}
        }
        assert created.id == 88

    def test_create_custom_role_wraps_payload(self):
        def handler(request):
            body = json.loads(request.content)
            return httpx.Response(201, json={"custom_role": {"id": 701, **body["custom_role"]}})

        rec = Recorder(handler)
        created = _make_client(rec).create_custom_role(CustomRole(name="Tier 3", role_type=0))
        assert json.loads(rec.requests[0].content) == {"custom_role": {"name": "Tier 3", "role_type": 0}}
        assert created.id == 701

    def test_remove_group_membership_scans_pages_then_deletes(self):
        def handler(request):
            if request.method == "DELETE":
                return httpx.Response(204)
            if request.url.params.get("page") == "2":
                return httpx.Response(200, json={
                    "group_memberships": [{"id": 56, "user_id": 1, "group_id": 42}],
                })
            return httpx.Response(200, json={
                "group_memberships": [{"id": 55, "user_id": 1, "group_id": 9}],
                "next_page": f"{BASE}/users/1/group_memberships.json?page=2",
            })

        rec = Recorder(handler)
        deleted = _make_client(rec).remove_group_membership(1, 42)
        assert deleted == 56
        assert rec.methods == ["GET", "GET", "DELETE"]
        assert rec.requests[-1].url.path == "/api/v2/group_memberships/56.json"

    def test_remove_missing_group_membership_issues_no_delete(self):
        rec = Recorder(lambda r: httpx.Response(200, json={"group_memberships": []}))
        assert _make_client(rec).remove_group_membership(1, 42) is None
        assert "DELETE" not in rec.methods

    def test_remove_organization_membership(self):
        def handler(request):
            if request.method == "DELETE":
                return httpx.Response(204)
            return httpx.Response(200, json={
                "organization_memberships": [
                    {"id": 90, "user_id": 1, "organization_id": 501},
                    {"id": 91, "user_id": 1, "organization_id": 500},
                ],
            })

        rec = Recorder(handler)
        assert _make_client(rec).remove_organization_membership(1, 500) == 91
        assert rec.requests[0].url.path == "/api/v2/users/1/organization_memberships.json"
        assert rec.requests[-1].url.path == "/api/v2/organization_memberships/91.json"
