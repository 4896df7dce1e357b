"""ZendeskClient — typed access to the Zendesk Support REST API."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

import httpx
from pydantic import BaseModel

from zendesk_connector.client.auth import build_auth_headers
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
from zendesk_connector.client.pagination import parse_next_page
from zendesk_connector.client.utils import generate_request_id, retry_with_backoff
from zendesk_connector.errors import (
    AuthError,
    ForbiddenError,
    NotFoundError,
    RateLimitedError,
    ServerError,
    TransportError,
    ValidationError,
)
from zendesk_connector.secrets import redact_text

logger = logging.getLogger("zendesk_connector.client")

M = TypeVar("M", bound=BaseModel)


class ZendeskClient:
    """Synchronous client for the Zendesk API.

    Usage::

        from zendesk_connector.client import ZendeskClient

        zc = ZendeskClient("acme", email="ops@acme.com", api_token="...")
        users, next_page = zc.list_users()

    Every list call returns ``(items, next_page_token)``; a token of ``""``
    means there are no more pages. Errors surface as TransportError
    subclasses naming the failing operation. Retries, when enabled, happen
    here and nowhere else.
    """

    def __init__(
        self,
        subdomain: str,
        email: str = "",
        api_token: str = "",
        timeout: float = 60.0,
        retries: int = 0,
        page_size: int = 100,
        base_url: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._subdomain = subdomain
        self._base_url = (base_url or f"https://{subdomain}.zendesk.com/api/v2").rstrip("/")
        self._email = email
        self._api_token = api_token
        self._timeout = timeout
        self._retries = retries
        self._page_size = page_size
        self._client = httpx.Client(base_url=self._base_url, timeout=self._timeout, transport=transport)

    @classmethod
    def from_settings(cls, settings, transport: Optional[httpx.BaseTransport] = None) -> "ZendeskClient":
        return cls(
            settings.subdomain,
            email=settings.email,
            api_token=settings.api_token,
            timeout=settings.timeout,
            retries=settings.retries,
            page_size=settings.page_size,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "ZendeskClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    # ── Internal helpers ─────────────────────────────────────────

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers: Dict[str, str] = {"Accept": "application/json"}
        headers.update(build_auth_headers(self._email, self._api_token))
        if extra:
            headers.update(extra)
        if "x-request-id" not in {k.lower() for k in headers}:
            headers["X-Request-ID"] = generate_request_id()
        return headers

    def _raise_for_status(self, resp: httpx.Response, operation: str) -> None:
        if resp.status_code < 300:
            return
        request_id = resp.headers.get("x-request-id") or resp.headers.get("x-zendesk-request-id")
        try:
            body = resp.json()
        except ValueError:
            body = resp.text

        if isinstance(body, dict):
            # Zendesk errors: {"error": "...", "description": "..."} or
            # {"error": {"title": ..., "message": ...}}
            err = body.get("error")
            if isinstance(err, dict):
                message = err.get("message") or err.get("title") or str(body)
            else:
                message = body.get("description") or err or body.get("message") or str(body)
        else:
            message = str(body) or resp.reason_phrase
        message = redact_text(str(message))

        status = resp.status_code
        if status == 401:
            raise AuthError(operation, message, status, body, request_id)
        if status == 403:
            raise ForbiddenError(operation, message, status, body, request_id)
        if status == 404:
            raise NotFoundError(operation, message, status, body, request_id)
        if status == 422:
            raise ValidationError(operation, message, status, body, request_id)
        if status == 429:
            raise RateLimitedError(operation, message, status, body, request_id)
        if status >= 500:
            raise ServerError(operation, message, status, body, request_id)
        raise TransportError(operation, message, status, body, request_id)

    def _request(self, method: str, path: str, operation: str, **kwargs) -> httpx.Response:
        headers = self._headers(kwargs.pop("headers", None))

        def do():
            return self._client.request(method, path, headers=headers, **kwargs)

        try:
            if self._retries > 0:
                resp = retry_with_backoff(do, retries=self._retries)
            else:
                resp = do()
        except httpx.HTTPError as e:
            raise TransportError(operation, redact_text(str(e)) or type(e).__name__) from e

        logger.debug("%s %s -> %d", method, path, resp.status_code, extra={"operation": operation})
        self._raise_for_status(resp, operation)
        return resp

    def _get(self, path: str, operation: str, **kwargs) -> Dict[str, Any]:
        return self._json(self._request("GET", path, operation, **kwargs), operation)

    def _post(self, path: str, operation: str, json: Dict[str, Any]) -> Dict[str, Any]:
        return self._json(self._request("POST", path, operation, json=json), operation)

    def _delete(self, path: str, operation: str) -> None:
        self._request("DELETE", path, operation)

    @staticmethod
    def _json(resp: httpx.Response, operation: str) -> Dict[str, Any]:
        try:
            body = resp.json()
        except ValueError as e:
            raise TransportError(operation, "response body is not valid JSON", resp.status_code) from e
        if not isinstance(body, dict):
            raise TransportError(operation, "unexpected response body", resp.status_code, body)
        return body

    def _page_params(self, opts: PageOptions) -> Dict[str, Any]:
        params = opts.params()
        if "per_page" not in params and self._page_size > 0:
            params["per_page"] = self._page_size
        return params

    def _list(
        self,
        path: str,
        key: str,
        model: Type[M],
        operation: str,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[M], str]:
        body = self._get(path, operation, params=params)
        items = [model.model_validate(raw) for raw in body.get(key) or []]
        return items, parse_next_page(body.get("next_page"))

    # ── Users ────────────────────────────────────────────────────

    def list_users(self, opts: Optional[UserListOptions] = None) -> Tuple[List[User], str]:
        """GET /users.json"""
        opts = opts or UserListOptions()
        return self._list("/users.json", "users", User, "list users", self._page_params(opts))

    def get_user(self, user_id: int) -> User:
        """GET /users/{user_id}.json"""
        body = self._get(f"/users/{user_id}.json", "get user")
        return User.model_validate(body["user"])

    def get_current_user(self) -> User:
        """GET /users/me.json — the account the API token belongs to."""
        body = self._get("/users/me.json", "get current user")
        return User.model_validate(body["user"])

    # ── Groups ───────────────────────────────────────────────────

    def list_groups(self, opts: Optional[PageOptions] = None) -> Tuple[List[Group], str]:
        """GET /groups.json"""
        opts = opts or PageOptions()
        return self._list("/groups.json", "groups", Group, "list groups", self._page_params(opts))

    def get_group(self, group_id: int) -> Group:
        """GET /groups/{group_id}.json"""
        body = self._get(f"/groups/{group_id}.json", "get group")
        return Group.model_validate(body["group"])

    def list_group_memberships(
        self, opts: Optional[GroupMembershipListOptions] = None
    ) -> Tuple[List[GroupMembership], str]:
        """GET group memberships, scoped to a group or a user when given."""
        opts = opts or GroupMembershipListOptions()
        if opts.group_id is not None:
            path = f"/groups/{opts.group_id}/memberships.json"
        elif opts.user_id is not None:
            path = f"/users/{opts.user_id}/group_memberships.json"
        else:
            path = "/group_memberships.json"
        return self._list(
            path, "group_memberships", GroupMembership, "list group memberships", self._page_params(opts)
        )

    def create_group_membership(self, membership: GroupMembership) -> GroupMembership:
        """POST /group_memberships.json"""
        body = self._post(
            "/group_memberships.json",
            "create group membership",
            json={"group_membership": membership.payload()},
        )
        return GroupMembership.model_validate(body["group_membership"])

    def remove_group_membership(self, user_id: int, group_id: int) -> Optional[int]:
        """Delete the membership linking user_id to group_id.

        Returns the deleted membership id, or None when the user is not a
        member of the group (no DELETE is issued).
        """
        membership = self._find_membership(
            lambda page: self.list_group_memberships(GroupMembershipListOptions(user_id=user_id, page=page)),
            lambda m: m.user_id == user_id and m.group_id == group_id,
        )
        if membership is None or membership.id is None:
            return None
        self._delete(f"/group_memberships/{membership.id}.json", "delete group membership")
        return membership.id

    # ── Organizations ────────────────────────────────────────────

    def list_organizations(self, opts: Optional[PageOptions] = None) -> Tuple[List[Organization], str]:
        """GET /organizations.json"""
        opts = opts or PageOptions()
        return self._list(
            "/organizations.json", "organizations", Organization, "list organizations", self._page_params(opts)
        )

    def get_organization(self, org_id: int) -> Organization:
        """GET /organizations/{org_id}.json"""
        body = self._get(f"/organizations/{org_id}.json", "get organization")
        return Organization.model_validate(body["organization"])

    def get_org_name(self, org_id: int) -> str:
        return self.get_organization(org_id).name

    def list_organization_users(
        self, org_id: int, opts: Optional[PageOptions] = None
    ) -> Tuple[List[User], str]:
        """GET /organizations/{org_id}/users.json"""
        opts = opts or PageOptions()
        return self._list(
            f"/organizations/{org_id}/users.json", "users", User, "list organization users", self._page_params(opts)
        )

    def list_organization_memberships(
        self, opts: Optional[OrganizationMembershipListOptions] = None
    ) -> Tuple[List[OrganizationMembership], str]:
        """GET organization memberships, scoped to an organization or a user when given."""
        opts = opts or OrganizationMembershipListOptions()
        if opts.organization_id is not None:
            path = f"/organizations/{opts.organization_id}/organization_memberships.json"
        elif opts.user_id is not None:
            path = f"/users/{opts.user_id}/organization_memberships.json"
        else:
            path = "/organization_memberships.json"
        return self._list(
            path,
            "organization_memberships",
            OrganizationMembership,
            "list organization memberships",
            self._page_params(opts),
        )

    def create_organization_membership(self, membership: OrganizationMembership) -> OrganizationMembership:
        """POST /organization_memberships.json"""
        body = self._post(
            "/organization_memberships.json",
            "create organization membership",
            json={"organization_membership": membership.payload()},
        )
        return OrganizationMembership.model_validate(body["organization_membership"])

    def remove_organization_membership(self, user_id: int, organization_id: int) -> Optional[int]:
        """Delete the membership linking user_id to organization_id.

        Returns the deleted membership id, or None when no such membership
        exists (no DELETE is issued).
        """
        membership = self._find_membership(
            lambda page: self.list_organization_memberships(
                OrganizationMembershipListOptions(user_id=user_id, page=page)
            ),
            lambda m: m.user_id == user_id and m.organization_id == organization_id,
        )
        if membership is None or membership.id is None:
            return None
        self._delete(f"/organization_memberships/{membership.id}.json", "delete organization membership")
        return membership.id

    # ── Custom roles ─────────────────────────────────────────────

    def list_custom_roles(self) -> Tuple[List[CustomRole], str]:
        """GET /custom_roles.json (not paginated upstream)."""
        return self._list("/custom_roles.json", "custom_roles", CustomRole, "list custom roles")

    def create_custom_role(self, role: CustomRole) -> CustomRole:
        """POST /custom_roles.json"""
        body = self._post("/custom_roles.json", "create custom role", json={"custom_role": role.payload()})
        return CustomRole.model_validate(body["custom_role"])

    # ── Scans ────────────────────────────────────────────────────

    @staticmethod
    def _find_membership(fetch_page, matches):
        """Walk every page from fetch_page(page) and return the first match."""
        page = 0
        while True:
            memberships, next_page = fetch_page(page)
            for membership in memberships:
                if matches(membership):
                    return membership
            if not next_page:
                return None
            page = int(next_page)
