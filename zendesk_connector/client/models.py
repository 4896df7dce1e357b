"""Pydantic models for Zendesk API objects and list options.

These mirror the upstream JSON payloads so callers get typed access to
fields. Unknown upstream fields are ignored.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class _UpstreamModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


# ── Users ────────────────────────────────────────────────────────

class User(_UpstreamModel):
    id: int
    name: str = ""
    email: str = ""
    role: str = "end-user"
    custom_role_id: Optional[int] = None
    active: bool = True
    suspended: bool = False
    organization_id: Optional[int] = None
    url: Optional[str] = None
    # Kept as raw strings: timestamp parsing is lenient and done by the mapper.
    last_login_at: Optional[str] = None
    created_at: Optional[str] = None


# ── Groups ───────────────────────────────────────────────────────

class Group(_UpstreamModel):
    id: int
    name: str = ""
    description: str = ""
    default: bool = False
    deleted: bool = False
    url: Optional[str] = None
    created_at: Optional[str] = None


class GroupMembership(_UpstreamModel):
    id: Optional[int] = None
    user_id: int
    group_id: int
    default: bool = False
    created_at: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        return {"user_id": self.user_id, "group_id": self.group_id}


# ── Organizations ────────────────────────────────────────────────

class Organization(_UpstreamModel):
    id: int
    name: str = ""
    url: Optional[str] = None
    details: Optional[str] = None
    domain_names: List[str] = Field(default_factory=list)
    created_at: Optional[str] = None


class OrganizationMembership(_UpstreamModel):
    id: Optional[int] = None
    user_id: int
    organization_id: int
    organization_name: Optional[str] = None
    default: Optional[bool] = None
    created_at: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        return {"user_id": self.user_id, "organization_id": self.organization_id}


# ── Custom roles ─────────────────────────────────────────────────

class CustomRole(_UpstreamModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    role_type: Optional[int] = None
    team_member_count: Optional[int] = None
    configuration: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[str] = None

    def payload(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"name": self.name}
        if self.description:
            body["description"] = self.description
        if self.role_type is not None:
            body["role_type"] = self.role_type
        if self.configuration:
            body["configuration"] = self.configuration
        return body


# ── List options ─────────────────────────────────────────────────

class PageOptions(BaseModel):
    """Offset pagination: page 0 means "let the server pick the first page"."""

    page: int = 0
    per_page: int = 0

    def params(self) -> Dict[str, Any]:
        params: Dict[str, Any] = {}
        if self.page > 0:
            params["page"] = self.page
        if self.per_page > 0:
            params["per_page"] = self.per_page
        return params


class UserListOptions(PageOptions):
    roles: List[str] = Field(default_factory=list)

    def params(self) -> Dict[str, Any]:
        params = super().params()
        if self.roles:
            params["role[]"] = list(self.roles)
        return params


class GroupMembershipListOptions(PageOptions):
    group_id: Optional[int] = None
    user_id: Optional[int] = None


class OrganizationMembershipListOptions(PageOptions):
    organization_id: Optional[int] = None
    user_id: Optional[int] = None
