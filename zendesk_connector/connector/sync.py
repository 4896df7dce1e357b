"""SyncRunner — drives one full pass over every resource syncer.

Stands in for the host sync engine when the connector runs standalone (the
``sync`` CLI command). Failures are isolated per resource type: a failing
call stops that type, records the error, and the pass moves on.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterator, List, Tuple, TypeVar

from zendesk_connector.connector.base import ResourceSyncer
from zendesk_connector.connector.connector import Connector
from zendesk_connector.connector.resources import Entitlement, Grant, Resource
from zendesk_connector.errors import ConnectorError, MalformedCursorError

logger = logging.getLogger("zendesk_connector.sync")

T = TypeVar("T")


@dataclass(frozen=True)
class SyncFailure:
    resource_type: str
    error_type: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return {"resource_type": self.resource_type, "error_type": self.error_type, "message": self.message}


@dataclass
class SyncResult:
    resources: List[Resource] = field(default_factory=list)
    entitlements: List[Entitlement] = field(default_factory=list)
    grants: List[Grant] = field(default_factory=list)
    errors: List[SyncFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def summary(self) -> Dict[str, Dict[str, int]]:
        """Per resource type: resource, entitlement and grant counts."""
        counts: Dict[str, Dict[str, int]] = {}

        def bump(resource_type: str, key: str) -> None:
            row = counts.setdefault(resource_type, {"resources": 0, "entitlements": 0, "grants": 0})
            row[key] += 1

        for r in self.resources:
            bump(r.resource_type, "resources")
        for e in self.entitlements:
            bump(e.resource.resource_type, "entitlements")
        for g in self.grants:
            bump(g.resource.resource_type, "grants")
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resources": [r.to_dict() for r in self.resources],
            "entitlements": [e.to_dict() for e in self.entitlements],
            "grants": [g.to_dict() for g in self.grants],
            "errors": [e.to_dict() for e in self.errors],
        }


def paginate(fetch: Callable[[str], Tuple[List[T], str]]) -> Iterator[T]:
    """Follow cursors from fetch("") until an empty next token."""
    token = ""
    seen = set()
    while True:
        items, next_token = fetch(token)
        yield from items
        if not next_token:
            return
        if next_token in seen:
            raise MalformedCursorError(next_token, reason="pagination cursor repeated")
        seen.add(next_token)
        token = next_token


class SyncRunner:
    """Run List -> Entitlements -> Grants for every syncer of a connector."""

    def __init__(self, connector: Connector) -> None:
        self.connector = connector

    def run(self) -> SyncResult:
        result = SyncResult()
        for syncer in self.connector.resource_syncers():
            resource_type = syncer.resource_type().id
            try:
                self._sync_type(syncer, result)
            except ConnectorError as e:
                logger.error(
                    "sync failed for resource type",
                    extra={"resource_type": resource_type, "error": str(e)},
                )
                result.errors.append(SyncFailure(resource_type, type(e).__name__, str(e)))

        self._check_grants(result)
        logger.info(
            "sync pass finished",
            extra={
                "resources": len(result.resources),
                "entitlements": len(result.entitlements),
                "grants": len(result.grants),
                "errors": len(result.errors),
            },
        )
        return result

    def _sync_type(self, syncer: ResourceSyncer, result: SyncResult) -> None:
        resources: List[Resource] = []
        for resource in paginate(lambda token: syncer.list(None, token)):
            resources.append(resource)
            result.resources.append(resource)
        for resource in resources:
            result.entitlements.extend(paginate(lambda token: syncer.entitlements(resource, token)))
            result.grants.extend(paginate(lambda token: syncer.grants(resource, token)))

    @staticmethod
    def _check_grants(result: SyncResult) -> None:
        """Warn about grants whose entitlement was never advertised."""
        advertised = {e.id for e in result.entitlements}
        dangling = [g for g in result.grants if g.entitlement_id not in advertised]
        if dangling:
            logger.warning(
                "grants reference entitlements that were not advertised",
                extra={"count": len(dangling), "example": dangling[0].id},
            )
