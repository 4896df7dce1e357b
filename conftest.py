"""Repo-wide test fixtures.

Snapshots and restores connector environment variables between tests so
settings loaded in one test never leak into the next.
"""

from __future__ import annotations

import os

import pytest

_SENSITIVE_ENV_VARS = [
    "ZENDESK_SUBDOMAIN",
    "ZENDESK_EMAIL",
    "ZENDESK_API_TOKEN",
    "ZENDESK_ORGS",
    "ZENDESK_SYNC_USERS",
    "ZENDESK_PAGE_SIZE",
    "ZENDESK_TIMEOUT",
    "ZENDESK_RETRIES",
    "ZENDESK_LOG_FORMAT",
    "ZENDESK_LOG_LEVEL",
]


@pytest.fixture(autouse=True)
def _restore_env():
    """Snapshot connector env vars before each test and restore after."""
    snapshot = {}
    for var in _SENSITIVE_ENV_VARS:
        val = os.environ.get(var)
        if val is not None:
            snapshot[var] = val

    yield

    for var in _SENSITIVE_ENV_VARS:
        if var in snapshot:
            os.environ[var] = snapshot[var]
        else:
            os.environ.pop(var, None)
