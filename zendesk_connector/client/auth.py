"""API token handling for the Zendesk API."""

from __future__ import annotations

import base64
import os
from typing import Dict, Optional


def build_auth_headers(email: Optional[str] = None, api_token: Optional[str] = None) -> Dict[str, str]:
    """Return an Authorization header dict for Zendesk API-token auth.

    Zendesk expects HTTP Basic credentials of the form ``{email}/token:{token}``.
    Precedence: explicit arguments > ZENDESK_EMAIL / ZENDESK_API_TOKEN env vars.
    Returns empty dict if no token is configured.
    """
    email = email or os.environ.get("ZENDESK_EMAIL", "")
    token = api_token or os.environ.get("ZENDESK_API_TOKEN")
    if not token:
        return {}
    raw = f"{email}/token:{token}".encode()
    return {"Authorization": f"Basic {base64.b64encode(raw).decode()}"}
