"""
Client-side helpers for querying the orchestration endpoint through the proxy.
"""

from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

from capability_proxy.capability.paths import (
    ORCHESTRATION_RESOURCE,
    build_capability_path,
)
from capability_proxy.capability.status_filter import normalize_status_filter


@dataclass(frozen=True)
class OrchestrationFilters:
    status: Optional[str] = None
    priority: Optional[str] = None
    agent: Optional[str] = None
    file: Optional[str] = None
    folder: Optional[str] = None
    limit: Optional[int] = None
    cursor: Optional[str] = None


def build_orchestration_query(filters: Optional[OrchestrationFilters]) -> str:
    """
    Build the query string (with leading ``?``) for an orchestration read.

    The status goes through the claim tab normalizer first; a UI-only tab
    drops the parameter entirely instead of sending a value the backend
    does not model. Empty values are omitted.
    """
    if filters is None:
        return ""
    params = []
    status = normalize_status_filter(filters.status)
    if status:
        params.append(("status", status))
    for name in ("priority", "agent", "file", "folder"):
        value = getattr(filters, name)
        if value:
            params.append((name, value))
    if isinstance(filters.limit, int) and not isinstance(filters.limit, bool):
        params.append(("limit", str(filters.limit)))
    if filters.cursor:
        params.append(("cursor", filters.cursor))
    return f"?{urlencode(params)}" if params else ""


def capability_orchestration_url(
    key: str,
    filters: Optional[OrchestrationFilters] = None,
    prefix: str = "/api/capability",
) -> str:
    """URL of the proxied orchestration endpoint for ``key``."""
    path = build_capability_path(key, ORCHESTRATION_RESOURCE)
    return f"{prefix.rstrip('/')}{path}{build_orchestration_query(filters)}"
