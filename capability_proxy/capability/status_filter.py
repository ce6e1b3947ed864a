"""
Claim tab to orchestration status mapping.

The UI groups claims into tabs. Four of them are real orchestration statuses
on the backend; the other three (``active``, ``expired``, ``completed``) are
presentation-only and are derived from backend state by criteria the
backend does not filter on. Sending them upstream would match nothing, so
they degrade to "no filter".
"""

from enum import Enum
from typing import Dict, Optional


class OrchestrationStatus(str, Enum):
    """Statuses the orchestration backend can filter by."""

    PENDING = "pending"
    CLAIMED = "claimed"
    STALLED = "stalled"
    CANCELLED = "cancelled"


class ClaimTab(str, Enum):
    """Client-facing status vocabulary, including UI-only tabs."""

    PENDING = "pending"
    CLAIMED = "claimed"
    STALLED = "stalled"
    CANCELLED = "cancelled"
    ACTIVE = "active"
    EXPIRED = "expired"
    COMPLETED = "completed"


# Every ClaimTab member needs an explicit row; see _check_exhaustive below.
CLAIM_TAB_TO_ORCHESTRATION_STATUS: Dict[ClaimTab, Optional[OrchestrationStatus]] = {
    ClaimTab.PENDING: OrchestrationStatus.PENDING,
    ClaimTab.CLAIMED: OrchestrationStatus.CLAIMED,
    ClaimTab.STALLED: OrchestrationStatus.STALLED,
    ClaimTab.CANCELLED: OrchestrationStatus.CANCELLED,
    ClaimTab.ACTIVE: None,
    ClaimTab.EXPIRED: None,
    ClaimTab.COMPLETED: None,
}


def _check_exhaustive() -> None:
    missing = [tab.value for tab in ClaimTab if tab not in CLAIM_TAB_TO_ORCHESTRATION_STATUS]
    if missing:
        raise RuntimeError(
            f"Claim tabs without an orchestration status mapping: {', '.join(missing)}"
        )


_check_exhaustive()


def to_orchestration_status(
    tab: Optional[ClaimTab],
) -> Optional[OrchestrationStatus]:
    """Map a claim tab to the backend status filter, or None for no filter."""
    if tab is None:
        return None
    # A plain OrchestrationStatus is accepted too, so the mapping is idempotent
    return CLAIM_TAB_TO_ORCHESTRATION_STATUS[ClaimTab(tab.value)]


def parse_claim_tab(raw: Optional[str]) -> Optional[ClaimTab]:
    """Parse free-form input (query strings, CLI flags) into a claim tab.

    Blank and unknown values yield None.
    """
    if not raw:
        return None
    normalized = raw.strip().lower()
    if not normalized:
        return None
    try:
        return ClaimTab(normalized)
    except ValueError:
        return None


def normalize_status_filter(raw: Optional[str]) -> Optional[str]:
    """Turn a raw client status into the backend ``status`` value, if any."""
    status = to_orchestration_status(parse_claim_tab(raw))
    return status.value if status is not None else None
