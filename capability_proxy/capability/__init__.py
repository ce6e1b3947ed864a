from capability_proxy.capability.errors import (
    INVALID_KEY,
    build_error_response,
    invalid_key_response,
)
from capability_proxy.capability.paths import build_capability_path
from capability_proxy.capability.proxy import CapabilityProxy, ProxyResponse
from capability_proxy.capability.query import (
    OrchestrationFilters,
    build_orchestration_query,
)
from capability_proxy.capability.status_filter import (
    ClaimTab,
    OrchestrationStatus,
    normalize_status_filter,
    to_orchestration_status,
)

__all__ = [
    "INVALID_KEY",
    "CapabilityProxy",
    "ClaimTab",
    "OrchestrationFilters",
    "OrchestrationStatus",
    "ProxyResponse",
    "build_capability_path",
    "build_error_response",
    "build_orchestration_query",
    "invalid_key_response",
    "normalize_status_filter",
    "to_orchestration_status",
]
