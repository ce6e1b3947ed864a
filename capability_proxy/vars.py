import os
from urllib.parse import urlparse


def normalize_backend_url(value: str) -> str:
    """Validate an absolute http(s) backend URL and strip its trailing slash."""
    value = (value or "").strip()
    if not value:
        return ""
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(
            f"CAPABILITY_BACKEND_URL must be an absolute http(s) URL, got {value!r}"
        )
    return value.rstrip("/")


SERVICE_NAME = os.getenv("SERVICE_NAME", "capability-proxy")

CAPABILITY_BACKEND_URL = normalize_backend_url(
    os.environ.get("CAPABILITY_BACKEND_URL", "")
)
CAPABILITY_PROXY_PREFIX = os.environ.get(
    "CAPABILITY_PROXY_PREFIX", "/api/capability"
).rstrip("/")
# Seconds; bounded so a hung backend cannot hold a request open forever
CAPABILITY_PROXY_TIMEOUT = float(os.environ.get("CAPABILITY_PROXY_TIMEOUT", "30"))
# Connection-level retries of the transport only; requests are never replayed
CAPABILITY_PROXY_RETRIES = int(os.environ.get("CAPABILITY_PROXY_RETRIES", "0"))
CAPABILITY_PROXY_DISCONNECT_POLL = float(
    os.environ.get("CAPABILITY_PROXY_DISCONNECT_POLL", "0.1")
)

OTLP_ENDPOINT = os.getenv("OTLP_ENDPOINT")
OTLP_HEADERS = os.getenv("OTLP_HEADERS", "")
