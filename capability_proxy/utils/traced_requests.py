import logging
import re
from typing import Optional, Dict
from contextlib import contextmanager

from opentelemetry.trace import Span, Tracer

from capability_proxy.utils import key_fingerprint, mask_token

logger = logging.getLogger("uvicorn.error")


@contextmanager
def traced_proxy_request(
    tracer: Tracer,
    operation: str,
    capability_key: Optional[str],
    resource: str,
    start_message: str,
    extra_attrs: Optional[Dict] = None,
):
    """Context manager to create a span, set common attributes, and log a start message."""
    with tracer.start_as_current_span(operation) as span:
        span.set_attribute("capability.key_fingerprint", key_fingerprint(capability_key))
        span.set_attribute("capability.resource", resource)
        if extra_attrs:
            for k, v in extra_attrs.items():
                span.set_attribute(k, v)
        logger.info(mask_token(start_message, capability_key or ""))
        yield span


_CAPABILITY_SEGMENT = re.compile(r"(/r/)[^/?#]+")


def redact_capability_path(path: str) -> str:
    """Replace the key segment of ``.../r/<key>/...`` with a placeholder."""
    return _CAPABILITY_SEGMENT.sub(r"\1{key}", path)


def redact_capability_keys(span: Optional[Span], scope: Dict) -> None:
    """ASGI server request hook: keep capability keys out of exported spans."""
    if span is None or not span.is_recording():
        return
    raw_path = scope.get("raw_path")
    path = raw_path.decode("latin-1") if raw_path else scope.get("path", "")
    redacted = redact_capability_path(path)
    span.set_attribute("http.target", redacted)
    span.set_attribute("url.path", redacted)
