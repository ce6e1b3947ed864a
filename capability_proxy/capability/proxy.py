import logging
from dataclasses import dataclass
from typing import Optional, Union
from urllib.parse import quote, urlparse

import httpx
from fastapi.responses import Response
from opentelemetry import trace

from capability_proxy.capability.errors import invalid_key_response
from capability_proxy.capability.paths import (
    ORCHESTRATION_RESOURCE,
    build_capability_path,
)
from capability_proxy.utils import key_fingerprint
from capability_proxy.utils.traced_requests import traced_proxy_request

tracer = trace.get_tracer(__name__)
logger = logging.getLogger("uvicorn.error")

BACKEND_ACCEPT = "application/json"

# Every printable ASCII byte passes through untouched, existing escapes included
QUERY_SAFE_CHARS = "".join(map(chr, range(0x21, 0x7F)))


class BackendNotConfiguredError(RuntimeError):
    pass


@dataclass(frozen=True)
class ProxyResponse:
    """Upstream answer as relayed to the caller; the body is never parsed."""

    status_code: int
    content_type: Optional[str]
    body: bytes

    def to_response(self) -> Response:
        headers = {"content-type": self.content_type} if self.content_type else None
        return Response(content=self.body, status_code=self.status_code, headers=headers)


def build_target_url(
    backend_url: str,
    key: str,
    query_string: Union[str, bytes] = "",
    resource: str = ORCHESTRATION_RESOURCE,
) -> str:
    """
    Join the backend base URL, the capability path and the inbound query.

    The query string is appended as received: no re-parsing, re-ordering or
    de-duplication, and empty values survive. Raw bytes outside printable
    ASCII are percent-encoded one by one, so the backend decodes exactly the
    bytes the caller sent.
    """
    query_string = quote(query_string, safe=QUERY_SAFE_CHARS)
    if query_string.startswith("?"):
        query_string = query_string[1:]
    target = f"{backend_url.rstrip('/')}{build_capability_path(key, resource)}"
    if query_string:
        target = f"{target}?{query_string}"
    return target


class CapabilityProxy:
    """
    Forwards capability-scoped reads to the backend and relays the answer.

    The HTTP client is injected so its transport, timeout and connection
    pool are owned by the caller. Each call issues exactly one GET carrying
    only ``accept: application/json``; inbound headers and cookies never
    reach the backend.
    """

    def __init__(
        self,
        backend_url: str,
        client: httpx.AsyncClient,
        timeout: Optional[float] = None,
    ):
        self.backend_url = backend_url.rstrip("/")
        self.client = client
        self.timeout = httpx.Timeout(timeout) if timeout is not None else client.timeout

    async def handle(
        self,
        key: Optional[str],
        query_string: Union[str, bytes] = "",
        resource: str = ORCHESTRATION_RESOURCE,
    ) -> Response:
        if not key:
            logger.info("[Capability-Proxy] Rejecting request without capability key")
            return invalid_key_response()
        proxied = await self.forward(key, query_string, resource)
        return proxied.to_response()

    async def forward(
        self,
        key: str,
        query_string: Union[str, bytes] = "",
        resource: str = ORCHESTRATION_RESOURCE,
    ) -> ProxyResponse:
        """Issue the outbound call. Transport errors propagate to the caller."""
        if not self.backend_url:
            raise BackendNotConfiguredError(
                "CAPABILITY_BACKEND_URL is not configured. Proxy is unavailable."
            )
        target_url = build_target_url(self.backend_url, key, query_string, resource)
        with traced_proxy_request(
            tracer,
            operation="capability_proxy",
            capability_key=key,
            resource=resource,
            start_message=f"[Capability-Proxy] GET {resource} for key {key_fingerprint(key)}",
            extra_attrs={
                "proxy.method": "GET",
                "proxy.backend_host": urlparse(self.backend_url).netloc,
            },
        ) as span:
            # Built directly (not via client.build_request) so no client-level
            # default headers or cookie jar entries are attached.
            request = httpx.Request(
                "GET",
                target_url,
                headers={"accept": BACKEND_ACCEPT},
                extensions={"timeout": self.timeout.as_dict()},
            )
            response = await self.client.send(request)
            try:
                body = response.content
            finally:
                await response.aclose()

            span.set_attribute("proxy.status_code", response.status_code)
            logger.debug(
                f"[Capability-Proxy] Backend answered {response.status_code} "
                f"for key {key_fingerprint(key)} ({len(body)} bytes)"
            )
            return ProxyResponse(
                status_code=response.status_code,
                content_type=response.headers.get("content-type"),
                body=body,
            )


def create_backend_client(timeout: float, retries: int = 0) -> httpx.AsyncClient:
    """Shared outbound client; redirects are relayed, not followed."""
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout),
        follow_redirects=False,
        transport=httpx.AsyncHTTPTransport(retries=retries),
    )
