import asyncio
import logging
from typing import Awaitable

import httpx
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response

from capability_proxy.capability.paths import ORCHESTRATION_RESOURCE
from capability_proxy.capability.proxy import (
    BackendNotConfiguredError,
    CapabilityProxy,
)
from capability_proxy.utils.exception_logging import log_exception_with_details
from capability_proxy.vars import (
    CAPABILITY_PROXY_DISCONNECT_POLL,
    CAPABILITY_PROXY_PREFIX,
)

router = APIRouter(prefix=CAPABILITY_PROXY_PREFIX)
logger = logging.getLogger("uvicorn.error")

# nginx convention for "client closed request"; never reaches the client
CLIENT_CLOSED_REQUEST = 499


def get_capability_proxy(request: Request) -> CapabilityProxy:
    proxy = getattr(request.app.state, "capability_proxy", None)
    if proxy is None:
        raise HTTPException(
            status_code=503,
            detail="Capability proxy is not initialized.",
        )
    return proxy


async def _watch_disconnect(
    request: Request,
    task: asyncio.Task,
    disconnected: asyncio.Event,
    poll_interval: float,
) -> None:
    while not task.done():
        if await request.is_disconnected():
            disconnected.set()
            task.cancel()
            return
        await asyncio.sleep(poll_interval)


async def run_until_disconnect(
    request: Request,
    work: Awaitable[Response],
    poll_interval: float = CAPABILITY_PROXY_DISCONNECT_POLL,
) -> Response:
    """
    Await ``work`` but abort it as soon as the inbound client goes away, so
    the backend call is not left running for nobody.
    """
    task = asyncio.ensure_future(work)
    disconnected = asyncio.Event()
    watcher = asyncio.create_task(
        _watch_disconnect(request, task, disconnected, poll_interval)
    )
    try:
        return await task
    except asyncio.CancelledError:
        if disconnected.is_set():
            logger.info("[Capability-Proxy] Client disconnected, backend call aborted")
            return Response(status_code=CLIENT_CLOSED_REQUEST)
        raise
    finally:
        watcher.cancel()
        if not task.done():
            task.cancel()


async def forward_capability_request(
    request: Request,
    proxy: CapabilityProxy,
    key: str,
    resource: str,
) -> Response:
    """
    Forward and relay one capability-scoped read.

    Transport failures are turned into gateway errors here, at the HTTP
    boundary; the proxy itself never recovers them.
    """
    query_string = request.scope.get("query_string", b"")
    try:
        return await run_until_disconnect(
            request, proxy.handle(key, query_string, resource)
        )
    except BackendNotConfiguredError as e:
        logger.error(f"[Capability-Proxy] {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except httpx.TimeoutException as e:
        log_exception_with_details(
            logger, "[Capability-Proxy] Backend timeout:", e, secret=key
        )
        raise HTTPException(status_code=504, detail="Gateway timeout")
    except httpx.TransportError as e:
        log_exception_with_details(
            logger, "[Capability-Proxy] Backend unreachable:", e, secret=key
        )
        raise HTTPException(
            status_code=502, detail="Bad gateway - cannot connect to capability backend"
        )


# {key:path} so an encoded "/" in the key (a%2Fb) still lands in one
# parameter, and an empty segment reaches validation instead of a 404.
@router.get("/r/{key:path}/" + ORCHESTRATION_RESOURCE)
async def proxy_orchestration(
    key: str,
    request: Request,
    proxy: CapabilityProxy = Depends(get_capability_proxy),
):
    """Relay the backend orchestration view for a capability key."""
    return await forward_capability_request(request, proxy, key, ORCHESTRATION_RESOURCE)
