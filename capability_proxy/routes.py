import logging

from fastapi import APIRouter

from capability_proxy.capability.route import router as capability_router
from capability_proxy.vars import CAPABILITY_BACKEND_URL, CAPABILITY_PROXY_PREFIX

router = APIRouter()
logger = logging.getLogger("uvicorn.error")

if CAPABILITY_BACKEND_URL:
    logger.info(
        f"Proxying {CAPABILITY_PROXY_PREFIX}/r/* to backend {CAPABILITY_BACKEND_URL}"
    )
else:
    logger.warning("No CAPABILITY_BACKEND_URL set, capability routes will answer 503")

router.include_router(capability_router)


@router.get("/healthz")
async def health_check():
    return {"status": "ok", "backend_configured": bool(CAPABILITY_BACKEND_URL)}
