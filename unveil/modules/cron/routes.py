"""
Cron entry point

An external scheduler calls this route; it relays a POST to the scheduled
message processor on the same origin and passes its JSON back unchanged.
"""

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from unveil.config import settings
from unveil.core.dependencies import cron_authorized
from unveil.modules.messages.routes import PROCESS_SCHEDULED_PATH
from datetime import datetime, timezone
from typing import AsyncIterator, Optional
import httpx
import logging

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cron", tags=["cron"])


async def get_processor_http_client() -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.processor_timeout_sec) as client:
        yield client


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


@router.api_route("/process-messages", methods=["GET", "POST"])
async def process_messages(
    request: Request,
    authorization: Optional[str] = Header(None),
    client: httpx.AsyncClient = Depends(get_processor_http_client)
):
    """Trigger scheduled message processing"""
    if not cron_authorized(authorization):
        logger.warning("Cron request rejected: bad or missing secret")
        return JSONResponse(status_code=401, content={"error": "Unauthorized"})

    logger.info("Cron job triggered: processing scheduled messages")
    processor_url = str(request.base_url).rstrip("/") + PROCESS_SCHEDULED_PATH

    # The processor checks the same secret
    headers = {"Content-Type": "application/json"}
    if authorization:
        headers["Authorization"] = authorization

    try:
        response = await client.post(processor_url, headers=headers)
        result = response.json()
        if not response.is_success:
            raise RuntimeError(f"Message processor failed: {result.get('error')}")
    except Exception as e:
        logger.error(f"Cron job failed: {e}")
        return JSONResponse(
            status_code=500,
            content={"error": "Cron job failed", "timestamp": _timestamp(), "details": str(e)},
        )

    logger.info(f"Cron job completed: {result}")
    return {"success": True, "timestamp": _timestamp(), "result": result}
