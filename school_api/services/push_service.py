"""Push gateway client (httpx async)."""
import logging
from typing import Any, Optional, Sequence

import httpx

from school_api.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()


async def send_push(
    user_ids: Sequence[int],
    title: str,
    body: str,
    data: Optional[dict[str, Any]] = None,
) -> bool:
    """Hand one notification for ``user_ids`` to the push gateway. Returns True on success."""
    if not settings.PUSH_GATEWAY_URL:
        logger.warning("PUSH_GATEWAY_URL not configured; skipping push")
        return False
    headers = {}
    if settings.PUSH_GATEWAY_TOKEN:
        headers["Authorization"] = f"Bearer {settings.PUSH_GATEWAY_TOKEN}"
    payload = {
        "user_ids": list(user_ids),
        "title": title,
        "body": body,
        "data": data or {},
    }
    try:
        async with httpx.AsyncClient(timeout=settings.PUSH_TIMEOUT_SECONDS) as client:
            resp = await client.post(
                f"{settings.PUSH_GATEWAY_URL}/send", json=payload, headers=headers
            )
            resp.raise_for_status()
            return True
    except httpx.HTTPError as exc:
        logger.error("Push gateway send failed (users=%s): %s", list(user_ids), exc)
        return False
