"""
SSE streaming endpoint for deal agreements.

WHAT: Server-Sent Events stream of agreement flag changes
WHY: A waiting party learns the moment the counterpart agrees
HOW: EventSourceResponse wrapping a polling generator with heartbeats
"""

from fastapi import APIRouter
from sse_starlette.sse import EventSourceResponse
from typing import AsyncIterator, Optional
import asyncio
import json
import time
from datetime import datetime

from ....core.config import settings
from ....core.models import DealStatus
from ....services import deal_agreement_service
from ....utils.exceptions import DealAgreementNotFoundException
from ....utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


def _event(event_type: str, **payload) -> dict:
    payload["type"] = event_type
    payload.setdefault("timestamp", datetime.now().isoformat())
    return {"event": event_type, "data": json.dumps(payload)}


async def agreement_event_generator(
    conversation_id: str,
    poll_interval: Optional[float] = None,
    heartbeat_interval: Optional[float] = None
) -> AsyncIterator[dict]:
    """
    Generate SSE events for one conversation's agreement.

    WHAT: Emit an agreement event whenever the stored flags change
    WHY: Clients stay transport-agnostic; this replaces client-side polling
    HOW: Poll the service, diff against the last emitted state, heartbeat when idle

    Args:
        conversation_id: Conversation to follow
        poll_interval: Seconds between DB reads (default SSE_POLL_INTERVAL)
        heartbeat_interval: Idle seconds before a heartbeat (default SSE_HEARTBEAT_INTERVAL)

    Yields:
        SSE event dicts
    """
    poll_interval = settings.SSE_POLL_INTERVAL if poll_interval is None else poll_interval
    heartbeat_interval = settings.SSE_HEARTBEAT_INTERVAL if heartbeat_interval is None else heartbeat_interval

    logger.info(f"Starting SSE stream for conversation {conversation_id}")

    try:
        snapshot = deal_agreement_service.get_agreement_state(conversation_id)
    except DealAgreementNotFoundException as e:
        yield _event("error", error=e.code, message=e.message)
        return

    yield _event("connected", conversation_id=conversation_id)

    last_key = None
    last_sent = time.monotonic()
    try:
        while True:
            key = (snapshot.buyer_agreed, snapshot.seller_agreed, snapshot.privacy_revealed, snapshot.deal_status)
            if key != last_key:
                last_key = key
                last_sent = time.monotonic()
                yield _event(
                    "agreement",
                    conversation_id=conversation_id,
                    buyer_agreed=snapshot.buyer_agreed,
                    seller_agreed=snapshot.seller_agreed,
                    privacy_revealed=snapshot.privacy_revealed,
                    deal_status=snapshot.deal_status,
                    both_agreed=snapshot.both_agreed
                )

                if snapshot.deal_status == DealStatus.SCHEDULED.value:
                    yield _event("complete", conversation_id=conversation_id)
                    break
            elif time.monotonic() - last_sent >= heartbeat_interval:
                last_sent = time.monotonic()
                yield _event("heartbeat")

            await asyncio.sleep(poll_interval)
            snapshot = deal_agreement_service.get_agreement_state(conversation_id)
    except DealAgreementNotFoundException as e:
        yield _event("error", error=e.code, message=e.message)
    finally:
        logger.info(f"SSE stream ended for conversation {conversation_id}")


@router.get("/safe-zone/deal-agreement/{conversation_id}/stream")
async def stream_deal_agreement(conversation_id: str):
    """
    Stream agreement changes via SSE.

    Args:
        conversation_id: Conversation to follow

    Returns:
        EventSourceResponse with agreement events

    Raises:
        DealAgreementNotFoundException: If no agreement exists yet
    """
    logger.info(f"SSE stream requested for conversation {conversation_id}")

    # Fail fast with 404 before opening the stream
    deal_agreement_service.get_agreement_state(conversation_id)

    return EventSourceResponse(
        agreement_event_generator(conversation_id),
        media_type="text/event-stream"
    )
