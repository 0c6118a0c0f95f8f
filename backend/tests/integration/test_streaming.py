"""
Integration tests for the deal agreement SSE stream.

WHAT: Event sequence as the stored agreement changes
WHY: Waiting parties react to these events instead of polling
HOW: Drive the async generator directly while recording agreements
"""

import json

import pytest
from fastapi.testclient import TestClient

from safetrade.api.v1.endpoints.streaming import agreement_event_generator
from safetrade.main import app
from safetrade.models.api_schemas import AgreementSubmission
from safetrade.services import deal_agreement_service


def record(role: str, **fields):
    return deal_agreement_service.record_agreement(AgreementSubmission(
        conversation_id="conv-1",
        listing_id="listing-1",
        buyer_id="buyer-1",
        seller_id="seller-1",
        user_role=role,
        **fields,
    ))


def payload(event: dict) -> dict:
    return json.loads(event["data"])


@pytest.mark.service
@pytest.mark.integration
class TestAgreementStream:
    """agreement_event_generator behaviour."""

    @pytest.mark.asyncio
    async def test_missing_agreement_yields_error(self, clean_db):
        events = [event async for event in agreement_event_generator("missing", poll_interval=0.01)]

        assert len(events) == 1
        assert events[0]["event"] == "error"
        assert payload(events[0])["error"] == "DEAL_AGREEMENT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_emits_changes_until_scheduled(self, clean_db):
        record("buyer", agreed_price=9500)
        stream = agreement_event_generator("conv-1", poll_interval=0.01, heartbeat_interval=60)

        connected = await stream.__anext__()
        assert connected["event"] == "connected"

        first = await stream.__anext__()
        assert first["event"] == "agreement"
        assert payload(first)["buyer_agreed"] is True
        assert payload(first)["both_agreed"] is False

        record("seller")
        second = await stream.__anext__()
        assert second["event"] == "agreement"
        assert payload(second)["both_agreed"] is True
        assert payload(second)["privacy_revealed"] is True
        assert payload(second)["deal_status"] == "agreed"

        record("buyer", custom_meeting_location="Main St library lot", meeting_datetime="2024-06-11T14:00:00")
        third = await stream.__anext__()
        assert payload(third)["deal_status"] == "scheduled"

        complete = await stream.__anext__()
        assert complete["event"] == "complete"

        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()

    @pytest.mark.asyncio
    async def test_heartbeat_when_idle(self, clean_db):
        record("buyer")
        stream = agreement_event_generator("conv-1", poll_interval=0.01, heartbeat_interval=0)

        await stream.__anext__()  # connected
        await stream.__anext__()  # agreement
        heartbeat = await stream.__anext__()

        assert heartbeat["event"] == "heartbeat"
        assert payload(heartbeat)["type"] == "heartbeat"
        await stream.aclose()

    def test_stream_endpoint_404_for_unknown_conversation(self, clean_db):
        with TestClient(app) as client:
            response = client.get("/api/v1/safe-zone/deal-agreement/missing/stream")

        assert response.status_code == 404
        assert response.json()["error"] == "DEAL_AGREEMENT_NOT_FOUND"
