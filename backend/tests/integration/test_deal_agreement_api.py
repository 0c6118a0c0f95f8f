"""
Integration tests for the deal agreement endpoints.

WHAT: Upsert, privacy reveal, masking and error mapping
WHY: Both wizards trust this resource as their only shared state
HOW: FastAPI TestClient against a fresh SQLite schema
"""

import pytest
from fastapi.testclient import TestClient

from safetrade.core.database import get_db
from safetrade.core.models import DealAgreement, PrivacyProtectionLog
from safetrade.main import app

URL = "/api/v1/safe-zone/deal-agreement"


@pytest.fixture
def client(clean_db):
    """Create FastAPI test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def zone_id(client):
    """Seed the catalog and return one police station id."""
    client.post("/api/v1/safe-zone/seed-data")
    response = client.get("/api/v1/safe-zone/locations", params={"city": "Newark", "type": "police_station"})
    return response.json()["safe_zones"][0]["id"]


def submission(role: str, **overrides) -> dict:
    data = {
        "conversation_id": "conv-1",
        "listing_id": "listing-1",
        "buyer_id": "buyer-1",
        "seller_id": "seller-1",
        "user_role": role,
        "agreed_price": 9500,
        "original_price": 10000,
    }
    data.update(overrides)
    return data


@pytest.mark.service
@pytest.mark.integration
class TestGetDealAgreement:
    """GET /safe-zone/deal-agreement."""

    def test_missing_agreement_returns_null(self, client):
        response = client.get(URL, params={"conversation_id": "conv-1", "user_id": "buyer-1"})

        assert response.status_code == 200
        assert response.json() == {"deal_agreement": None, "privacy_revealed": False, "user_role": None}

    def test_missing_params_returns_400(self, client):
        response = client.get(URL, params={"conversation_id": "conv-1"})

        assert response.status_code == 400
        data = response.json()
        assert data["error"] == "VALIDATION_ERROR"
        assert any(detail["loc"][-1] == "user_id" for detail in data["details"])

    def test_role_reported_per_user(self, client):
        client.post(URL, json=submission("buyer"))

        buyer = client.get(URL, params={"conversation_id": "conv-1", "user_id": "buyer-1"}).json()
        seller = client.get(URL, params={"conversation_id": "conv-1", "user_id": "seller-1"}).json()

        assert buyer["user_role"] == "buyer"
        assert seller["user_role"] == "seller"

    def test_location_masked_until_both_agree(self, client, zone_id):
        client.post(URL, json=submission("buyer", safe_zone_id=zone_id))

        data = client.get(URL, params={"conversation_id": "conv-1", "user_id": "seller-1"}).json()
        assert data["privacy_revealed"] is False
        assert data["deal_agreement"]["safe_zone"] is None
        assert data["deal_agreement"]["buyer_agreed"] is True

        client.post(URL, json=submission("seller"))

        data = client.get(URL, params={"conversation_id": "conv-1", "user_id": "seller-1"}).json()
        assert data["privacy_revealed"] is True
        assert data["deal_agreement"]["safe_zone"]["id"] == zone_id


@pytest.mark.service
@pytest.mark.integration
class TestSubmitDealAgreement:
    """POST /safe-zone/deal-agreement."""

    def test_first_party_waits(self, client):
        response = client.post(URL, json=submission("buyer"))

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["both_parties_agreed"] is False
        assert data["privacy_revealed"] is False
        assert data["message"] == "Your agreement has been recorded. Waiting for the other party."
        assert data["deal_agreement"]["deal_status"] == "pending"
        assert data["deal_agreement"]["agreed_price"] == 9500

    def test_second_party_reveals_privacy(self, client):
        client.post(URL, json=submission("buyer"))

        response = client.post(URL, json=submission("seller", agreed_price=None))

        data = response.json()
        assert data["both_parties_agreed"] is True
        assert data["privacy_revealed"] is True
        assert data["message"] == "Both parties have agreed! Contact details are now available."
        assert data["deal_agreement"]["deal_status"] == "agreed"
        assert data["deal_agreement"]["agreed_price"] == 9500

        with get_db() as db:
            logs = db.query(PrivacyProtectionLog).all()
            assert sorted((log.user_id, log.revealed_to) for log in logs) == [
                ("buyer-1", "seller-1"),
                ("seller-1", "buyer-1"),
            ]
            assert all(log.reason == "deal_agreed" and log.data_type == "name" for log in logs)

    def test_resubmission_is_idempotent(self, client):
        client.post(URL, json=submission("buyer"))
        client.post(URL, json=submission("seller"))
        client.post(URL, json=submission("seller"))

        with get_db() as db:
            assert db.query(DealAgreement).count() == 1
            assert db.query(PrivacyProtectionLog).count() == 2

    def test_price_defaults_to_original(self, client):
        response = client.post(URL, json=submission("buyer", agreed_price=None))

        assert response.json()["deal_agreement"]["agreed_price"] == 10000

    def test_meeting_details_schedule_deal(self, client, zone_id):
        client.post(URL, json=submission("buyer"))
        client.post(URL, json=submission("seller"))

        response = client.post(URL, json=submission(
            "buyer", agreed_price=None, safe_zone_id=zone_id, meeting_datetime="2024-06-11T14:00:00"
        ))

        data = response.json()["deal_agreement"]
        assert data["deal_status"] == "scheduled"
        assert data["safe_zone"]["id"] == zone_id
        assert data["meeting_datetime"] == "2024-06-11T14:00:00"

    def test_custom_location_replaces_zone(self, client, zone_id):
        client.post(URL, json=submission("buyer", safe_zone_id=zone_id))
        response = client.post(URL, json=submission("seller", custom_meeting_location="Main St library lot"))

        data = response.json()["deal_agreement"]
        assert data["safe_zone"] is None
        assert data["custom_meeting_location"] == "Main St library lot"

    def test_both_locations_rejected(self, client, zone_id):
        response = client.post(URL, json=submission("buyer", safe_zone_id=zone_id, custom_meeting_location="Lot"))

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.parametrize("price", [0, -100])
    def test_non_positive_price_rejected(self, client, price):
        response = client.post(URL, json=submission("buyer", agreed_price=price))

        assert response.status_code == 400

    def test_invalid_role_rejected(self, client):
        response = client.post(URL, json=submission("broker"))

        assert response.status_code == 400

    def test_unknown_safe_zone_returns_404(self, client):
        response = client.post(URL, json=submission("buyer", safe_zone_id="missing-zone"))

        assert response.status_code == 404
        assert response.json()["error"] == "SAFE_ZONE_NOT_FOUND"

        with get_db() as db:
            assert db.query(DealAgreement).count() == 0

    def test_participant_mismatch_returns_409(self, client):
        client.post(URL, json=submission("buyer"))

        response = client.post(URL, json=submission("seller", seller_id="someone-else"))

        assert response.status_code == 409
        data = response.json()
        assert data["error"] == "PARTICIPANT_MISMATCH"
        assert data["details"] == {"conversation_id": "conv-1"}
