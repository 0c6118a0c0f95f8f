"""
Integration tests for the safe-zone catalog and health endpoints.

WHAT: Listing filters, grouping, creation and seeding
WHY: Wizards offer exactly what this catalog returns
HOW: FastAPI TestClient against a fresh SQLite schema
"""

import pytest
from fastapi.testclient import TestClient

from safetrade.main import app
from safetrade.services.safe_zone_service import SEED_SAFE_ZONES

URL = "/api/v1/safe-zone/locations"


@pytest.fixture
def client(clean_db):
    """Create FastAPI test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def seeded(client):
    client.post("/api/v1/safe-zone/seed-data")
    return client


@pytest.mark.service
@pytest.mark.integration
class TestSeedData:
    """POST /safe-zone/seed-data."""

    def test_seed_inserts_catalog(self, client):
        response = client.post("/api/v1/safe-zone/seed-data")

        assert response.status_code == 200
        assert response.json() == {"success": True, "inserted": len(SEED_SAFE_ZONES), "total": len(SEED_SAFE_ZONES)}

    def test_seed_twice_inserts_nothing(self, client):
        client.post("/api/v1/safe-zone/seed-data")

        response = client.post("/api/v1/safe-zone/seed-data")

        assert response.json()["inserted"] == 0
        assert response.json()["total"] == len(SEED_SAFE_ZONES)


@pytest.mark.service
@pytest.mark.integration
class TestListSafeZones:
    """GET /safe-zone/locations."""

    def test_city_filter_and_order(self, seeded):
        data = seeded.get(URL, params={"city": "Newark"}).json()

        assert data["success"] is True
        assert data["count"] == 5
        types = [zone["type"] for zone in data["safe_zones"]]
        assert types == sorted(types)
        assert all(zone["city"] == "Newark" for zone in data["safe_zones"])

    def test_grouping_and_type_order(self, seeded):
        data = seeded.get(URL, params={"city": "Newark"}).json()

        assert data["type_order"] == ["police_station", "mall", "public"]
        assert len(data["grouped_by_type"]["mall"]) == 2
        assert len(data["grouped_by_type"]["public"]) == 2
        mall_names = [zone["name"] for zone in data["grouped_by_type"]["mall"]]
        assert mall_names == sorted(mall_names)

    def test_zip_filter(self, seeded):
        data = seeded.get(URL, params={"city": "Newark", "zip_code": "07102"}).json()

        assert data["count"] == 2
        assert {zone["zip_code"] for zone in data["safe_zones"]} == {"07102"}

    def test_type_filter(self, seeded):
        data = seeded.get(URL, params={"city": "Jersey City", "type": "mall"}).json()

        assert data["count"] == 1
        assert data["safe_zones"][0]["name"] == "Newport Centre Mall"
        assert data["type_order"] == ["mall"]

    def test_unknown_city_is_empty(self, seeded):
        data = seeded.get(URL, params={"city": "Trenton"}).json()

        assert data["count"] == 0
        assert data["safe_zones"] == []
        assert data["type_order"] == []

    def test_missing_city_returns_400(self, client):
        response = client.get(URL)

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_blank_city_returns_400(self, client):
        response = client.get(URL, params={"city": "  "})

        assert response.status_code == 400
        assert response.json()["error"] == "VALIDATION_ERROR"

    def test_unknown_type_returns_400(self, client):
        response = client.get(URL, params={"city": "Newark", "type": "airport"})

        assert response.status_code == 400


@pytest.mark.service
@pytest.mark.integration
class TestCreateSafeZone:
    """POST /safe-zone/locations."""

    def test_create_is_verified_and_listed(self, client):
        response = client.post(URL, json={
            "name": "Hoboken Police Department",
            "address": "106 Hudson St, Hoboken, NJ 07030",
            "city": "Hoboken",
            "zip_code": "07030",
            "type": "police_station",
            "features": ["24_7", "police_presence"],
        })

        assert response.status_code == 200
        created = response.json()
        assert created["message"] == "Safe zone created successfully"
        assert created["safe_zone"]["features"] == ["24_7", "police_presence"]

        listed = client.get(URL, params={"city": "Hoboken"}).json()
        assert [zone["id"] for zone in listed["safe_zones"]] == [created["safe_zone"]["id"]]

    def test_short_name_rejected(self, client):
        response = client.post(URL, json={
            "name": "PD",
            "address": "1 Main St",
            "city": "Hoboken",
            "type": "police_station",
        })

        assert response.status_code == 400


@pytest.mark.service
@pytest.mark.integration
class TestHealth:
    """GET /health."""

    def test_health_reports_database(self, client):
        data = client.get("/api/v1/health").json()

        assert data["status"] == "healthy"
        assert data["components"]["database"]["available"] is True
        assert data["app_name"] == "SafeTrade Meeting Agreements"
        assert data["components"]["safe_zone_catalog"]["needs_seed"] is True

    def test_health_counts_seeded_catalog(self, seeded):
        data = seeded.get("/api/v1/health").json()

        assert data["components"]["safe_zone_catalog"] == {"zones": len(SEED_SAFE_ZONES), "needs_seed": False}
        assert data["components"]["deal_agreements"]["count"] == 0

    def test_root(self, client):
        assert client.get("/").json()["status"] == "running"
