"""
Safe-zone catalog endpoints.

WHAT: List, add and seed verified meeting locations
WHY: Wizards offer safe zones near the listing
HOW: FastAPI handlers over safe_zone_service
"""

from typing import Optional

from fastapi import APIRouter, Query

from ....models.api_schemas import (
    SafeZoneCreate,
    SafeZoneCreateResponse,
    SafeZoneListResponse,
    SafeZoneType,
    SeedResponse,
)
from ....services import safe_zone_service

router = APIRouter()


@router.get("/safe-zone/locations", response_model=SafeZoneListResponse)
async def list_locations(
    city: str = Query(..., min_length=1),
    zip_code: Optional[str] = None,
    type: Optional[SafeZoneType] = None
):
    """
    List verified safe zones in a city, grouped by type.

    Args:
        city: City name (required)
        zip_code: Optional ZIP filter
        type: Optional zone type filter
    """
    return safe_zone_service.list_safe_zones(city, zip_code=zip_code, zone_type=type)


@router.post("/safe-zone/locations", response_model=SafeZoneCreateResponse)
async def create_location(request: SafeZoneCreate):
    """Add a safe zone (admin use); new zones are verified."""
    zone = safe_zone_service.create_safe_zone(request)
    return SafeZoneCreateResponse(safe_zone=zone)


@router.post("/safe-zone/seed-data", response_model=SeedResponse)
async def seed_data():
    """Insert the demo Newark-area safe zones that are not already present."""
    counts = safe_zone_service.seed_safe_zones()
    return SeedResponse(**counts)
