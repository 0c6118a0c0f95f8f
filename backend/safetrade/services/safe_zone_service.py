"""
Safe-zone catalog service.

WHAT: Query, create and seed curated public meeting places
WHY: Both parties pick the meeting point from verified locations near the listing
HOW: SQLAlchemy queries over SafeZone, converted to pydantic SafeZone schemas
"""

from typing import Dict, List, Optional

from ..core.database import get_db
from ..core.models import SafeZone as SafeZoneRow
from ..models.agreement import SafeZone
from ..models.api_schemas import SafeZoneCreate, SafeZoneListResponse
from ..utils.exceptions import ValidationException
from ..utils.logger import get_logger

logger = get_logger(__name__)

# Display priority for grouped results
TYPE_ORDER = ["police_station", "mall", "parking_lot", "public"]

# Newark-area demo catalog
SEED_SAFE_ZONES = [
    {
        "name": "Newark Police Department - Central Division",
        "address": "26 Green St, Newark, NJ 07102",
        "city": "Newark",
        "zip_code": "07102",
        "latitude": 40.7351,
        "longitude": -74.1654,
        "type": "police_station",
        "features": ["24_7", "security_cameras", "police_presence", "parking_available"],
    },
    {
        "name": "Jersey Gardens Mall - Main Parking",
        "address": "651 Kapkowski Rd, Elizabeth, NJ 07201",
        "city": "Elizabeth",
        "zip_code": "07201",
        "latitude": 40.6641,
        "longitude": -74.1553,
        "type": "mall",
        "features": ["security_cameras", "well_lit", "busy_area", "parking_available"],
    },
    {
        "name": "Walmart Supercenter - Newark",
        "address": "303 US-1, Newark, NJ 07114",
        "city": "Newark",
        "zip_code": "07114",
        "latitude": 40.7023,
        "longitude": -74.1789,
        "type": "mall",
        "features": ["security_cameras", "well_lit", "busy_area", "parking_available"],
    },
    {
        "name": "Branch Brook Park - Visitor Center",
        "address": "Branch Brook Park Dr, Newark, NJ 07104",
        "city": "Newark",
        "zip_code": "07104",
        "latitude": 40.7589,
        "longitude": -74.1872,
        "type": "public",
        "features": ["well_lit", "busy_area", "parking_available", "daytime_only"],
    },
    {
        "name": "Newark Penn Station - Main Entrance",
        "address": "1 Raymond Blvd, Newark, NJ 07102",
        "city": "Newark",
        "zip_code": "07102",
        "latitude": 40.7347,
        "longitude": -74.1646,
        "type": "public",
        "features": ["24_7", "security_cameras", "busy_area", "police_presence"],
    },
    {
        "name": "Target - Brick City Plaza",
        "address": "80 Bergen St, Newark, NJ 07103",
        "city": "Newark",
        "zip_code": "07103",
        "latitude": 40.7282,
        "longitude": -74.1776,
        "type": "mall",
        "features": ["security_cameras", "well_lit", "busy_area", "parking_available"],
    },
    {
        "name": "Jersey City Police Department",
        "address": "1 Police Plaza, Jersey City, NJ 07302",
        "city": "Jersey City",
        "zip_code": "07302",
        "latitude": 40.7189,
        "longitude": -74.0431,
        "type": "police_station",
        "features": ["24_7", "security_cameras", "police_presence", "parking_available"],
    },
    {
        "name": "Newport Centre Mall",
        "address": "30 Mall Dr W, Jersey City, NJ 07310",
        "city": "Jersey City",
        "zip_code": "07310",
        "latitude": 40.7267,
        "longitude": -74.0341,
        "type": "mall",
        "features": ["security_cameras", "well_lit", "busy_area", "parking_available"],
    },
    {
        "name": "Paterson Police Department",
        "address": "111 Broadway, Paterson, NJ 07505",
        "city": "Paterson",
        "zip_code": "07505",
        "latitude": 40.9176,
        "longitude": -74.1718,
        "type": "police_station",
        "features": ["24_7", "security_cameras", "police_presence", "parking_available"],
    },
    {
        "name": "Eastgate Shopping Center",
        "address": "1000 Broad St, Paterson, NJ 07503",
        "city": "Paterson",
        "zip_code": "07503",
        "latitude": 40.9059,
        "longitude": -74.1445,
        "type": "mall",
        "features": ["security_cameras", "well_lit", "busy_area", "parking_available"],
    },
]


def to_schema(row: SafeZoneRow) -> SafeZone:
    """Convert an ORM safe zone to its API schema."""
    return SafeZone.model_validate(row, from_attributes=True)


def group_by_type(zones: List[SafeZone]) -> Dict[str, List[SafeZone]]:
    """Group zones by type, keeping their order within each group."""
    grouped: Dict[str, List[SafeZone]] = {}
    for zone in zones:
        grouped.setdefault(zone.type, []).append(zone)
    return grouped


def list_safe_zones(
    city: str,
    zip_code: Optional[str] = None,
    zone_type: Optional[str] = None
) -> SafeZoneListResponse:
    """
    List verified safe zones in a city.

    Args:
        city: City to search (exact match)
        zip_code: Optional ZIP code filter
        zone_type: Optional type filter

    Returns:
        SafeZoneListResponse ordered by type then name, grouped by type

    Raises:
        ValidationException: If city is blank
    """
    if not city or not city.strip():
        raise ValidationException(
            "city parameter is required",
            field_errors=[{"field": "city", "error": "required"}]
        )

    with get_db() as db:
        query = db.query(SafeZoneRow).filter(
            SafeZoneRow.city == city.strip(),
            SafeZoneRow.verified.is_(True)
        )
        if zip_code:
            query = query.filter(SafeZoneRow.zip_code == zip_code)
        if zone_type:
            query = query.filter(SafeZoneRow.type == zone_type)

        zones = [to_schema(row) for row in query.order_by(SafeZoneRow.type, SafeZoneRow.name).all()]

    grouped = group_by_type(zones)
    logger.info(f"Found {len(zones)} safe zones in {city} (zip={zip_code}, type={zone_type})")

    return SafeZoneListResponse(
        safe_zones=zones,
        grouped_by_type=grouped,
        type_order=[t for t in TYPE_ORDER if t in grouped],
        count=len(zones)
    )


def create_safe_zone(request: SafeZoneCreate) -> SafeZone:
    """
    Add a verified safe zone to the catalog.

    Args:
        request: Validated creation payload

    Returns:
        The stored safe zone
    """
    with get_db() as db:
        row = SafeZoneRow(
            name=request.name,
            address=request.address,
            city=request.city,
            zip_code=request.zip_code,
            type=request.type,
            features=list(request.features),
            latitude=request.latitude,
            longitude=request.longitude,
            verified=True
        )
        db.add(row)
        db.flush()
        zone = to_schema(row)

    logger.info(f"Created safe zone {zone.id}: {zone.name}")
    return zone


def seed_safe_zones() -> Dict[str, int]:
    """
    Insert the demo catalog, skipping zones already present by name and city.

    Returns:
        Dict with inserted and total counts
    """
    inserted = 0
    with get_db() as db:
        existing = {(row.name, row.city) for row in db.query(SafeZoneRow.name, SafeZoneRow.city).all()}
        for data in SEED_SAFE_ZONES:
            if (data["name"], data["city"]) in existing:
                continue
            db.add(SafeZoneRow(state="NJ", verified=True, **data))
            inserted += 1
        db.flush()
        total = db.query(SafeZoneRow).count()

    logger.info(f"Seeded {inserted} safe zones ({total} total)")
    return {"inserted": inserted, "total": total}
