"""
Health endpoint.

WHAT: Liveness of the agreement store
WHY: Wizard hosts check it before enabling the bilateral flow
HOW: ping_database() plus catalog/agreement row counts
"""

from fastapi import APIRouter

from ....core.config import settings
from ....core.database import ping_database

router = APIRouter()


@router.get("/health")
async def health_check():
    """
    Service health.

    Returns:
        Status ("healthy"/"degraded"), version and database component details
    """
    db = ping_database()
    catalog_empty = db["available"] and not db["safe_zones"]

    return {
        "status": "healthy" if db["available"] else "degraded",
        "version": settings.APP_VERSION,
        "app_name": settings.APP_NAME,
        "components": {
            "database": {
                "available": db["available"],
                "journal_mode": db["journal_mode"],
                "error": db["error"],
            },
            "safe_zone_catalog": {
                "zones": db["safe_zones"],
                "needs_seed": catalog_empty,
            },
            "deal_agreements": {
                "count": db["deal_agreements"],
            },
        },
    }
