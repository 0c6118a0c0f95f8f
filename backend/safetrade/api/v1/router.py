"""
API v1 router aggregation.

WHAT: Mount the health, deal agreement, safe-zone and stream routers
WHY: Wizard clients address everything under one /api/v1 base URL
HOW: Each endpoint module exposes `router`; tags group them in /docs
"""

from fastapi import APIRouter

from .endpoints import deal_agreement, safe_zones, status, streaming

API_PREFIX = "/api/v1"

ENDPOINT_ROUTERS = (
    (status.router, "status"),
    (deal_agreement.router, "deal-agreement"),
    (safe_zones.router, "safe-zones"),
    (streaming.router, "streaming"),
)

api_router = APIRouter(prefix=API_PREFIX)

for endpoint_router, tag in ENDPOINT_ROUTERS:
    api_router.include_router(endpoint_router, tags=[tag])
