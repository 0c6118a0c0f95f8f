"""
Safe-zone catalog HTTP client.

WHAT: SafeZoneSource implementation over the collaborator API
WHY: The bilateral wizard offers verified safe zones near the listing
HOW: GET /safe-zone/locations filtered by city and ZIP code
"""

from pydantic import ValidationError

from ..models.agreement import SafeZone
from ..models.api_schemas import SafeZoneListResponse
from ..wizard.collaborators import CollaboratorResponseError
from .http_client import CollaboratorHTTPClient


class SafeZoneCatalogClient(CollaboratorHTTPClient):
    """Read-only access to the safe-zone catalog."""

    async def list_safe_zones(
        self,
        city: str,
        zip_code: str | None = None,
        zone_type: str | None = None,
    ) -> list[SafeZone]:
        params = {"city": city}
        if zip_code:
            params["zip_code"] = zip_code
        if zone_type:
            params["type"] = zone_type

        data = await self._request("GET", "/safe-zone/locations", params=params)
        try:
            return SafeZoneListResponse.model_validate(data).safe_zones
        except ValidationError as e:
            raise CollaboratorResponseError("Invalid safe zone response") from e
