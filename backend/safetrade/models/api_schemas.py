"""
Pydantic API schemas for the collaborator endpoints.

WHAT: Request and response models for FastAPI and the httpx clients
WHY: One contract shared by the service and the wizard's collaborator clients
HOW: Pydantic v2 models with validators and constraints
"""

from typing import Optional, List, Dict, Literal
from pydantic import BaseModel, Field, model_validator
from datetime import datetime

from .agreement import DealAgreementSnapshot, Role, SafeZone


SafeZoneType = Literal["police_station", "mall", "parking_lot", "public"]


# ========== Deal Agreement ==========

class AgreementSubmission(BaseModel):
    """Create or update a deal agreement on behalf of one party."""
    conversation_id: str = Field(..., min_length=1)
    listing_id: str = Field(..., min_length=1)
    buyer_id: str = Field(..., min_length=1)
    seller_id: str = Field(..., min_length=1)
    user_role: Role
    agreed_price: Optional[float] = Field(default=None, gt=0, description="Price the party agrees to")
    original_price: Optional[float] = Field(default=None, ge=0, description="Listing asking price")
    safe_zone_id: Optional[str] = None
    custom_meeting_location: Optional[str] = None
    meeting_datetime: Optional[datetime] = None

    @model_validator(mode='after')
    def validate_single_location(self):
        """A meeting is either at a safe zone or a custom place, not both."""
        if self.safe_zone_id and self.custom_meeting_location:
            raise ValueError("Provide either safe_zone_id or custom_meeting_location, not both")
        return self


class DealAgreementLookup(BaseModel):
    """Response for fetching a deal agreement."""
    deal_agreement: Optional[DealAgreementSnapshot] = None
    privacy_revealed: bool = False
    user_role: Optional[Role] = None


class SubmissionResult(BaseModel):
    """Response for recording a deal agreement submission."""
    success: bool = True
    deal_agreement: DealAgreementSnapshot
    privacy_revealed: bool
    both_parties_agreed: bool
    message: str


# ========== Safe Zones ==========

class SafeZoneCreate(BaseModel):
    """Admin request to add a safe zone."""
    name: str = Field(..., min_length=3, max_length=255)
    address: str = Field(..., min_length=1, max_length=500)
    city: str = Field(..., min_length=2, max_length=100)
    zip_code: Optional[str] = Field(default=None, max_length=20)
    type: SafeZoneType
    features: List[str] = Field(default_factory=list)
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)


class SafeZoneListResponse(BaseModel):
    """Safe zones for a city, grouped by type."""
    success: bool = True
    safe_zones: List[SafeZone]
    grouped_by_type: Dict[str, List[SafeZone]]
    type_order: List[str]
    count: int


class SafeZoneCreateResponse(BaseModel):
    """Response for creating a safe zone."""
    success: bool = True
    safe_zone: SafeZone
    message: str = "Safe zone created successfully"


class SeedResponse(BaseModel):
    """Response for seeding demo safe zones."""
    success: bool = True
    inserted: int
    total: int
