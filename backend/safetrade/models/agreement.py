"""
Meeting agreement domain models.

WHAT: Core data structures shared by the wizard, clients and service
WHY: Consistent typing between the state machine and its collaborators
HOW: Pydantic v2 models compatible with FastAPI schemas
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, model_validator


Role = Literal["buyer", "seller"]


class SafeZone(BaseModel):
    """A curated public meeting place from the safe-zone catalog."""

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    address: str = ""
    city: str | None = None
    zip_code: str | None = None
    type: str = "public"
    features: list[str] = Field(default_factory=list)

    model_config = {"extra": "ignore"}


class NegotiationSession(BaseModel):
    """Listing and participant context the wizard is mounted with."""

    listing_id: str
    conversation_id: str
    listing_title: str
    original_price: float = Field(ge=0.0)
    listing_city: str = ""
    listing_zip_code: str | None = None
    is_seller_view: bool = False

    # Bilateral variant: both parties must agree before the location step unlocks
    bilateral: bool = False
    buyer_id: str | None = None
    seller_id: str | None = None
    current_user_id: str | None = None

    @model_validator(mode="after")
    def require_participants_when_bilateral(self):
        """Bilateral sessions need to know who is who."""
        if self.bilateral and not (self.buyer_id and self.seller_id and self.current_user_id):
            raise ValueError("bilateral sessions require buyer_id, seller_id and current_user_id")
        return self

    @property
    def user_role(self) -> Role:
        """Role the local user submits agreements as."""
        if self.current_user_id is not None and self.current_user_id == self.buyer_id:
            return "buyer"
        if self.current_user_id is None:
            return "seller" if self.is_seller_view else "buyer"
        return "seller"


class PriceProposal(BaseModel):
    """Proposed price and its deviation from the asking price."""

    proposed_price: float
    delta_from_original: float
    delta_label: Literal["above", "below"] | None = None


class AgreementResult(BaseModel):
    """Terminal output handed to the meeting-location callback."""

    location_descriptor: str
    schedule_summary: str
    final_price: float


class AgreementCompletion(BaseModel):
    """Terminal output handed to the agreement-complete callback."""

    agreed_price: float
    safe_zone_id: str | None = None
    custom_location: str | None = None
    datetime: str
    privacy_revealed: bool = False


class DealAgreementSnapshot(BaseModel):
    """Shared deal agreement record as reported by the collaborator."""

    id: str | None = None
    conversation_id: str | None = None
    listing_id: str | None = None
    buyer_agreed: bool = False
    seller_agreed: bool = False
    agreed_price: float | None = None
    original_price: float | None = None
    privacy_revealed: bool = False
    deal_status: str = "pending"
    safe_zone: SafeZone | None = None
    custom_meeting_location: str | None = None
    meeting_datetime: datetime | None = None

    model_config = {"extra": "ignore"}

    @property
    def both_agreed(self) -> bool:
        return self.buyer_agreed and self.seller_agreed

    def agreed_by(self, role: Role) -> bool:
        """Whether the given side has submitted its agreement."""
        return self.buyer_agreed if role == "buyer" else self.seller_agreed
