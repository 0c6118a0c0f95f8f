"""
Wizard state snapshot.

WHAT: Immutable snapshot of everything the meeting agreement wizard knows
WHY: Transitions and derived values are pure functions over one value
HOW: Frozen dataclass, updated with dataclasses.replace
"""

from dataclasses import dataclass
from datetime import date

from ..core.config import settings
from ..models.agreement import NegotiationSession, SafeZone
from ..services.location_masking import get_meeting_location_suggestions, mask_location
from .types import Step


@dataclass(frozen=True)
class WizardState:
    """State of one party's meeting agreement wizard."""
    session: NegotiationSession
    step: Step = Step.AGREEMENT

    # Price step
    price_input: str = ""

    # Location step; at most one of safe_zone_id / custom_location is set
    safe_zones: tuple[SafeZone, ...] = ()
    safe_zone_id: str | None = None
    custom_location: str | None = None
    selected_date: date | None = None
    selected_time: str | None = None
    time_slots: tuple[str, ...] = ()

    # Collaborator round-trips
    busy: bool = False
    error: str | None = None

    # Bilateral agreement flags
    buyer_agreed: bool = False
    seller_agreed: bool = False
    privacy_revealed: bool = False

    @property
    def both_agreed(self) -> bool:
        return self.buyer_agreed and self.seller_agreed

    @property
    def selected_zone(self) -> SafeZone | None:
        if self.safe_zone_id is None:
            return None
        return next((zone for zone in self.safe_zones if zone.id == self.safe_zone_id), None)


def format_price_input(price: float) -> str:
    """Render a price the way the number field shows it (10000, not 10000.0)."""
    return str(int(price)) if float(price).is_integer() else str(price)


def suggestion_zones(session: NegotiationSession) -> tuple[SafeZone, ...]:
    """
    Curated meeting places for hosts without a safe-zone catalog.

    The suggestion text doubles as the zone id, so it is what the
    meeting-location callback receives.
    """
    vicinity = mask_location(session.listing_city, session.listing_zip_code).vicinity
    suggestions = get_meeting_location_suggestions(session.listing_city, session.listing_zip_code)
    return tuple(
        SafeZone(id=text, name=text, address=vicinity, city=session.listing_city, type="public")
        for text in suggestions[:5]
    )


def initial_state(
    session: NegotiationSession,
    safe_zones: list[SafeZone] | tuple[SafeZone, ...] | None = None,
    time_slots: list[str] | tuple[str, ...] | None = None,
) -> WizardState:
    """
    Build the entry state for a freshly mounted wizard.

    Args:
        session: Listing and participant context
        safe_zones: Catalog to choose from; defaults to location suggestions
            for unilateral sessions and an empty list (loaded later) for bilateral
        time_slots: Offered meeting times; defaults to settings.MEETING_TIME_SLOTS

    Returns:
        WizardState in the AGREEMENT step with the price seeded from the listing
    """
    if safe_zones is None:
        zones = () if session.bilateral else suggestion_zones(session)
    else:
        zones = tuple(safe_zones)

    slots = tuple(time_slots) if time_slots is not None else tuple(settings.get_meeting_time_slots())

    return WizardState(
        session=session,
        price_input=format_price_input(session.original_price),
        safe_zones=zones,
        time_slots=slots,
    )
