"""
Role-specific framing copy for the agreement step.

WHAT: Titles, prompts and button labels shown before price negotiation
WHY: Buyers and sellers see different framing; the flow itself is identical
HOW: Frozen dataclass built from the session's is_seller_view flag
"""

from dataclasses import dataclass

from ..models.agreement import NegotiationSession
from ..services.location_masking import mask_location
from .rules import format_currency


@dataclass(frozen=True)
class AgreementFraming:
    title: str
    listing_title: str
    listing_price: str
    vicinity: str
    message: str
    proceed_label: str
    cancel_label: str
    checklist: tuple[str, ...] = ()


BUYER_CHECKLIST = (
    "Inspect the motorcycle in person",
    "Verify documents and title",
    "Meet in a safe, public location",
)

SAFE_TRADE_CHECKLIST = (
    "Names and contact details are hidden until both parties agree",
    "Meeting location revealed only after deal confirmation",
)


def agreement_framing(session: NegotiationSession) -> AgreementFraming:
    """Copy for the agreement step, per role and variant."""
    vicinity = mask_location(session.listing_city, session.listing_zip_code).vicinity
    common = dict(
        listing_title=session.listing_title,
        listing_price=f"${format_currency(session.original_price)}",
        vicinity=f"Located in {vicinity}",
    )

    if session.bilateral:
        if session.is_seller_view:
            return AgreementFraming(
                title="Safe Zone Transaction",
                message="The buyer wants to purchase your motorcycle using SafeTrade's secure process.",
                proceed_label="Review & Accept",
                cancel_label="Cancel",
                checklist=SAFE_TRADE_CHECKLIST,
                **common,
            )
        return AgreementFraming(
            title="Safe Zone Transaction",
            message="Ready to buy? Initiate SafeTrade's secure transaction process.",
            proceed_label="Start Secure Purchase",
            cancel_label="Cancel",
            checklist=SAFE_TRADE_CHECKLIST,
            **common,
        )

    if session.is_seller_view:
        return AgreementFraming(
            title="Purchase Interest",
            message=(
                "The buyer is interested in purchasing your motorcycle. "
                "Would you like to arrange a safe meeting location?"
            ),
            proceed_label="Arrange Meeting",
            cancel_label="Not Ready",
            **common,
        )
    return AgreementFraming(
        title="Ready to Buy?",
        message=(
            "Ready to purchase? Let the seller know you're serious "
            "about buying and want to arrange a safe meeting."
        ),
        proceed_label="Yes, I Want to Buy",
        cancel_label="Cancel",
        checklist=BUYER_CHECKLIST,
        **common,
    )


def price_field_label(session: NegotiationSession) -> str:
    return "Your asking price:" if session.is_seller_view else "Your offer:"
