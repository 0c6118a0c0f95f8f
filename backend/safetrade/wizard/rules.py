"""
Derived values and guards for the meeting agreement wizard.

WHAT: Price deviation, enabled flags, schedule strings and result payloads
WHY: Recomputed from the current snapshot on every read, never cached
HOW: Pure functions over WizardState
"""

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from ..models.agreement import AgreementCompletion, AgreementResult, PriceProposal
from .state import WizardState


def parse_price(raw: str) -> float | None:
    """
    Parse the price field.

    Accepts what a browser number conversion accepts for decimal input; digit
    separators ("1,000", "1_000") are not numbers.

    Returns:
        The number typed, or None when the field is empty or not a finite number
    """
    text = (raw or "").strip()
    if not text or "_" in text:
        return None
    try:
        value = float(text)
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value


def format_currency(amount: float) -> str:
    """Thousands-separated amount rounded to cents, trailing zero cents dropped."""
    cents = round(float(amount), 2)
    if cents.is_integer():
        return f"{int(cents):,}"
    return f"{cents:,.2f}".rstrip("0")


def price_proposal(state: WizardState) -> PriceProposal | None:
    """Current proposal and its deviation from the asking price."""
    proposed = parse_price(state.price_input)
    if proposed is None:
        return None

    delta = proposed - state.session.original_price
    if delta > 0:
        label = "above"
    elif delta < 0:
        label = "below"
    else:
        label = None

    return PriceProposal(proposed_price=proposed, delta_from_original=delta, delta_label=label)


def deviation_text(state: WizardState) -> str | None:
    """
    Price change indicator, e.g. "-$500 below asking price".

    Returns:
        None when no price is entered or it equals the asking price
    """
    proposal = price_proposal(state)
    if proposal is None or proposal.delta_label is None:
        return None

    amount = format_currency(abs(proposal.delta_from_original))
    if proposal.delta_label == "above":
        return f"+${amount} above asking price"
    return f"-${amount} below asking price"


def price_is_valid(state: WizardState) -> bool:
    proposal = price_proposal(state)
    return proposal is not None and proposal.proposed_price > 0


def can_confirm_price(state: WizardState) -> bool:
    """Whether the price step's forward control is enabled."""
    return price_is_valid(state) and not state.busy


def min_meeting_date(today: date) -> date:
    """Earliest selectable meeting date (tomorrow)."""
    return today + timedelta(days=1)


def date_is_valid(value: date | None, today: date) -> bool:
    return value is not None and value > today


def location_is_chosen(state: WizardState) -> bool:
    """Exactly one of a known safe zone or non-blank custom text."""
    if state.safe_zone_id is not None:
        return state.selected_zone is not None and state.custom_location is None
    return bool(state.custom_location and state.custom_location.strip())


def time_is_valid(state: WizardState) -> bool:
    return state.selected_time is not None and state.selected_time in state.time_slots


def can_continue_location(state: WizardState, today: date) -> bool:
    """Whether the location step's forward control is enabled."""
    return (
        location_is_chosen(state)
        and date_is_valid(state.selected_date, today)
        and time_is_valid(state)
    )


def can_confirm_meeting(state: WizardState) -> bool:
    return not state.busy


def schedule_summary(value: date, slot: str) -> str:
    """Human readable schedule; the "at <slot>" part is a stable contract."""
    return f"{value.isoformat()} at {slot}"


def meeting_datetime(value: date, slot: str) -> datetime:
    """Combine a date and a "2:00 PM" style slot into a datetime."""
    slot_time = datetime.strptime(slot.strip(), "%I:%M %p").time()
    return datetime.combine(value, slot_time)


def location_identifier(state: WizardState) -> str:
    """Safe zone id, or the trimmed custom location text."""
    if state.safe_zone_id is not None:
        return state.safe_zone_id
    return (state.custom_location or "").strip()


def location_label(state: WizardState) -> str:
    """Display name for the chosen location."""
    zone = state.selected_zone
    if zone is not None:
        return zone.name
    return (state.custom_location or "").strip()


def final_price(state: WizardState) -> float:
    proposal = price_proposal(state)
    if proposal is None:
        return state.session.original_price
    return proposal.proposed_price


def build_result(state: WizardState) -> AgreementResult:
    return AgreementResult(
        location_descriptor=location_identifier(state),
        schedule_summary=schedule_summary(state.selected_date, state.selected_time),
        final_price=final_price(state),
    )


def build_completion(state: WizardState) -> AgreementCompletion:
    custom = None if state.safe_zone_id is not None else location_identifier(state)
    return AgreementCompletion(
        agreed_price=final_price(state),
        safe_zone_id=state.safe_zone_id,
        custom_location=custom,
        datetime=schedule_summary(state.selected_date, state.selected_time),
        privacy_revealed=state.privacy_revealed,
    )


@dataclass(frozen=True)
class ConfirmationSummary:
    """What the confirm step shows before the meeting is finalized."""
    listing_title: str
    agreed_price: str
    listed_price: str | None
    location: str
    schedule: str


def confirmation_summary(state: WizardState) -> ConfirmationSummary:
    price = final_price(state)
    negotiated = price != state.session.original_price
    return ConfirmationSummary(
        listing_title=state.session.listing_title,
        agreed_price=f"${format_currency(price)}",
        listed_price=f"${format_currency(state.session.original_price)}" if negotiated else None,
        location=location_label(state),
        schedule=schedule_summary(state.selected_date, state.selected_time),
    )
