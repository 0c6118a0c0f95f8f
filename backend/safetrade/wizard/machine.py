"""
Meeting agreement state machine.

WHAT: Single transition function (state, event) -> (state, effects)
WHY: Every step change and guard is testable without a UI or network
HOW: Per-step handlers returning a new frozen snapshot plus effect descriptors

Flow: AGREEMENT -> PRICE -> [WAITING] -> LOCATION -> CONFIRM -> COMPLETE.
WAITING only exists for bilateral sessions, where both parties must record
their agreement with the collaborator before the location step unlocks.
"""

from dataclasses import replace
from datetime import date
from typing import NamedTuple

from ..models.api_schemas import AgreementSubmission
from ..utils.logger import get_logger
from . import rules
from .state import WizardState, format_price_input
from .types import (
    AgreementLoaded,
    AgreementRecorded,
    Back,
    Cancel,
    ChooseCustomLocation,
    CollaboratorFailed,
    ConfirmMeeting,
    ConfirmPrice,
    ContinueToConfirm,
    CounterpartUpdate,
    EmitAgreementComplete,
    EmitMeetingSelected,
    EnterCustomLocation,
    EnterPrice,
    InvalidTransitionError,
    InvokeCancel,
    MeetingRecorded,
    PersistMeeting,
    Proceed,
    SafeZonesLoaded,
    SelectDate,
    SelectSafeZone,
    SelectTime,
    Step,
    StopWatchingCounterpart,
    SubmitAgreement,
    WatchCounterpart,
    WizardEffect,
    WizardEvent,
)

logger = get_logger(__name__)


class Transition(NamedTuple):
    state: WizardState
    effects: list[WizardEffect]


def _stay(state: WizardState, *effects: WizardEffect) -> Transition:
    return Transition(state, list(effects))


def _submission(state: WizardState, **fields) -> AgreementSubmission:
    session = state.session
    return AgreementSubmission(
        conversation_id=session.conversation_id,
        listing_id=session.listing_id,
        buyer_id=session.buyer_id,
        seller_id=session.seller_id,
        user_role=session.user_role,
        **fields,
    )


def _apply_flags(state: WizardState, buyer_agreed: bool, seller_agreed: bool,
                 privacy_revealed: bool | None) -> WizardState:
    revealed = state.privacy_revealed if privacy_revealed is None else privacy_revealed
    return replace(
        state,
        buyer_agreed=buyer_agreed,
        seller_agreed=seller_agreed,
        privacy_revealed=revealed or (buyer_agreed and seller_agreed),
    )


def _completion_effects(state: WizardState) -> list[WizardEffect]:
    return [
        EmitMeetingSelected(rules.build_result(state)),
        EmitAgreementComplete(rules.build_completion(state)),
    ]


# ========== Per-step handlers ==========

def _on_agreement(state: WizardState, event: WizardEvent) -> Transition:
    if isinstance(event, Cancel):
        return _stay(replace(state, step=Step.CANCELLED), InvokeCancel())

    if isinstance(event, Proceed):
        return _stay(replace(state, step=Step.PRICE, error=None))

    if isinstance(event, AgreementLoaded):
        if not state.session.bilateral:
            raise InvalidTransitionError(state.step, event, "only valid for bilateral sessions")
        snapshot = event.snapshot
        if snapshot is None:
            return _stay(state)

        agreed_price = snapshot.agreed_price or state.session.original_price
        loaded = _apply_flags(
            replace(state, price_input=format_price_input(agreed_price)),
            snapshot.buyer_agreed,
            snapshot.seller_agreed,
            event.privacy_revealed,
        )
        if event.privacy_revealed and snapshot.both_agreed:
            return _stay(replace(loaded, step=Step.LOCATION))
        if snapshot.agreed_by(state.session.user_role):
            return _stay(replace(loaded, step=Step.WAITING), WatchCounterpart())
        return _stay(loaded)

    raise InvalidTransitionError(state.step, event)


def _on_price(state: WizardState, event: WizardEvent) -> Transition:
    if isinstance(event, EnterPrice):
        return _stay(replace(state, price_input=event.raw))

    if isinstance(event, Back):
        if state.busy:
            raise InvalidTransitionError(state.step, event, "blocked while submitting")
        return _stay(replace(state, step=Step.AGREEMENT, error=None))

    if isinstance(event, ConfirmPrice):
        if not rules.can_confirm_price(state):
            raise InvalidTransitionError(state.step, event, "requires a price greater than 0")
        if not state.session.bilateral:
            return _stay(replace(state, step=Step.LOCATION, error=None))

        submission = _submission(
            state,
            agreed_price=rules.final_price(state),
            original_price=state.session.original_price,
        )
        return _stay(replace(state, busy=True, error=None), SubmitAgreement(submission))

    if isinstance(event, AgreementRecorded):
        if not state.busy:
            raise InvalidTransitionError(state.step, event, "received without a pending submission")
        snapshot = event.snapshot
        recorded = _apply_flags(
            replace(state, busy=False),
            snapshot.buyer_agreed,
            snapshot.seller_agreed,
            snapshot.privacy_revealed,
        )
        if recorded.both_agreed:
            return _stay(replace(recorded, step=Step.LOCATION))
        return _stay(replace(recorded, step=Step.WAITING), WatchCounterpart())

    raise InvalidTransitionError(state.step, event)


def _on_waiting(state: WizardState, event: WizardEvent) -> Transition:
    if isinstance(event, CounterpartUpdate):
        updated = _apply_flags(state, event.buyer_agreed, event.seller_agreed, event.privacy_revealed)
        if updated.both_agreed:
            return _stay(replace(updated, step=Step.LOCATION, error=None), StopWatchingCounterpart())
        return _stay(updated)

    raise InvalidTransitionError(state.step, event)


def _on_location(state: WizardState, event: WizardEvent, today: date) -> Transition:
    if isinstance(event, SelectSafeZone):
        if not any(zone.id == event.zone_id for zone in state.safe_zones):
            raise InvalidTransitionError(state.step, event, f"references unknown safe zone '{event.zone_id}'")
        return _stay(replace(state, safe_zone_id=event.zone_id, custom_location=None))

    if isinstance(event, ChooseCustomLocation):
        return _stay(replace(state, safe_zone_id=None, custom_location=state.custom_location or ""))

    if isinstance(event, EnterCustomLocation):
        return _stay(replace(state, safe_zone_id=None, custom_location=event.text))

    if isinstance(event, SelectDate):
        return _stay(replace(state, selected_date=event.value))

    if isinstance(event, SelectTime):
        if event.slot is not None and event.slot not in state.time_slots:
            raise InvalidTransitionError(state.step, event, f"uses unknown time slot '{event.slot}'")
        return _stay(replace(state, selected_time=event.slot))

    if isinstance(event, Back):
        return _stay(replace(state, step=Step.PRICE, error=None))

    if isinstance(event, ContinueToConfirm):
        if not rules.can_continue_location(state, today):
            raise InvalidTransitionError(
                state.step, event, "requires a location, a date after today and a time slot"
            )
        return _stay(replace(state, step=Step.CONFIRM, error=None))

    raise InvalidTransitionError(state.step, event)


def _on_confirm(state: WizardState, event: WizardEvent) -> Transition:
    if isinstance(event, Back):
        if state.busy:
            raise InvalidTransitionError(state.step, event, "blocked while submitting")
        return _stay(replace(state, step=Step.LOCATION, error=None))

    if isinstance(event, ConfirmMeeting):
        if not rules.can_confirm_meeting(state):
            raise InvalidTransitionError(state.step, event, "blocked while submitting")
        if not state.session.bilateral:
            return Transition(replace(state, step=Step.COMPLETE), _completion_effects(state))

        submission = _submission(
            state,
            safe_zone_id=state.safe_zone_id,
            custom_meeting_location=None if state.safe_zone_id else rules.location_identifier(state),
            meeting_datetime=rules.meeting_datetime(state.selected_date, state.selected_time),
        )
        return _stay(replace(state, busy=True, error=None), PersistMeeting(submission))

    if isinstance(event, MeetingRecorded):
        if not state.busy:
            raise InvalidTransitionError(state.step, event, "received without a pending submission")
        snapshot = event.snapshot
        done = _apply_flags(
            replace(state, busy=False, step=Step.COMPLETE),
            snapshot.buyer_agreed,
            snapshot.seller_agreed,
            snapshot.privacy_revealed,
        )
        return Transition(done, _completion_effects(done))

    raise InvalidTransitionError(state.step, event)


def _on_any_step(state: WizardState, event: WizardEvent) -> Transition | None:
    """Events accepted in every non-terminal step."""
    if isinstance(event, CollaboratorFailed):
        return _stay(replace(state, busy=False, error=event.message))

    if isinstance(event, SafeZonesLoaded):
        zones = tuple(event.zones)
        keep = state.safe_zone_id if any(z.id == state.safe_zone_id for z in zones) else None
        return _stay(replace(state, safe_zones=zones, safe_zone_id=keep))

    if isinstance(event, CounterpartUpdate) and state.step != Step.WAITING:
        return _stay(_apply_flags(state, event.buyer_agreed, event.seller_agreed, event.privacy_revealed))

    return None


def transition(state: WizardState, event: WizardEvent, *, today: date) -> Transition:
    """
    Apply one event to the wizard.

    Args:
        state: Current snapshot
        event: User input or collaborator notification
        today: Wall-clock date used by the meeting date guard

    Returns:
        Transition with the next snapshot and the effects the driver must run

    Raises:
        InvalidTransitionError: Event not allowed in the current step or its guard failed
    """
    if state.step.is_terminal:
        raise InvalidTransitionError(state.step, event, "received after the wizard finished")

    result = _on_any_step(state, event)
    if result is None:
        if state.step == Step.AGREEMENT:
            result = _on_agreement(state, event)
        elif state.step == Step.PRICE:
            result = _on_price(state, event)
        elif state.step == Step.WAITING:
            result = _on_waiting(state, event)
        elif state.step == Step.LOCATION:
            result = _on_location(state, event, today)
        else:
            result = _on_confirm(state, event)

    if result.state.step != state.step:
        logger.debug(
            f"Wizard {state.session.conversation_id}: {state.step.value} -> "
            f"{result.state.step.value} on {type(event).__name__}"
        )
    return result
