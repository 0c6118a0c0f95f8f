"""
Meeting agreement wizard driver.

WHAT: Holds the current wizard snapshot and executes transition effects
WHY: Hosts interact with one object instead of wiring transitions by hand
HOW: dispatch() runs the pure transition, then awaits each effect in order
"""

import inspect
from datetime import date
from typing import Any, Callable

from ..models.agreement import AgreementCompletion, DealAgreementSnapshot, NegotiationSession, PriceProposal, SafeZone
from ..models.api_schemas import AgreementSubmission, SubmissionResult
from ..utils.logger import get_logger
from . import rules
from .collaborators import AgreementSource, CollaboratorError, CounterpartWatch, SafeZoneSource, WatchFactory
from .copy import AgreementFraming, agreement_framing
from .machine import transition
from .state import WizardState, initial_state
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


async def _call(callback: Callable[..., Any], *args) -> None:
    """Invoke a sync or async host callback; its exceptions propagate."""
    outcome = callback(*args)
    if inspect.isawaitable(outcome):
        await outcome


class AgreementWizard:
    """
    One party's meeting agreement flow.

    Both the buyer and the seller run their own instance; they only share
    state through the AgreementSource collaborator in bilateral sessions.
    """

    def __init__(
        self,
        session: NegotiationSession,
        *,
        on_cancel: Callable[[], Any],
        on_select_meeting_location: Callable[[str, str, float], Any] | None = None,
        on_agreement_complete: Callable[[AgreementCompletion], Any] | None = None,
        agreement_source: AgreementSource | None = None,
        safe_zone_source: SafeZoneSource | None = None,
        watch_factory: WatchFactory | None = None,
        safe_zones: list[SafeZone] | None = None,
        time_slots: list[str] | None = None,
        clock: Callable[[], date] = date.today,
    ):
        if session.bilateral and agreement_source is None:
            raise ValueError("bilateral sessions require an agreement_source")

        self._state = initial_state(session, safe_zones=safe_zones, time_slots=time_slots)
        self._on_cancel = on_cancel
        self._on_select_meeting_location = on_select_meeting_location
        self._on_agreement_complete = on_agreement_complete
        self._agreement_source = agreement_source
        self._safe_zone_source = safe_zone_source
        self._watch_factory = watch_factory
        self._watch: CounterpartWatch | None = None
        self._clock = clock

    # ========== Read side ==========

    @property
    def state(self) -> WizardState:
        return self._state

    @property
    def step(self) -> Step:
        return self._state.step

    @property
    def error(self) -> str | None:
        return self._state.error

    @property
    def framing(self) -> AgreementFraming:
        return agreement_framing(self._state.session)

    @property
    def price_proposal(self) -> PriceProposal | None:
        return rules.price_proposal(self._state)

    @property
    def deviation_text(self) -> str | None:
        return rules.deviation_text(self._state)

    @property
    def can_confirm_price(self) -> bool:
        return rules.can_confirm_price(self._state)

    @property
    def can_continue_location(self) -> bool:
        return rules.can_continue_location(self._state, self._clock())

    @property
    def min_meeting_date(self) -> date:
        return rules.min_meeting_date(self._clock())

    @property
    def confirmation(self) -> rules.ConfirmationSummary:
        return rules.confirmation_summary(self._state)

    @property
    def watching(self) -> bool:
        return self._watch is not None

    # ========== Lifecycle ==========

    async def start(self) -> None:
        """
        Load collaborator data for the freshly mounted wizard.

        Collaborator failures are stored on the state, not raised.
        """
        session = self._state.session

        if self._safe_zone_source is not None:
            try:
                zones = await self._safe_zone_source.list_safe_zones(
                    session.listing_city, session.listing_zip_code
                )
            except CollaboratorError as e:
                logger.warning(f"Failed to load safe zones for {session.listing_city}: {e}")
                await self.dispatch(CollaboratorFailed(str(e)))
            else:
                await self.dispatch(SafeZonesLoaded(tuple(zones)))

        if session.bilateral:
            try:
                lookup = await self._agreement_source.fetch(session.conversation_id, session.current_user_id)
            except CollaboratorError as e:
                logger.warning(f"Failed to load deal agreement for {session.conversation_id}: {e}")
                await self.dispatch(CollaboratorFailed(str(e)))
            else:
                await self.dispatch(AgreementLoaded(lookup.deal_agreement, lookup.privacy_revealed))

    async def close(self) -> None:
        """Release the counterpart subscription; call when the host unmounts."""
        await self._stop_watch()

    async def dispatch(self, event: WizardEvent) -> WizardState:
        """
        Apply an event and run its effects.

        Raises:
            InvalidTransitionError: Event not allowed in the current step
        """
        result = transition(self._state, event, today=self._clock())
        self._state = result.state
        for effect in result.effects:
            await self._run_effect(effect)
        return self._state

    # ========== Effects ==========

    async def _run_effect(self, effect: WizardEffect) -> None:
        if isinstance(effect, InvokeCancel):
            await _call(self._on_cancel)

        elif isinstance(effect, SubmitAgreement):
            outcome = await self._submit(effect.submission, "Failed to create agreement")
            if outcome is not None:
                await self.dispatch(AgreementRecorded(outcome.deal_agreement))

        elif isinstance(effect, PersistMeeting):
            outcome = await self._submit(effect.submission, "Failed to finalize meeting")
            if outcome is not None:
                await self.dispatch(MeetingRecorded(outcome.deal_agreement))

        elif isinstance(effect, WatchCounterpart):
            self._start_watch()

        elif isinstance(effect, StopWatchingCounterpart):
            await self._stop_watch()

        elif isinstance(effect, EmitMeetingSelected):
            if self._on_select_meeting_location is not None:
                result = effect.result
                await _call(
                    self._on_select_meeting_location,
                    result.location_descriptor,
                    result.schedule_summary,
                    result.final_price,
                )

        elif isinstance(effect, EmitAgreementComplete):
            if self._on_agreement_complete is not None:
                await _call(self._on_agreement_complete, effect.completion)
            logger.info(f"Meeting agreed for conversation {self._state.session.conversation_id}")

    async def _submit(self, submission: AgreementSubmission, fallback: str) -> SubmissionResult | None:
        """
        Send a submission; the step is left not busy on every failure.

        Returns:
            The recorded result, or None after a collaborator failure was stored on the state

        Raises:
            Exception: Anything other than CollaboratorError, after the error is stored
        """
        try:
            return await self._agreement_source.submit(submission)
        except CollaboratorError as e:
            logger.warning(f"Submission failed for {submission.conversation_id}: {e}")
            await self.dispatch(CollaboratorFailed(str(e) or fallback))
        except Exception:
            logger.exception(f"Unexpected submission failure for {submission.conversation_id}")
            await self.dispatch(CollaboratorFailed(fallback))
            raise
        return None

    def _start_watch(self) -> None:
        if self._watch is not None or self._watch_factory is None:
            return
        self._watch = self._watch_factory(self._handle_counterpart, self._handle_watch_error)
        self._watch.start()

    async def _stop_watch(self) -> None:
        watch, self._watch = self._watch, None
        if watch is not None:
            await watch.stop()

    async def _handle_counterpart(self, snapshot: DealAgreementSnapshot) -> None:
        if self._state.step.is_terminal:
            return
        await self.dispatch(
            CounterpartUpdate(snapshot.buyer_agreed, snapshot.seller_agreed, snapshot.privacy_revealed)
        )

    async def _handle_watch_error(self, message: str) -> None:
        if not self._state.step.is_terminal:
            await self.dispatch(CollaboratorFailed(message))

    # ========== Host actions ==========

    async def proceed(self) -> WizardState:
        return await self.dispatch(Proceed())

    async def cancel(self) -> WizardState:
        return await self.dispatch(Cancel())

    async def back(self) -> WizardState:
        return await self.dispatch(Back())

    async def enter_price(self, raw: str) -> WizardState:
        return await self.dispatch(EnterPrice(raw))

    async def confirm_price(self) -> WizardState:
        return await self.dispatch(ConfirmPrice())

    async def select_safe_zone(self, zone_id: str) -> WizardState:
        return await self.dispatch(SelectSafeZone(zone_id))

    async def choose_custom_location(self) -> WizardState:
        return await self.dispatch(ChooseCustomLocation())

    async def enter_custom_location(self, text: str) -> WizardState:
        return await self.dispatch(EnterCustomLocation(text))

    async def select_date(self, value: date | None) -> WizardState:
        return await self.dispatch(SelectDate(value))

    async def select_time(self, slot: str | None) -> WizardState:
        return await self.dispatch(SelectTime(slot))

    async def continue_to_confirm(self) -> WizardState:
        return await self.dispatch(ContinueToConfirm())

    async def confirm_meeting(self) -> WizardState:
        return await self.dispatch(ConfirmMeeting())

    async def counterpart_update(self, buyer_agreed: bool, seller_agreed: bool) -> WizardState:
        return await self.dispatch(CounterpartUpdate(buyer_agreed, seller_agreed))
