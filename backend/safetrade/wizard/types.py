"""
Wizard steps, events, effects and exceptions.

WHAT: Standard type definitions for the meeting agreement state machine
WHY: Keep the transition function and its driver on one explicit contract
HOW: str Enum for steps, frozen dataclasses for events/effects, custom exceptions
"""

import enum
from dataclasses import dataclass
from datetime import date

from ..models.agreement import (
    AgreementCompletion,
    AgreementResult,
    DealAgreementSnapshot,
    SafeZone,
)
from ..models.api_schemas import AgreementSubmission


class Step(str, enum.Enum):
    """Wizard steps, in flow order."""
    AGREEMENT = "agreement"
    PRICE = "price"
    WAITING = "waiting"
    LOCATION = "location"
    CONFIRM = "confirm"
    COMPLETE = "complete"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in (Step.COMPLETE, Step.CANCELLED)


# ========== Events ==========

@dataclass(frozen=True)
class Proceed:
    """Agreement step: user wants to continue to price negotiation."""


@dataclass(frozen=True)
class Cancel:
    """Agreement step: user backs out of the deal."""


@dataclass(frozen=True)
class Back:
    """Return to the previous step."""


@dataclass(frozen=True)
class EnterPrice:
    """Price field changed; raw is the text the user typed."""
    raw: str


@dataclass(frozen=True)
class ConfirmPrice:
    """Price step forward control."""


@dataclass(frozen=True)
class AgreementLoaded:
    """Existing deal agreement fetched when the wizard starts."""
    snapshot: DealAgreementSnapshot | None
    privacy_revealed: bool = False


@dataclass(frozen=True)
class AgreementRecorded:
    """Collaborator accepted the local price agreement."""
    snapshot: DealAgreementSnapshot


@dataclass(frozen=True)
class CounterpartUpdate:
    """Latest agreement flags of both parties."""
    buyer_agreed: bool
    seller_agreed: bool
    privacy_revealed: bool | None = None


@dataclass(frozen=True)
class CollaboratorFailed:
    """A collaborator call failed; message is shown inline."""
    message: str


@dataclass(frozen=True)
class SafeZonesLoaded:
    zones: tuple[SafeZone, ...]


@dataclass(frozen=True)
class SelectSafeZone:
    zone_id: str


@dataclass(frozen=True)
class ChooseCustomLocation:
    """User picked the "other public location" option."""


@dataclass(frozen=True)
class EnterCustomLocation:
    text: str


@dataclass(frozen=True)
class SelectDate:
    value: date | None


@dataclass(frozen=True)
class SelectTime:
    slot: str | None


@dataclass(frozen=True)
class ContinueToConfirm:
    """Location step forward control."""


@dataclass(frozen=True)
class ConfirmMeeting:
    """Confirm step: finalize the meeting."""


@dataclass(frozen=True)
class MeetingRecorded:
    """Collaborator stored the meeting details."""
    snapshot: DealAgreementSnapshot


WizardEvent = (
    Proceed | Cancel | Back | EnterPrice | ConfirmPrice | AgreementLoaded
    | AgreementRecorded | CounterpartUpdate | CollaboratorFailed | SafeZonesLoaded
    | SelectSafeZone | ChooseCustomLocation | EnterCustomLocation | SelectDate
    | SelectTime | ContinueToConfirm | ConfirmMeeting | MeetingRecorded
)


# ========== Effects ==========

@dataclass(frozen=True)
class InvokeCancel:
    """Call the host's on_cancel callback."""


@dataclass(frozen=True)
class SubmitAgreement:
    """Send the local price agreement to the deal agreement resource."""
    submission: AgreementSubmission


@dataclass(frozen=True)
class PersistMeeting:
    """Send the chosen meeting place and time to the deal agreement resource."""
    submission: AgreementSubmission


@dataclass(frozen=True)
class WatchCounterpart:
    """Start listening for the other party's agreement."""


@dataclass(frozen=True)
class StopWatchingCounterpart:
    pass


@dataclass(frozen=True)
class EmitMeetingSelected:
    """Call on_select_meeting_location(location, schedule, price)."""
    result: AgreementResult


@dataclass(frozen=True)
class EmitAgreementComplete:
    """Call on_agreement_complete(completion)."""
    completion: AgreementCompletion


WizardEffect = (
    InvokeCancel | SubmitAgreement | PersistMeeting | WatchCounterpart
    | StopWatchingCounterpart | EmitMeetingSelected | EmitAgreementComplete
)


# ========== Exceptions ==========

class WizardError(Exception):
    """Base class for wizard errors."""
    pass


class InvalidTransitionError(WizardError):
    """Event is not allowed in the current step or fails its guard."""

    def __init__(self, step: Step, event: object, reason: str = "not allowed"):
        super().__init__(f"{type(event).__name__} {reason} in step '{step.value}'")
        self.step = step
        self.event = event
        self.reason = reason
