"""Meeting agreement wizard."""

from .types import (
    Step,
    WizardError,
    InvalidTransitionError,
)
from .collaborators import (
    AgreementSource,
    SafeZoneSource,
    CollaboratorError,
    CollaboratorTimeoutError,
    CollaboratorUnavailableError,
    CollaboratorResponseError,
)
from .state import WizardState, initial_state
from .machine import Transition, transition
from .driver import AgreementWizard

__all__ = [
    "Step",
    "WizardError",
    "InvalidTransitionError",
    "AgreementSource",
    "SafeZoneSource",
    "CollaboratorError",
    "CollaboratorTimeoutError",
    "CollaboratorUnavailableError",
    "CollaboratorResponseError",
    "WizardState",
    "initial_state",
    "Transition",
    "transition",
    "AgreementWizard",
]
