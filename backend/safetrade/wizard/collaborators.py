"""
Collaborator protocols for the meeting agreement wizard.

WHAT: Abstract interfaces for the deal agreement resource and safe-zone catalog
WHY: Keep the wizard agnostic to transport (HTTP, in-memory, push)
HOW: Use Protocol to define async methods, custom exceptions for failures
"""

from typing import Awaitable, Callable, Protocol

from ..models.agreement import DealAgreementSnapshot, SafeZone
from ..models.api_schemas import AgreementSubmission, DealAgreementLookup, SubmissionResult


class CollaboratorError(Exception):
    """A collaborator call failed; the message is safe to show to the user."""
    pass


class CollaboratorTimeoutError(CollaboratorError):
    """Request to the collaborator timed out."""
    pass


class CollaboratorUnavailableError(CollaboratorError):
    """Collaborator is not reachable or down."""
    pass


class CollaboratorResponseError(CollaboratorError):
    """Collaborator returned an invalid or error response."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class AgreementSource(Protocol):
    """Shared deal agreement record keyed by conversation."""

    async def fetch(self, conversation_id: str, user_id: str) -> DealAgreementLookup:
        """Fetch the current agreement as seen by user_id."""
        ...

    async def submit(self, submission: AgreementSubmission) -> SubmissionResult:
        """Record one party's agreement or meeting details."""
        ...


class SafeZoneSource(Protocol):
    """Read-only safe-zone catalog."""

    async def list_safe_zones(self, city: str, zip_code: str | None = None) -> list[SafeZone]:
        ...


AgreementListener = Callable[[DealAgreementSnapshot], Awaitable[None]]
ErrorListener = Callable[[str], Awaitable[None]]


class CounterpartWatch(Protocol):
    """Running subscription to counterpart agreement changes."""

    def start(self) -> None:
        ...

    async def stop(self) -> None:
        ...


WatchFactory = Callable[[AgreementListener, ErrorListener], CounterpartWatch]
