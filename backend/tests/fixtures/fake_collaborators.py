"""
In-memory collaborators for deterministic wizard testing.

WHAT: Fake AgreementSource, SafeZoneSource and counterpart watch
WHY: Test the wizard driver without HTTP or a database
HOW: Implement the collaborator protocols over plain dicts and lists
"""

from typing import Dict, List, Optional

from safetrade.models.agreement import DealAgreementSnapshot, SafeZone
from safetrade.models.api_schemas import AgreementSubmission, DealAgreementLookup, SubmissionResult
from safetrade.wizard.collaborators import CollaboratorError


class FakeAgreementSource:
    """
    Shared deal agreements keyed by conversation.

    Buyer and seller wizards can share one instance to simulate both
    parties talking to the same collaborator.
    """

    def __init__(self, fail_with: Optional[Exception] = None):
        self.records: Dict[str, DealAgreementSnapshot] = {}
        self.submissions: List[AgreementSubmission] = []
        self.fetches: List[tuple] = []
        self.fail_with = fail_with

    def seed(self, conversation_id: str, **fields) -> DealAgreementSnapshot:
        snapshot = DealAgreementSnapshot(conversation_id=conversation_id, **fields)
        self.records[conversation_id] = snapshot
        return snapshot

    async def fetch(self, conversation_id: str, user_id: str) -> DealAgreementLookup:
        self.fetches.append((conversation_id, user_id))
        if self.fail_with is not None:
            raise self.fail_with
        snapshot = self.records.get(conversation_id)
        if snapshot is None:
            return DealAgreementLookup()
        revealed = snapshot.privacy_revealed and snapshot.both_agreed
        return DealAgreementLookup(deal_agreement=snapshot, privacy_revealed=revealed)

    async def submit(self, submission: AgreementSubmission) -> SubmissionResult:
        self.submissions.append(submission)
        if self.fail_with is not None:
            raise self.fail_with

        current = self.records.get(submission.conversation_id) or DealAgreementSnapshot(
            conversation_id=submission.conversation_id,
            listing_id=submission.listing_id,
        )
        update = {f"{submission.user_role}_agreed": True}
        if submission.agreed_price is not None:
            update["agreed_price"] = submission.agreed_price
        if submission.original_price is not None:
            update["original_price"] = submission.original_price
        if submission.custom_meeting_location:
            update["custom_meeting_location"] = submission.custom_meeting_location
        if submission.meeting_datetime is not None:
            update["meeting_datetime"] = submission.meeting_datetime

        snapshot = current.model_copy(update=update)
        if snapshot.both_agreed:
            snapshot = snapshot.model_copy(update={"privacy_revealed": True, "deal_status": "agreed"})
        self.records[submission.conversation_id] = snapshot

        return SubmissionResult(
            deal_agreement=snapshot,
            privacy_revealed=snapshot.both_agreed,
            both_parties_agreed=snapshot.both_agreed,
            message="recorded",
        )


class FakeSafeZoneSource:
    """Fixed safe-zone catalog."""

    def __init__(self, zones: List[SafeZone], fail_with: Optional[CollaboratorError] = None):
        self.zones = zones
        self.fail_with = fail_with
        self.calls: List[tuple] = []

    async def list_safe_zones(self, city: str, zip_code: Optional[str] = None) -> List[SafeZone]:
        self.calls.append((city, zip_code))
        if self.fail_with is not None:
            raise self.fail_with
        return list(self.zones)


class ManualWatch:
    """Counterpart watch driven by the test via push()."""

    def __init__(self, on_update, on_error):
        self.on_update = on_update
        self.on_error = on_error
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def push(self, snapshot: DealAgreementSnapshot) -> None:
        await self.on_update(snapshot)

    async def fail(self, message: str) -> None:
        await self.on_error(message)


class ManualWatchFactory:
    """watch_factory that remembers every watch it created."""

    def __init__(self):
        self.watches: List[ManualWatch] = []

    def __call__(self, on_update, on_error) -> ManualWatch:
        watch = ManualWatch(on_update, on_error)
        self.watches.append(watch)
        return watch

    @property
    def last(self) -> ManualWatch:
        return self.watches[-1]
