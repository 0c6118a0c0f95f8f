"""
Deal agreement service.

WHAT: Shared per-conversation agreement between buyer and seller
WHY: Each party's wizard only learns the other side's decision through this record
HOW: Upsert keyed by conversation id; meeting details masked until both agree
"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session as DBSession

from ..core.database import get_db
from ..core.models import DealAgreement, DealStatus, PrivacyProtectionLog, SafeZone as SafeZoneRow
from ..models.agreement import DealAgreementSnapshot, Role
from ..models.api_schemas import AgreementSubmission, DealAgreementLookup, SubmissionResult
from ..utils.exceptions import (
    DealAgreementNotFoundException,
    ParticipantMismatchException,
    SafeZoneNotFoundException,
    ValidationException,
)
from ..utils.logger import get_logger
from .safe_zone_service import to_schema

logger = get_logger(__name__)

BOTH_AGREED_MESSAGE = "Both parties have agreed! Contact details are now available."
WAITING_MESSAGE = "Your agreement has been recorded. Waiting for the other party."


def to_snapshot(agreement: DealAgreement, reveal: bool) -> DealAgreementSnapshot:
    """
    Convert an ORM agreement to its API snapshot.

    Args:
        agreement: Stored agreement (session still open)
        reveal: Whether meeting location fields may be shown

    Returns:
        DealAgreementSnapshot with location fields nulled unless revealed
    """
    return DealAgreementSnapshot(
        id=agreement.id,
        conversation_id=agreement.conversation_id,
        listing_id=agreement.listing_id,
        buyer_agreed=agreement.buyer_agreed,
        seller_agreed=agreement.seller_agreed,
        agreed_price=agreement.agreed_price,
        original_price=agreement.original_price,
        privacy_revealed=agreement.privacy_revealed,
        deal_status=DealStatus(agreement.deal_status).value,
        safe_zone=to_schema(agreement.safe_zone) if reveal and agreement.safe_zone else None,
        custom_meeting_location=agreement.custom_meeting_location if reveal else None,
        meeting_datetime=agreement.meeting_datetime
    )


def _find(db: DBSession, conversation_id: str) -> Optional[DealAgreement]:
    return db.query(DealAgreement).filter(DealAgreement.conversation_id == conversation_id).first()


def _role_of(agreement: DealAgreement, user_id: str) -> Role:
    return "buyer" if agreement.buyer_id == user_id else "seller"


def get_agreement(conversation_id: str, user_id: str) -> DealAgreementLookup:
    """
    Fetch the agreement for a conversation as seen by one participant.

    Args:
        conversation_id: Conversation the deal belongs to
        user_id: Requesting user

    Returns:
        DealAgreementLookup; deal_agreement is None when nothing is stored

    Raises:
        ValidationException: If either id is blank
    """
    if not conversation_id or not user_id:
        raise ValidationException("conversation_id and user_id are required")

    with get_db() as db:
        agreement = _find(db, conversation_id)
        if agreement is None:
            return DealAgreementLookup()

        revealed = bool(agreement.privacy_revealed and agreement.both_agreed)
        return DealAgreementLookup(
            deal_agreement=to_snapshot(agreement, reveal=revealed),
            privacy_revealed=revealed,
            user_role=_role_of(agreement, user_id)
        )


def get_agreement_state(conversation_id: str) -> DealAgreementSnapshot:
    """
    Fetch the masked agreement state for streaming.

    Raises:
        DealAgreementNotFoundException: If no agreement exists
    """
    with get_db() as db:
        agreement = _find(db, conversation_id)
        if agreement is None:
            raise DealAgreementNotFoundException(conversation_id)
        return to_snapshot(agreement, reveal=False)


def _apply_submission(db: DBSession, agreement: DealAgreement, submission: AgreementSubmission, now: datetime):
    """Copy the submitting party's agreement and any provided deal details."""
    if submission.user_role == "buyer":
        agreement.buyer_agreed = True
        agreement.buyer_agreed_at = now
    else:
        agreement.seller_agreed = True
        agreement.seller_agreed_at = now

    if submission.agreed_price is not None:
        agreement.agreed_price = submission.agreed_price
    if submission.original_price is not None:
        agreement.original_price = submission.original_price
    if agreement.agreed_price is None and agreement.original_price:
        agreement.agreed_price = agreement.original_price

    # A new meeting point replaces the old one of either kind
    if submission.safe_zone_id:
        if db.get(SafeZoneRow, submission.safe_zone_id) is None:
            raise SafeZoneNotFoundException(submission.safe_zone_id)
        agreement.safe_zone_id = submission.safe_zone_id
        agreement.custom_meeting_location = None
    elif submission.custom_meeting_location:
        agreement.custom_meeting_location = submission.custom_meeting_location
        agreement.safe_zone_id = None

    if submission.meeting_datetime is not None:
        agreement.meeting_datetime = submission.meeting_datetime

    agreement.updated_at = now


def _reveal_privacy(db: DBSession, agreement: DealAgreement, now: datetime):
    """Mark the deal agreed and log both identity reveals."""
    agreement.privacy_revealed = True
    agreement.privacy_revealed_at = now
    agreement.deal_status = DealStatus.AGREED

    db.add_all([
        PrivacyProtectionLog(
            deal_agreement_id=agreement.id,
            user_id=agreement.buyer_id,
            data_type="name",
            revealed_to=agreement.seller_id,
            reason="deal_agreed"
        ),
        PrivacyProtectionLog(
            deal_agreement_id=agreement.id,
            user_id=agreement.seller_id,
            data_type="name",
            revealed_to=agreement.buyer_id,
            reason="deal_agreed"
        ),
    ])
    logger.info(f"Privacy revealed for conversation {agreement.conversation_id}")


def record_agreement(submission: AgreementSubmission) -> SubmissionResult:
    """
    Record one party's agreement, creating the deal if needed.

    WHAT: Upsert the conversation's agreement for the submitting role
    WHY: Both parties must agree before details are revealed
    HOW: Set role flag and details; on first mutual agreement reveal privacy

    Args:
        submission: Validated submission from buyer or seller

    Returns:
        SubmissionResult with the revealed snapshot once both agreed

    Raises:
        ParticipantMismatchException: If listing/buyer/seller differ from the stored deal
        SafeZoneNotFoundException: If safe_zone_id is unknown
    """
    now = datetime.utcnow()

    with get_db() as db:
        agreement = _find(db, submission.conversation_id)

        if agreement is None:
            agreement = DealAgreement(
                conversation_id=submission.conversation_id,
                listing_id=submission.listing_id,
                buyer_id=submission.buyer_id,
                seller_id=submission.seller_id,
                deal_status=DealStatus.PENDING
            )
            db.add(agreement)
            logger.info(f"Creating deal agreement for conversation {submission.conversation_id}")
        elif (
            agreement.listing_id != submission.listing_id
            or agreement.buyer_id != submission.buyer_id
            or agreement.seller_id != submission.seller_id
        ):
            raise ParticipantMismatchException(submission.conversation_id)

        _apply_submission(db, agreement, submission, now)
        db.flush()

        both_agreed = agreement.both_agreed
        if both_agreed and not agreement.privacy_revealed:
            _reveal_privacy(db, agreement, now)

        has_location = agreement.safe_zone_id or agreement.custom_meeting_location
        if both_agreed and has_location and agreement.meeting_datetime is not None:
            agreement.deal_status = DealStatus.SCHEDULED

        db.flush()
        db.refresh(agreement)

        logger.info(
            f"Recorded {submission.user_role} agreement for {submission.conversation_id} "
            f"(status={DealStatus(agreement.deal_status).value})"
        )

        return SubmissionResult(
            deal_agreement=to_snapshot(agreement, reveal=both_agreed),
            privacy_revealed=both_agreed,
            both_parties_agreed=both_agreed,
            message=BOTH_AGREED_MESSAGE if both_agreed else WAITING_MESSAGE
        )
