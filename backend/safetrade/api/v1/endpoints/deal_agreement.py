"""
Deal agreement endpoints.

WHAT: Read and record the shared buyer/seller agreement
WHY: Bilateral wizards coordinate only through this resource
HOW: Thin FastAPI handlers over deal_agreement_service
"""

from fastapi import APIRouter, Query

from ....models.api_schemas import AgreementSubmission, DealAgreementLookup, SubmissionResult
from ....services import deal_agreement_service
from ....utils.logger import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/safe-zone/deal-agreement", response_model=DealAgreementLookup)
async def get_deal_agreement(
    conversation_id: str = Query(..., min_length=1),
    user_id: str = Query(..., min_length=1)
):
    """
    Get the deal agreement for a conversation.

    Meeting location fields are null until both parties have agreed.

    Args:
        conversation_id: Conversation the deal belongs to
        user_id: Requesting user, used to report their role

    Returns:
        DealAgreementLookup (deal_agreement is null if none exists)
    """
    return deal_agreement_service.get_agreement(conversation_id, user_id)


@router.post("/safe-zone/deal-agreement", response_model=SubmissionResult)
async def submit_deal_agreement(submission: AgreementSubmission):
    """
    Create or update a deal agreement for the submitting party.

    Args:
        submission: Party role, participants, price and optional meeting details

    Returns:
        SubmissionResult with both_parties_agreed and a user-facing message

    Raises:
        ParticipantMismatchException: Stored deal has different participants (409)
        SafeZoneNotFoundException: Unknown safe zone (404)
    """
    logger.info(f"Agreement from {submission.user_role} for conversation {submission.conversation_id}")
    return deal_agreement_service.record_agreement(submission)
