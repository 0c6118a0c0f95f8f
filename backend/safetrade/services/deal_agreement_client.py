"""
Deal agreement HTTP client.

WHAT: AgreementSource implementation over the collaborator API
WHY: Bilateral wizards share agreement state only through this resource
HOW: GET/POST /safe-zone/deal-agreement, responses parsed into API schemas
"""

from pydantic import ValidationError

from ..models.api_schemas import AgreementSubmission, DealAgreementLookup, SubmissionResult
from ..utils.logger import get_logger
from ..wizard.collaborators import CollaboratorResponseError
from .http_client import CollaboratorHTTPClient

logger = get_logger(__name__)


class DealAgreementClient(CollaboratorHTTPClient):
    """Fetch and submit deal agreements keyed by conversation."""

    async def fetch(self, conversation_id: str, user_id: str) -> DealAgreementLookup:
        data = await self._request(
            "GET",
            "/safe-zone/deal-agreement",
            params={"conversation_id": conversation_id, "user_id": user_id},
        )
        try:
            return DealAgreementLookup.model_validate(data)
        except ValidationError as e:
            raise CollaboratorResponseError("Invalid deal agreement response") from e

    async def submit(self, submission: AgreementSubmission) -> SubmissionResult:
        data = await self._request(
            "POST",
            "/safe-zone/deal-agreement",
            json=submission.model_dump(mode="json", exclude_none=True),
        )
        try:
            result = SubmissionResult.model_validate(data)
        except ValidationError as e:
            raise CollaboratorResponseError("Invalid deal agreement response") from e

        if not result.success:
            raise CollaboratorResponseError(result.message or "Failed to create agreement")

        logger.info(
            f"Agreement submitted for {submission.conversation_id} as {submission.user_role} "
            f"(both agreed: {result.both_parties_agreed})"
        )
        return result
