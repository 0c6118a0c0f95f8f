"""
Business exceptions raised by the agreement and safe-zone services.

WHAT: Error code, message, details and HTTP status per failure kind
WHY: Wizard clients branch on `error` codes (e.g. PARTICIPANT_MISMATCH)
HOW: Each subclass fixes its code and status; the error handler serializes them
"""

from typing import Any, Dict, List, Optional


class BusinessException(Exception):
    """Base class for business logic exceptions."""

    http_status = 400

    def __init__(self, message: str, code: str, details: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details


class DealAgreementNotFoundException(BusinessException):
    """No deal agreement stored for the conversation yet."""

    http_status = 404

    def __init__(self, conversation_id: str):
        super().__init__(
            message=f"Deal agreement not found for conversation: {conversation_id}",
            code="DEAL_AGREEMENT_NOT_FOUND",
            details={"conversation_id": conversation_id}
        )


class SafeZoneNotFoundException(BusinessException):
    http_status = 404

    def __init__(self, safe_zone_id: str):
        super().__init__(
            message=f"Safe zone not found: {safe_zone_id}",
            code="SAFE_ZONE_NOT_FOUND",
            details={"safe_zone_id": safe_zone_id}
        )


class ParticipantMismatchException(BusinessException):
    """Submission names a listing or buyer/seller pair that differs from the stored deal."""

    http_status = 409

    def __init__(self, conversation_id: str):
        super().__init__(
            message=f"Buyer/seller do not match the existing agreement for conversation {conversation_id}",
            code="PARTICIPANT_MISMATCH",
            details={"conversation_id": conversation_id}
        )


class ValidationException(BusinessException):
    """Input accepted by the schema but rejected by a service rule (e.g. blank city)."""

    def __init__(self, message: str, field_errors: Optional[List[Dict[str, str]]] = None):
        super().__init__(
            message=message,
            code="VALIDATION_ERROR",
            details={"field_errors": field_errors} if field_errors else None
        )
