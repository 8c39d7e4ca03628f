"""Error models shared by the pipeline, the gateways and the HTTP layer"""

from enum import Enum
from typing import Any, Dict, Optional
import uuid


class ErrorCode(str, Enum):
    """Error codes surfaced to API clients"""
    INVALID_REQUEST = "INVALID_REQUEST"
    INVALID_PLACE_ID = "INVALID_PLACE_ID"
    GOOGLE_RATE_LIMIT = "GOOGLE_RATE_LIMIT"
    PLACES_ERROR = "PLACES_ERROR"
    GATEWAY_ERROR = "GATEWAY_ERROR"
    INVALID_ARTIFACT = "INVALID_ARTIFACT"
    GENERATION_FAILED = "GENERATION_FAILED"
    NOT_FOUND = "NOT_FOUND"
    STORAGE_ERROR = "STORAGE_ERROR"
    RATE_LIMITED = "RATE_LIMITED"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"


# Codes not listed here are 500
HTTP_STATUS: Dict[ErrorCode, int] = {
    ErrorCode.INVALID_REQUEST: 400,
    ErrorCode.INVALID_PLACE_ID: 400,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.GOOGLE_RATE_LIMIT: 429,
    ErrorCode.RATE_LIMITED: 429,
    ErrorCode.PLACES_ERROR: 502,
    ErrorCode.GATEWAY_ERROR: 502,
    ErrorCode.INVALID_ARTIFACT: 502,
}


class ApplicationError(Exception):
    """
    Failure carried from the pipeline and gateways up to the API layer.

    Rendered to clients as {errorId, code, message, hint, retryable, sessionId}.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        retryable: bool = False,
        hint: Optional[str] = None,
        session_id: Optional[str] = None,
    ):
        super().__init__(message)
        self.error_id = str(uuid.uuid4())
        self.code = code
        self.message = message
        self.retryable = retryable
        self.hint = hint
        self.session_id = session_id

    def model_dump(self) -> Dict[str, Any]:
        return {
            "errorId": self.error_id,
            "code": self.code.value,
            "message": self.message,
            "hint": self.hint,
            "retryable": self.retryable,
            "sessionId": self.session_id,
        }

    @property
    def http_status(self) -> int:
        return HTTP_STATUS.get(self.code, 500)


class GatewayError(ApplicationError):
    """The completion gateway failed (network, auth, quota, timeout)"""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(
            code=ErrorCode.GATEWAY_ERROR,
            message=message,
            retryable=True,
            hint=hint or "The AI service is temporarily unavailable. Please try again."
        )


class InvalidArtifactError(ApplicationError):
    """A generated artifact (HTML document, theme/layout JSON) failed validation"""
    def __init__(self, message: str, artifact: str):
        self.artifact = artifact
        super().__init__(
            code=ErrorCode.INVALID_ARTIFACT,
            message=message,
            retryable=True,
            hint="The generated page was incomplete. Please try again."
        )
