"""Error models

Two tiers that never share a base class other than ``Exception``:

- ``ApplicationError`` is fatal. It stops the pipeline before it starts and is
  reported to the caller as a failure result.
- ``RecoverableError`` is local. It is raised and caught inside a single
  candidate's generation or scoring and always resolves to a documented default.
"""

from enum import Enum
from typing import Optional
import uuid


class ErrorCode(str, Enum):
    """Error codes for fatal pipeline errors"""
    INVALID_REQUEST = "INVALID_REQUEST"
    ORCHESTRATION_ERROR = "ORCHESTRATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    TABLES_INVALID = "TABLES_INVALID"


class ApplicationError(Exception):
    """Fatal error that surfaces to the caller"""
    def __init__(self, code: ErrorCode, message: str, retryable: bool = False, hint: Optional[str] = None):
        self.error_id = str(uuid.uuid4())
        self.code = code
        self.message = message
        self.retryable = retryable
        self.hint = hint
        super().__init__(self.message)

    def model_dump(self):
        """Return dict representation for API responses"""
        return {
            "error_id": self.error_id,
            "code": self.code.value,
            "message": self.message,
            "hint": self.hint,
            "retryable": self.retryable,
        }

    @property
    def http_status(self) -> int:
        """Map error code to HTTP status"""
        mapping = {
            ErrorCode.INVALID_REQUEST: 400,
            ErrorCode.ORCHESTRATION_ERROR: 500,
            ErrorCode.CONFIGURATION_ERROR: 500,
            ErrorCode.TABLES_INVALID: 500,
        }
        return mapping.get(self.code, 500)


class InvalidRequestError(ApplicationError):
    """Caller input rejected before the pipeline starts"""
    def __init__(self, message: str, hint: Optional[str] = None):
        super().__init__(code=ErrorCode.INVALID_REQUEST, message=message, retryable=False, hint=hint)


class RecoverableError(Exception):
    """Per-candidate error that is always recovered locally"""
    pass


class GenerationError(RecoverableError):
    """Content generation collaborator failed or returned a malformed response"""
    def __init__(self, message: str, retryable: bool = True):
        self.retryable = retryable
        super().__init__(message)


class ScoringError(RecoverableError):
    """Candidate could not be scored"""
    pass
