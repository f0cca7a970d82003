from enum import Enum
from typing import List, Optional


class ErrorCode(str, Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_INPUT = "INVALID_INPUT"
    DOMAIN_VIOLATION = "DOMAIN_VIOLATION"
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"


class EngineError(Exception):
    code: ErrorCode = ErrorCode.DOMAIN_VIOLATION

    def __init__(self, message: str, errors: Optional[List[str]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.errors = errors if errors is not None else [message]


class NotFoundError(EngineError):
    code = ErrorCode.NOT_FOUND


class InvalidInputError(EngineError):
    code = ErrorCode.INVALID_INPUT


class DomainViolationError(EngineError):
    code = ErrorCode.DOMAIN_VIOLATION


class UpstreamFailureError(EngineError):
    code = ErrorCode.UPSTREAM_FAILURE
