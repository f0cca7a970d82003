"""
Result envelope builders shared by the service façades.
"""

import logging
from typing import Callable, List, Optional, TypeVar

from src.core.common.errors import EngineError, ErrorCode
from src.core.models import ServiceResponse

logger = logging.getLogger(__name__)

T = TypeVar("T")


def ok(data: T, message: Optional[str] = None) -> ServiceResponse[T]:
    return ServiceResponse(success=True, data=data, message=message)


def fail(
    message: str,
    *,
    code: ErrorCode,
    errors: Optional[List[str]] = None,
    data: Optional[T] = None,
) -> ServiceResponse[T]:
    return ServiceResponse(
        success=False,
        data=data,
        message=message,
        errors=errors if errors is not None else [message],
        error_code=code,
    )


def fail_from_error(exc: EngineError) -> ServiceResponse:
    return fail(exc.message, code=exc.code, errors=exc.errors)


def guarded(
    operation: Callable[[], ServiceResponse[T]],
    *,
    failure_message: str,
) -> ServiceResponse[T]:
    """
    Runs one service operation and converts every failure into an envelope.
    Engine errors keep their code; anything else is an upstream read failure.
    """
    try:
        return operation()
    except EngineError as exc:
        logger.info("%s: %s", failure_message, exc.message)
        return fail_from_error(exc)
    except Exception as exc:
        logger.exception(failure_message)
        return fail(
            failure_message,
            code=ErrorCode.UPSTREAM_FAILURE,
            errors=[str(exc) or "Unknown error"],
        )
