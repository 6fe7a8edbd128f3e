"""Result-Based Error Handling

- Result[T, E]: Ok/Err container for success/failure
- AppError: error with code, message, metadata and context
- ErrorCode: error code taxonomy
- Builder functions for ergonomic error construction

Usage:
    from core.errors import Ok, Result, AppError, schedule_misconfigured

    def validate(schedule) -> Result[None, AppError]:
        if schedule.num_sentences <= 0:
            return schedule_misconfigured("num_sentences", "batch size must be positive")
        return Ok(None)
"""
from .types import (
    Result,
    Ok,
    Err,
    AppError,
    ErrorCode,
    ErrorContext,
    sequence_results,
)

from .builders import (
    validation_error,
    required_field,
    invalid_format,
    out_of_range,
    schedule_misconfigured,
    course_misconfigured,
    db_error,
    not_found,
    duplicate_key,
    db_connection_failed,
    transaction_failed,
    business_error,
    state_conflict,
    internal_error,
)

from .boundaries import DatabaseErrorMapper

from .handlers import (
    AppErrorException,
    register_error_handlers,
    result_to_response,
    raise_result,
)

__all__ = [
    "Result",
    "Ok",
    "Err",
    "AppError",
    "ErrorCode",
    "ErrorContext",
    "sequence_results",
    "validation_error",
    "required_field",
    "invalid_format",
    "out_of_range",
    "schedule_misconfigured",
    "course_misconfigured",
    "db_error",
    "not_found",
    "duplicate_key",
    "db_connection_failed",
    "transaction_failed",
    "business_error",
    "state_conflict",
    "internal_error",
    "DatabaseErrorMapper",
    "AppErrorException",
    "register_error_handlers",
    "result_to_response",
    "raise_result",
]
