"""Domain-Specific Error Builders

Constructors for typed errors. Each builder returns an Err wrapping an
AppError with the appropriate code and context.
"""
from .types import AppError, ErrorCode, ErrorContext, Err


# =============================================================================
# Validation / Configuration Errors (E2xxx)
# =============================================================================

def validation_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E2000_VALIDATION_GENERIC,
    field: str | None = None,
    value: str | None = None,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create validation error."""
    meta = {"field": field, "value": value, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
    ))


def required_field(field: str, origin: str = "") -> Err[AppError]:
    return validation_error(
        f"Required field '{field}' is missing",
        code=ErrorCode.E2001_REQUIRED_FIELD_MISSING,
        field=field,
        origin=origin,
    )


def invalid_format(
    field: str, expected: str, got: str | None = None, origin: str = ""
) -> Err[AppError]:
    msg = f"Invalid format for '{field}': expected {expected}"
    if got:
        msg += f", got '{got}'"
    return validation_error(
        msg,
        code=ErrorCode.E2002_INVALID_FORMAT,
        field=field,
        expected=expected,
        origin=origin,
    )


def out_of_range(
    field: str,
    value: int | float,
    min_val: int | float | None = None,
    max_val: int | float | None = None,
    origin: str = "",
) -> Err[AppError]:
    bounds = []
    if min_val is not None:
        bounds.append(f">= {min_val}")
    if max_val is not None:
        bounds.append(f"<= {max_val}")
    return validation_error(
        f"Value {value} for '{field}' out of range ({', '.join(bounds)})",
        code=ErrorCode.E2003_OUT_OF_RANGE,
        field=field,
        value=str(value),
        min=min_val,
        max=max_val,
        origin=origin,
    )


def schedule_misconfigured(field: str, reason: str, origin: str = "") -> Err[AppError]:
    """Schedule cannot drive advancement (e.g. non-positive batch size)."""
    return validation_error(
        f"Schedule misconfigured: {reason}",
        code=ErrorCode.E2030_SCHEDULE_MISCONFIGURED,
        field=field,
        origin=origin,
    )


def course_misconfigured(reason: str, origin: str = "", **metadata) -> Err[AppError]:
    """Course has no usable languages or packs."""
    return validation_error(
        f"Course misconfigured: {reason}",
        code=ErrorCode.E2031_COURSE_MISCONFIGURED,
        origin=origin,
        **metadata,
    )


# =============================================================================
# Database / Lookup Errors (E4xxx)
# =============================================================================

def db_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E4000_DATABASE_GENERIC,
    entity: str | None = None,
    origin: str = "",
    cause: Exception | None = None,
    **metadata,
) -> Err[AppError]:
    """Create database/lookup error."""
    meta = {"entity": entity, **metadata}
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata={k: v for k, v in meta.items() if v is not None},
        cause=cause,
    ))


def not_found(entity: str, identifier: object = None, origin: str = "") -> Err[AppError]:
    msg = f"{entity} not found"
    if identifier is not None:
        msg += f": {identifier}"
    return db_error(
        msg,
        code=ErrorCode.E4010_NOT_FOUND,
        entity=entity,
        identifier=str(identifier) if identifier is not None else None,
        origin=origin,
    )


def duplicate_key(entity: str, field: str, value: str, origin: str = "") -> Err[AppError]:
    return db_error(
        f"{entity} with {field}='{value}' already exists",
        code=ErrorCode.E4011_DUPLICATE_KEY,
        entity=entity,
        field=field,
        value=value,
        origin=origin,
    )


def db_connection_failed(reason: str = "", origin: str = "") -> Err[AppError]:
    msg = "Database connection failed"
    if reason:
        msg += f": {reason}"
    return db_error(msg, code=ErrorCode.E4001_CONNECTION_FAILED, origin=origin)


def transaction_failed(reason: str = "", origin: str = "") -> Err[AppError]:
    msg = "Transaction failed"
    if reason:
        msg += f": {reason}"
    return db_error(msg, code=ErrorCode.E4003_TRANSACTION_FAILED, origin=origin)


# =============================================================================
# Business Logic Errors (E5xxx)
# =============================================================================

def business_error(
    message: str,
    *,
    code: ErrorCode = ErrorCode.E5000_BUSINESS_GENERIC,
    origin: str = "",
    **metadata,
) -> Err[AppError]:
    """Create business logic error."""
    return Err(AppError(
        code=code,
        message=message,
        context=ErrorContext(origin=origin),
        metadata=metadata,
    ))


def state_conflict(
    entity: str, current_state: str, attempted_action: str, origin: str = ""
) -> Err[AppError]:
    return business_error(
        f"Cannot {attempted_action} {entity} in state '{current_state}'",
        code=ErrorCode.E5002_STATE_CONFLICT,
        entity=entity,
        current_state=current_state,
        attempted_action=attempted_action,
        origin=origin,
    )


# =============================================================================
# Internal Errors (E9xxx)
# =============================================================================

def internal_error(
    message: str = "An internal error occurred",
    origin: str = "",
    cause: Exception | None = None,
) -> Err[AppError]:
    return Err(AppError(
        code=ErrorCode.E9000_INTERNAL_GENERIC,
        message=message,
        context=ErrorContext(origin=origin),
        cause=cause,
    ))
