"""Result Types for Error Propagation

Ok/Err containers carrying typed AppErrors. Engines return Results for
recoverable failures; boundaries convert them to exceptions or responses.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Generic, Iterator, NoReturn, TypeVar, Union, final
from uuid import uuid4

T = TypeVar("T")
U = TypeVar("U")
E = TypeVar("E", bound="AppError")


class ErrorCode(Enum):
    """Error code taxonomy.

    E2xxx: Validation and configuration errors
    E4xxx: Database / lookup errors
    E5xxx: Business logic errors
    E9xxx: Internal/Unknown errors
    """
    # Validation (E2xxx)
    E2000_VALIDATION_GENERIC = 2000
    E2001_REQUIRED_FIELD_MISSING = 2001
    E2002_INVALID_FORMAT = 2002
    E2003_OUT_OF_RANGE = 2003
    E2030_SCHEDULE_MISCONFIGURED = 2030
    E2031_COURSE_MISCONFIGURED = 2031

    # Database (E4xxx)
    E4000_DATABASE_GENERIC = 4000
    E4001_CONNECTION_FAILED = 4001
    E4003_TRANSACTION_FAILED = 4003
    E4010_NOT_FOUND = 4010
    E4011_DUPLICATE_KEY = 4011

    # Business Logic (E5xxx)
    E5000_BUSINESS_GENERIC = 5000
    E5002_STATE_CONFLICT = 5002

    # Internal (E9xxx)
    E9000_INTERNAL_GENERIC = 9000
    E9001_UNEXPECTED_ERROR = 9001

    @property
    def http_status(self) -> int:
        """Map error code to HTTP status."""
        code = self.value
        if 2000 <= code < 2100:
            return 400
        if code == 4010:
            return 404
        if code == 4011:
            return 409
        if 4000 <= code < 4100:
            return 503
        if 5000 <= code < 5100:
            return 409
        return 500

    @property
    def category(self) -> str:
        code = self.value
        if 2000 <= code < 3000:
            return "validation"
        if 4000 <= code < 5000:
            return "database"
        if 5000 <= code < 6000:
            return "business"
        return "internal"


@dataclass(frozen=True, slots=True)
class ErrorContext:
    """Immutable context for error tracing."""
    correlation_id: str = field(default_factory=lambda: str(uuid4())[:8])
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    origin: str = ""
    request_id: str | None = None


@dataclass(frozen=True, slots=True)
class AppError:
    """Application error with code, message, metadata and tracing context."""
    code: ErrorCode
    message: str
    context: ErrorContext = field(default_factory=ErrorContext)
    metadata: dict = field(default_factory=dict)
    cause: Exception | None = None

    def with_context(self, **kwargs) -> AppError:
        """Create new error with updated context."""
        new_ctx = ErrorContext(
            correlation_id=kwargs.get("correlation_id") or self.context.correlation_id,
            timestamp=self.context.timestamp,
            origin=kwargs.get("origin", self.context.origin),
            request_id=kwargs.get("request_id", self.context.request_id),
        )
        return AppError(
            code=self.code,
            message=self.message,
            context=new_ctx,
            metadata=self.metadata,
            cause=self.cause,
        )

    def with_metadata(self, **kwargs) -> AppError:
        return AppError(
            code=self.code,
            message=self.message,
            context=self.context,
            metadata={**self.metadata, **kwargs},
            cause=self.cause,
        )

    def to_dict(self) -> dict:
        """Serialize error for API responses."""
        return {
            "error": {
                "code": self.code.name,
                "code_num": self.code.value,
                "message": self.message,
                "category": self.code.category,
                "correlation_id": self.context.correlation_id,
                "timestamp": self.context.timestamp.isoformat(),
                "metadata": self.metadata,
            }
        }

    def __str__(self) -> str:
        return f"[{self.code.name}] {self.message} (correlation_id={self.context.correlation_id})"


@final
@dataclass(frozen=True, slots=True)
class Ok(Generic[T]):
    """Success variant of Result."""
    value: T

    def is_ok(self) -> bool:
        return True

    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: T) -> T:
        return self.value

    def map(self, f: Callable[[T], U]) -> Result[U, AppError]:
        return Ok(f(self.value))

    def and_then(self, f: Callable[[T], Result[U, AppError]]) -> Result[U, AppError]:
        """Chain operations that may fail."""
        return f(self.value)

    def __iter__(self) -> Iterator[T]:
        yield self.value


@final
@dataclass(frozen=True, slots=True)
class Err(Generic[E]):
    """Failure variant of Result."""
    error: E

    def is_ok(self) -> bool:
        return False

    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise ValueError(f"Called unwrap on Err: {self.error}")

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_err(self) -> E:
        return self.error

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        return self  # type: ignore

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return self  # type: ignore

    def __iter__(self) -> Iterator:
        return iter([])


Result = Union[Ok[T], Err[E]]


def sequence_results(results: list[Result[T, AppError]]) -> Result[list[T], AppError]:
    """Sequence Results, failing fast on the first error."""
    values: list[T] = []

    for r in results:
        match r:
            case Ok(v):
                values.append(v)
            case Err(e):
                return Err(e)

    return Ok(values)

