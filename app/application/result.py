"""
Typed success/failure envelope returned by every use case.

Use cases never raise for business-rule failures: they return ``Ok``
with a value or ``Err`` with an ``AppError``. Only the interface layer
turns an error kind into a transport status code.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, Literal, Optional, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    """Classification of a use-case failure."""

    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INFRASTRUCTURE = "infrastructure"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class AppError:
    """A failure returned from a use case.

    Attributes:
        kind: Error classification.
        message: Human-readable summary.
        details: Field name to message map (validation errors).
        resource: Kind of entity that was looked up (not-found errors).
        id: Identifier that was looked up (not-found errors).
    """

    kind: ErrorKind
    message: str
    details: dict[str, str] = field(default_factory=dict)
    resource: Optional[str] = None
    id: Optional[str] = None

    @classmethod
    def validation(
        cls, message: str, details: Optional[dict[str, str]] = None
    ) -> "AppError":
        return cls(ErrorKind.VALIDATION, message, details=dict(details or {}))

    @classmethod
    def not_found(cls, resource: str, id: str) -> "AppError":
        return cls(
            ErrorKind.NOT_FOUND,
            f"{resource.capitalize()} not found: {id}",
            resource=resource,
            id=id,
        )

    @classmethod
    def conflict(cls, message: str) -> "AppError":
        return cls(ErrorKind.CONFLICT, message)

    @classmethod
    def infrastructure(cls, message: str) -> "AppError":
        return cls(ErrorKind.INFRASTRUCTURE, message)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying the use-case output."""

    value: T
    ok: Literal[True] = True


@dataclass(frozen=True)
class Err:
    """Failed outcome carrying an AppError."""

    error: AppError
    ok: Literal[False] = False


Result = Union[Ok[T], Err]
