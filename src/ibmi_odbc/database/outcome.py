"""Tagged success/failure values returned by the data-access facade."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

from .errors import DatabaseError, ErrorKind

T = TypeVar("T")


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Result of a facade operation.

    A failed outcome still carries a ``value``: the sentinel callers of the
    sentinel-style API expect (None, False, -2, "**ERROR" or "").
    """

    value: T
    kind: ErrorKind | None = None
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.kind is None

    def __bool__(self) -> bool:
        return self.ok

    def unwrap(self) -> T:
        """Return the value of a successful outcome, raise otherwise."""
        if self.kind is not None:
            raise DatabaseError(f"{self.kind.value}: {self.message}")
        return self.value

    @classmethod
    def success(cls, value: T, message: str = "") -> Outcome[T]:
        return cls(value=value, message=message)

    @classmethod
    def failure(cls, kind: ErrorKind, message: str, sentinel: T) -> Outcome[T]:
        return cls(value=sentinel, kind=kind, message=message)
