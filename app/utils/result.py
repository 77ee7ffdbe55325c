"""
Result value for collaborator calls
Store and learning-store calls return a Result instead of raising, so the
caller decides at the call site what a failure degrades to.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Optional[T] = None) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: str) -> "Result[T]":
        return cls(error=error or "unknown error")

    def valueOr(self, default: T) -> T:
        """Value on success, `default` on failure"""
        return self.value if self.ok and self.value is not None else default
