"""Uniform result type returned by every backend-facing service call.

A failed call is either a backend rejection (``degraded=False``) or a
transport failure where the backend could not be reached
(``degraded=True``). Callers branch on ``success`` and never see the
underlying httpx exception.
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    success: bool
    data: T | None = None
    message: str | None = None
    degraded: bool = False
    status_code: int | None = None

    @classmethod
    def ok(cls, data: T | None = None, message: str | None = None) -> "ServiceResult[T]":
        return cls(success=True, data=data, message=message)

    @classmethod
    def failure(cls, message: str, status_code: int | None = None) -> "ServiceResult[T]":
        return cls(success=False, message=message, status_code=status_code)

    @classmethod
    def unavailable(cls, message: str) -> "ServiceResult[T]":
        """The backend could not be reached at all."""
        return cls(success=False, message=message, degraded=True)

    def map(self, fn) -> "ServiceResult":
        """Apply ``fn`` to the payload of a successful result."""
        if not self.success:
            return self
        return ServiceResult(
            success=True,
            data=fn(self.data),
            message=self.message,
            status_code=self.status_code,
        )
