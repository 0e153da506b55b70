"""
Explicit success/failure value returned by external service clients.

Vendor calls never raise into the session flow. They return a ServiceResult
carrying either the value or the typed error, plus the fallback the caller
may use in place of the value.
"""
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from src.exceptions import ExternalServiceError

T = TypeVar("T")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    value: Optional[T] = None
    error: Optional[ExternalServiceError] = None
    fallback: Optional[T] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ExternalServiceError, fallback: Optional[T] = None) -> "ServiceResult[T]":
        return cls(error=error, fallback=fallback)

    def unwrap_or_fallback(self) -> Optional[T]:
        return self.value if self.ok else self.fallback
