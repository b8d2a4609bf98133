"""Validation result container used by option parsers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


@dataclass(frozen=True)
class ValidationResult(Generic[T]):
    """Result container for validation routines.

    Parameters:
        value: Parsed value when valid.
        error: Error message when invalid.
    """

    value: Optional[T]
    error: Optional[str]

    def is_valid(self) -> bool:
        """Return True when the validation result is valid.

        Returns:
            True if the result includes a value and no error.
        """

        return self.value is not None and self.error is None

    @classmethod
    def ok(cls, value: T) -> "ValidationResult[T]":
        """Build a successful result.

        Parameters:
            value: Parsed value.

        Returns:
            ValidationResult carrying the value.
        """

        return cls(value=value, error=None)

    @classmethod
    def fail(cls, error: str) -> "ValidationResult[T]":
        """Build a failed result.

        Parameters:
            error: Human-readable error message.

        Returns:
            ValidationResult carrying the error.
        """

        return cls(value=None, error=error)


def validate_non_negative_int(raw_value: object, label: str) -> ValidationResult[int]:
    """Validate a non-negative integer option value.

    Parameters:
        raw_value: Raw value read from the descriptor.
        label: Label used in error messages.

    Returns:
        ValidationResult with the integer or an error message.
    """

    if isinstance(raw_value, bool) or not isinstance(raw_value, int):
        return ValidationResult.fail(f"{label} must be an integer.")
    if raw_value < 0:
        return ValidationResult.fail(f"{label} must be >= 0.")
    return ValidationResult.ok(raw_value)
