"""Error taxonomy shared by every compogen module.

- ValidationError: a structural or argument error at the point of violation
  (wrong array length, index out of range, missing object).
- ConfigurationError: an invalid parameter range or an incompatible
  operator/representation/pass combination, raised before any generation runs.
- InternalError: an exhaustive branch fell through; always a library bug.
"""

from __future__ import annotations

from typing import Any


class ValidationError(ValueError):
    """Error with a machine-readable type and structured details.

    Args:
        error_type: Short identifier such as ``"invalid_length"``
        message: Human readable message
        **details: Additional context kept on ``self.details``
    """

    def __init__(self, error_type: str, message: str, **details: Any) -> None:
        super().__init__(message)
        self.error_type = error_type
        self.message = message
        self.details = details

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.error_type}] {self.message}"
        extra = ", ".join(f"{k}={v!r}" for k, v in sorted(self.details.items()))
        return f"[{self.error_type}] {self.message} ({extra})"


class ConfigurationError(ValidationError):
    """Invalid or incompatible configuration detected at assignment time."""


class InternalError(RuntimeError):
    """Unreachable state; indicates a bug inside compogen."""


def require(value: Any, name: str) -> Any:
    """Return ``value`` or raise ValidationError when it is None."""
    if value is None:
        raise ValidationError("null_argument", f"{name} cannot be None", argument=name)
    return value


__all__ = ["ValidationError", "ConfigurationError", "InternalError", "require"]
