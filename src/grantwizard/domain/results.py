"""Typed result envelopes returned by workflow operations."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(slots=True)
class CommandResult:
    """Common workflow response payload."""

    success: bool
    code: str = "ok"
    message: str = ""
    data: dict[str, Any] = field(default_factory=dict)

    def as_json_dict(self) -> dict[str, Any]:
        """Return a stable machine-readable structure."""
        return {
            "success": self.success,
            "code": self.code,
            "message": self.message,
            "data": self.data,
        }


@dataclass(slots=True, frozen=True)
class GuardResult:
    """Outcome of a stage transition guard. Blocked transitions carry a user message."""

    allowed: bool
    message: str = ""

    @classmethod
    def allow(cls) -> "GuardResult":
        return cls(allowed=True)

    @classmethod
    def block(cls, message: str) -> "GuardResult":
        return cls(allowed=False, message=message)
