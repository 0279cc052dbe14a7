import time
from typing import Any

from app.exceptions import DeadlineExceededException


class Deadline:
    """Point in time after which storage calls for a request must not start.

    Measured on the monotonic clock. A deadline of ``None`` seconds never
    expires.
    """

    def __init__(self, seconds: float | None = None) -> None:
        self._expires_at = None if seconds is None else time.monotonic() + seconds

    @classmethod
    def from_lambda_context(cls, context: Any, margin_ms: int = 0) -> "Deadline":
        remaining_ms = context.get_remaining_time_in_millis() - margin_ms
        return cls(max(remaining_ms, 0) / 1000)

    @classmethod
    def never(cls) -> "Deadline":
        return cls(None)

    @property
    def remaining(self) -> float | None:
        if self._expires_at is None:
            return None
        return max(self._expires_at - time.monotonic(), 0.0)

    @property
    def expired(self) -> bool:
        return self._expires_at is not None and time.monotonic() >= self._expires_at

    def check(self, operation: str) -> None:
        if self.expired:
            raise DeadlineExceededException(
                f"Request deadline exceeded before {operation}"
            )
