from __future__ import annotations
from dataclasses import dataclass
from typing import Any


class BreadboardError(RuntimeError):
    """Base error of the library."""


@dataclass(slots=True)
class BreadboardAPIError(BreadboardError):
    """
    Non-2xx response from the board server.

    The board server answers errors either as plain text or as JSON with one of
    these shapes:
    {"error": "..."}
    {"error": {"message": "..."}}
    {"message": "..."}

    ``message`` always starts with the failed operation, e.g.
    ``"Failed to run board: Not Found"``.
    """
    status_code: int
    message: str
    body: str | None = None

    reason: str | None = None
    url: str | None = None

    def __str__(self) -> str:
        parts = [f"BreadboardAPIError(status_code={self.status_code}"]
        parts.append(f", message={self.message!r}")
        if self.url:
            parts.append(f", url={self.url!r}")
        if self.body:
            parts.append(f", body={len(self.body)} chars")
        parts.append(")")
        return "".join(parts)

    def __repr__(self) -> str:
        return (
            f"BreadboardAPIError("
            f"status_code={self.status_code}, "
            f"message={self.message!r}, "
            f"reason={self.reason!r}, "
            f"url={self.url!r}, "
            f"body={'...' if self.body else None})"
        )

    def to_dict(self) -> dict[str, Any]:
        """Error as a dict, for structured logging."""
        return {
            "status_code": self.status_code,
            "message": self.message,
            "reason": self.reason,
            "url": self.url,
            "body": self.body,
        }

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_server_error(self) -> bool:
        return 500 <= self.status_code < 600

    @property
    def is_auth_error(self) -> bool:
        """True for 401 (bad key) and 403 (board not shared with this key)."""
        return self.status_code in (401, 403)

    @property
    def is_not_found(self) -> bool:
        return self.status_code == 404


class BreadboardTransportError(BreadboardError):
    """The request never produced a response (connection refused, timeout, ...)."""
