"""Error taxonomy shared by the service and API layers."""
from __future__ import annotations

from typing import Optional


class AwardScopeError(Exception):
    """Base class for errors raised by AwardScope."""


class ValidationError(AwardScopeError):
    """A required request input is missing or unusable."""


class UpstreamError(AwardScopeError):
    """The USAspending API call failed or returned unusable data."""

    def __init__(self, message: str, *, endpoint: str = "", status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.endpoint = endpoint
        self.status_code = status_code

    def __str__(self) -> str:
        base = super().__str__()
        if self.status_code is not None:
            return f"{base} (endpoint={self.endpoint}, status={self.status_code})"
        if self.endpoint:
            return f"{base} (endpoint={self.endpoint})"
        return base


__all__ = ["AwardScopeError", "ValidationError", "UpstreamError"]
