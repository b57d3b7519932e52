from __future__ import annotations


class SiteStoreError(RuntimeError):
    """Base class for failures of a remote store call."""

    def __init__(self, message: str, *, code: str | None = None) -> None:
        super().__init__(message)
        self.code = code


class ValidationError(SiteStoreError):
    """Input was malformed and rejected by the backend."""


class PayloadError(ValidationError):
    """A stored card payload could not be decoded or validated."""


class NotFoundError(SiteStoreError):
    """Identifier unknown or not owned by the caller."""


class AuthorizationError(SiteStoreError):
    """Session missing, invalid or expired."""


class BackendUnavailable(SiteStoreError):
    """Transport or network failure reaching the backend."""


__all__ = [
    "AuthorizationError",
    "BackendUnavailable",
    "NotFoundError",
    "PayloadError",
    "SiteStoreError",
    "ValidationError",
]
