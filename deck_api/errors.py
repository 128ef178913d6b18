"""
Error types shared by the backend clients and the HTTP layer.
"""

from __future__ import annotations


class BackendError(Exception):
    """A database or storage call failed.

    The message is whatever the backend reported. Callers treat it as an
    opaque string and surface it unchanged.
    """

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @classmethod
    def from_exception(cls, exc: BaseException) -> "BackendError":
        # SQLAlchemy wraps the driver error in `orig`; prefer the driver text.
        orig = getattr(exc, "orig", None)
        return cls(str(orig) if orig is not None else str(exc))
