"""Reward ledger exceptions.

Each error carries the HTTP status it maps to; the global error handler
renders them as ``{"detail": message}``.
"""

from __future__ import annotations


class LedgerError(Exception):
    """Base class for reward ledger failures reported to the caller."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidAward(LedgerError):
    """Malformed input: non-positive amount, empty action, bad answers."""

    status_code = 400


class UnknownUser(LedgerError):
    status_code = 404


class UnknownTarget(LedgerError):
    """The quiz, post, poll or memory being acted on does not exist."""

    status_code = 404


class AlreadyAwarded(LedgerError):
    """The action was already performed (per source, or today for daily actions)."""

    status_code = 409
