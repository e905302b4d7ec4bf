"""
Domain exceptions raised by the billing services.

Each carries the HTTP status it is reported with; the message is what the
client sees in the ``{"error": ...}`` body.
"""
from typing import Optional


class PluriDeskError(Exception):
    """Base exception for all PluriDesk errors"""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(PluriDeskError):
    """Input rejected before touching the database"""
    status_code = 400


class NotFoundError(PluriDeskError):
    """Record missing or owned by someone else (deliberately indistinguishable)"""
    status_code = 404


class IllegalTransition(PluriDeskError):
    """Status change not allowed by the document lifecycle"""
    status_code = 409

    def __init__(self, kind: str, current: str, target: str, message: Optional[str] = None):
        super().__init__(message or f"Cannot change {kind} status from {current} to {target}")
        self.kind = kind
        self.current = current
        self.target = target


class OperationFailed(PluriDeskError):
    """A multi-step business operation failed and was rolled back"""
    status_code = 500
