"""
Domain exceptions raised by handlers and mapped to HTTP responses in main.py.
"""

from fastapi import status


class CCredError(Exception):
    """Base exception for all registry errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details


class ValidationError(CCredError):
    """Missing or malformed required input."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(CCredError):
    """A referenced record does not exist."""

    status_code = status.HTTP_404_NOT_FOUND


class StateConflictError(CCredError):
    """
    The record exists but is not in a state that permits the operation,
    e.g. issuing a credit from a verification that is not approved.
    """

    status_code = status.HTTP_400_BAD_REQUEST
