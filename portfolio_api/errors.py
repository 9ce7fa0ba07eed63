"""
Error types raised by the feed and visitor services.
Each maps to an HTTP status through the exception handler in main.py.
"""
from fastapi import status
from typing import Any


class FeedError(Exception):
    """Base class for structured service failures."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Feed error"

    def __init__(self, detail: Any = None):
        self.detail = detail if detail is not None else self.error
        super().__init__(str(self.detail))


class NotFoundError(FeedError):
    status_code = status.HTTP_404_NOT_FOUND
    error = "Image not found"


class InvalidInputError(FeedError):
    status_code = status.HTTP_400_BAD_REQUEST
    error = "Invalid input"


class ConflictError(FeedError):
    """The feed changed since the caller read it."""
    status_code = status.HTTP_409_CONFLICT
    error = "Feed revision conflict"


class PersistenceError(FeedError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    error = "Persistence failure"
