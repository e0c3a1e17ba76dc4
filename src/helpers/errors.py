"""Exceptions raised by the global ban helpers and the generic error reporter."""

import logging

import sentry_sdk
from discord import HTTPException

logger = logging.getLogger(__name__)

# Discord errors that only mean a guild has not configured the bot properly.
SWALLOWED_ERRORS = (
    "Missing Permissions",
    "Missing Access",
    "Unknown Channel",
    "Unknown Ban",
    "exceeds maximum size",
)


class GbanError(Exception):
    """Base class for global ban errors that carry a user facing message."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PreconditionFailure(GbanError):
    """The operation was refused before any remote call or write was made."""


class LockoutTimeout(GbanError):
    """A single-flight operation waited longer than its failsafe allows."""


def is_swallowed(error: BaseException) -> bool:
    """Whether the error is known noise that should not reach the error tracker."""
    if isinstance(error, HTTPException):
        return any(text in str(error.text) for text in SWALLOWED_ERRORS)
    return any(text in str(error) for text in SWALLOWED_ERRORS)


def report_error(error: BaseException, **context) -> None:
    """Log an error that was caught so the current operation could continue."""
    if is_swallowed(error):
        logger.debug(f"Ignoring expected error: {error}", extra=context)
        return

    logger.error("Unexpected error while continuing operation", exc_info=error, extra=context)
    sentry_sdk.capture_exception(error)
