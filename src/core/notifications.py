"""Workflow boundary: turn outcomes and errors into user-visible notifications."""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Dict

from core.errors import (
    AccessDeniedError,
    EmptyCollectionError,
    InvalidFormatError,
    InvalidRecordError,
    RepoManagerError,
    ValidationError,
)
from core.log import get_logger, mask_sensitive_data
from core.models import Notification

logger = get_logger("workflows")


def success(message: str) -> Notification:
    return Notification(title="Success", message=message, severity="success")


def warning(message: str) -> Notification:
    return Notification(title="Warning", message=message, severity="warning")


def error_notification(err: RepoManagerError) -> Notification:
    message = mask_sensitive_data(str(err))
    if isinstance(err, EmptyCollectionError):
        return warning(message)
    if isinstance(err, ValidationError):
        return Notification(title="Validation Error", message=message, severity="error")
    if isinstance(err, (InvalidFormatError, InvalidRecordError)):
        return Notification(title="Error", message=f"Invalid file format: {message}", severity="error")
    if isinstance(err, AccessDeniedError):
        return Notification(title="Access Denied", message=message, severity="error")
    return Notification(title="Error", message=message, severity="error")


async def guard(action: Callable[[], Awaitable[Dict[str, Any]]]) -> Dict[str, Any]:
    """Run a workflow and return its payload, or an error notification if it fails.

    Only manager errors are converted; anything else is a bug and propagates.
    """
    try:
        return await action()
    except RepoManagerError as e:
        logger.info("Workflow failed: %s: %s", type(e).__name__, mask_sensitive_data(str(e)))
        return {"notification": error_notification(e).to_dict()}
