"""
Utility functions for logging upstream failures without leaking capability keys.
"""

import logging
from typing import Optional

from capability_proxy.utils import mask_token


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def format_exception_message(exception: Optional[Exception]) -> str:
    """
    Format an exception as ``TypeName: message``.

    httpx transport errors frequently carry an empty message (e.g. a bare
    ``ReadTimeout``), so the type name is always included.
    """
    if exception is None:
        return "None"
    message = _safe_str(exception)
    if not message:
        return type(exception).__name__
    return f"{type(exception).__name__}: {message}"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
    secret: Optional[str] = None,
) -> None:
    """
    Log an exception with its type and message.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Capability-Proxy]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
        secret: A value (typically the capability key) masked out of the message;
            when given, the traceback is omitted
    """
    message = f"{prefix} {format_exception_message(exception)}"
    exc_info = exception
    if secret:
        message = mask_token(message, secret)
        # The traceback repeats the unmasked message
        exc_info = None
    try:
        logger.log(level, message, exc_info=exc_info)
    except Exception:
        # Logging must never replace the original failure
        logger.log(level, f"{prefix} Exception (logging details failed)")
