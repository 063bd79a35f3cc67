"""Structured logging utilities with correlation ID support.

Every checkout attempt gets its own correlation ID so the token read, the
session request and the sheet presentation of one attempt can be grepped
together.

Usage:
    from agromart.utils.logging import get_logger, set_correlation_id

    set_correlation_id()  # at the start of an attempt
    logger = get_logger(__name__)
    log_checkout_step(logger, "request_session", product_id="p1", amount_minor=2500)
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

# Context variable for correlation ID - async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def generate_correlation_id() -> str:
    """Generate a new correlation ID.

    Returns:
        UUID-based correlation ID string
    """
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter that prefixes every line with the correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)
        return f"[{record.correlation_id}] {base}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def log_checkout_step(
    logger: logging.Logger,
    step: str,
    *,
    product_id: str | None = None,
    session_id: str | None = None,
    amount_minor: int | None = None,
    state: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a checkout step with structured context.

    Never pass tokens, client secrets or ephemeral keys here.

    Args:
        logger: Logger instance
        step: Step name (e.g., "acquire_token", "request_session", "present_sheet")
        product_id: Product being purchased
        session_id: Local payment session ID if one was issued
        amount_minor: Amount in minor currency units
        state: Checkout state after the step
        error: Error message if the step failed
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"step": step}

    if product_id:
        context["product_id"] = product_id
    if session_id:
        context["session_id"] = session_id
    if amount_minor is not None:
        context["amount_minor"] = amount_minor
    if state:
        context["state"] = state
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Checkout step: {step}"]
    for key, value in context.items():
        if key != "step":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    else:
        logger.info(message, extra=context)
