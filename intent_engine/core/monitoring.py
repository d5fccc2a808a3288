"""
Monitoring and Tracing Configuration Module.

This module provides optional integration with Pydantic Logfire for tracing
strategy executions (start, pause, resume, completion and rollback).

Monitoring is off unless ``LOGFIRE_ENABLED`` is set and a ``LOGFIRE_TOKEN`` is
configured. While it is off every helper here is a no-op, so engine code can
call them unconditionally.
"""

import logging
from typing import Any, Optional

from .config import Settings, settings

logger = logging.getLogger(__name__)

_logfire_active = False


def initialize_logfire(config: Optional[Settings] = None) -> bool:
    """
    Initialize Pydantic Logfire for monitoring and tracing.

    Args:
        config: Settings to read the Logfire options from; the module-level
            settings when omitted.

    Returns:
        True when Logfire was configured and strategy events will be emitted.
    """
    global _logfire_active

    lf = (config or settings).logfire
    if not lf.enabled:
        logger.info("Logfire monitoring is disabled. Set LOGFIRE_ENABLED=true to enable.")
        _logfire_active = False
        return False

    if not lf.token:
        logger.warning(
            "Logfire is enabled but LOGFIRE_TOKEN is not set. "
            "Monitoring will not work. Set LOGFIRE_TOKEN to enable Logfire."
        )
        _logfire_active = False
        return False

    try:
        import logfire

        logfire.configure(
            token=lf.token,
            service_name=lf.service_name,
            environment=lf.environment,
        )
    except Exception as e:
        logger.error(f"Failed to initialize Logfire: {e}", exc_info=True)
        _logfire_active = False
        return False

    logger.info(f"Logfire monitoring initialized: environment={lf.environment}, service={lf.service_name}")
    _logfire_active = True
    return True


def is_logfire_active() -> bool:
    return _logfire_active


def log_strategy_event(event: str, **attributes: Any) -> None:
    """
    Emit a strategy lifecycle record to Logfire.

    Args:
        event: Short event name, e.g. ``"strategy paused"``.
        **attributes: Structured attributes (step index, error code, ...).
            Parameter values must not be passed here; they may be sensitive.
    """
    if not _logfire_active:
        return
    try:
        import logfire

        logfire.info(event, **attributes)
    except Exception:
        logger.debug(f"Could not log strategy event to Logfire: {event}")
