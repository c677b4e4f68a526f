"""Structured logging for recurrence engine fallbacks."""

import logging
from typing import Any

from bondicar.utils.metrics import metrics

logger = logging.getLogger(__name__)


class StructuredEngineLogger:
    """Structured logger for degraded-but-defined engine results."""

    def log_fallback(self, component: str, reason: str, **fields: Any) -> None:
        """Log an engine fallback with structured data and count it."""
        log_data: dict[str, Any] = {
            "component": component,
            "reason": reason,
        }
        log_data.update(fields)

        metrics.inc_fallback(component, reason)
        logger.warning(
            f"Recurrence fallback: {component} - {reason}", extra={"structured": log_data}
        )


engine_logger = StructuredEngineLogger()
