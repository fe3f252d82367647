"""
Structured logging configuration for CROPFLUX.

Provides:
- ComponentLogger: Structured logger with context binding
- get_logger: Get a logger for a specific component
- configure_logging: Configure logging output format

Physics kernels never log. The validated solver wrappers log solver
diagnostics (e.g. an iteration cap being reached) at DEBUG level so callers
that want stricter convergence guarantees can surface them.

Loggers wrap the standard library "cropflux" hierarchy, which carries only a
NullHandler until configure_logging is called, so an unconfigured package
writes nothing.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Dict, Optional

import structlog


class ComponentLogger:
    """
    Structured logger for solver components.

    Example:
        log = ComponentLogger("canopy")
        log = log.bind(layer=3)

        log.debug("iteration_cap_reached", solver="c3photo", iterations=50)
    """

    def __init__(
        self,
        component: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        """
        Initialize the logger.

        Args:
            component: Component name (e.g., "canopy", "soil")
            context: Initial context bindings
        """
        self._component = component
        self._context = context or {}
        self._logger = structlog.wrap_logger(logging.getLogger(f"cropflux.{component}"))
        if context:
            self._logger = self._logger.bind(**context)

    def bind(self, **kwargs: Any) -> "ComponentLogger":
        """
        Create a new logger with additional context bindings.

        Args:
            **kwargs: Key-value pairs to bind to the logger

        Returns:
            New ComponentLogger with bound context
        """
        new_context = {**self._context, **kwargs}
        return ComponentLogger(self._component, new_context)

    def debug(self, event: str, **kwargs: Any) -> None:
        """Log debug message."""
        self._logger.debug(event, component=self._component, **kwargs)

    def info(self, event: str, **kwargs: Any) -> None:
        """Log info message."""
        self._logger.info(event, component=self._component, **kwargs)

    def warning(self, event: str, **kwargs: Any) -> None:
        """Log warning message."""
        self._logger.warning(event, component=self._component, **kwargs)

    def error(self, event: str, **kwargs: Any) -> None:
        """Log error message."""
        self._logger.error(event, component=self._component, **kwargs)


def get_logger(component: str) -> ComponentLogger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "canopy", "soil", "step")

    Returns:
        ComponentLogger instance
    """
    return ComponentLogger(component)


def configure_logging(
    level: str = "INFO",
    format: str = "json",
    output: str = "stderr",
) -> None:
    """
    Configure logging output.

    Args:
        level: Log level ("DEBUG", "INFO", "WARNING", "ERROR")
        format: Output format ("json", "console")
        output: Output destination ("stderr", "stdout", or file path)

    Example:
        # Surface solver diagnostics during development
        configure_logging(level="DEBUG", format="console")
    """
    level_num = getattr(logging, level.upper(), logging.INFO)

    if output == "stderr":
        handler = logging.StreamHandler(sys.stderr)
    elif output == "stdout":
        handler = logging.StreamHandler(sys.stdout)
    else:
        handler = logging.FileHandler(output)

    handler.setFormatter(logging.Formatter("%(message)s"))

    root_logger = logging.getLogger("cropflux")
    root_logger.setLevel(level_num)
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    if format == "json":
        renderer = structlog.processors.JSONRenderer()
        stamper = structlog.processors.TimeStamper(fmt="iso")
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)
        stamper = structlog.processors.TimeStamper(fmt="%H:%M:%S")

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            stamper,
            renderer,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


logging.getLogger("cropflux").addHandler(logging.NullHandler())

canopy_logger = get_logger("canopy")
soil_logger = get_logger("soil")
