"""
Logging system using structlog.
Provides structured logging with JSON or console output and an optional log file.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union
import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[Union[str, Path]] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call-site information to every event
    """

    # Configure standard library logging
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    # Configure structlog processors
    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.processors.CallsiteParameterAdder())

    # Add format-specific processors
    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    # Configure structlog
    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    # Set up file logging if specified
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(logging.Formatter('%(message)s'))

        # Add handler to root logger
        logging.getLogger().addHandler(file_handler)

    logger = structlog.get_logger(__name__)
    logger.info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


class ControllerLogger:
    """
    Logger bound to one controller action.

    Binds the controller and action names to every event it emits.
    """

    def __init__(self, controller: str, action: str, name: str = "api"):
        self.controller = controller
        self.action = action
        self.logger = structlog.get_logger(name).bind(controller=controller, action=action)

    @property
    def location(self) -> str:
        """Controller and action names, e.g. ``Books - Create``."""
        return f"{self.controller} - {self.action}"

    def attempt(self, event: str, **kwargs) -> None:
        self.logger.info(event, **kwargs)

    def success(self, event: str, **kwargs) -> None:
        self.logger.info(event, **kwargs)

    def warn(self, event: str, **kwargs) -> None:
        self.logger.warning(event, **kwargs)

    def failure(self, event: str, exc: Optional[BaseException] = None, **kwargs) -> None:
        """Log a 500-path message, with traceback when an exception is given."""
        if exc is not None:
            self.logger.error(event, error=str(exc), exc_info=exc, **kwargs)
        else:
            self.logger.error(event, **kwargs)
