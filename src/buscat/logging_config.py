"""
Logging configuration for buscat.

Standard output carries message payloads, so every diagnostic goes to
standard error.
"""

import logging
import sys
from typing import Optional, TextIO


def setup_logging(
    verbose: bool = False,
    stream: Optional[TextIO] = None,
    force_setup: bool = False,
) -> None:
    """
    Setup logging for a buscat invocation.

    Args:
        verbose: Emit informational diagnostics (default: warnings and errors only)
        stream: Stream for the console handler (defaults to stderr)
        force_setup: Whether to force reconfiguration even if already setup
    """
    level = logging.INFO if verbose else logging.WARNING

    # Check if logging has already been configured
    root_logger = logging.getLogger()
    if root_logger.handlers and not force_setup:
        logging.getLogger("buscat").setLevel(level)
        return

    if force_setup:
        root_logger.handlers.clear()

    _setup_console_logging(stream)

    root_logger.setLevel(logging.WARNING)

    # Reduce noise from the transport library
    logging.getLogger("amqpstorm").setLevel(logging.WARNING)

    logging.getLogger("buscat").setLevel(level)


def create_formatter(service_name: Optional[str] = None) -> logging.Formatter:
    """
    Create the formatter for console diagnostics.

    Args:
        service_name: Prefix for each line, defaults to the global service name

    Returns:
        Configured logging formatter
    """
    if service_name is None:
        from buscat.config import SERVICE_NAME

        service_name = SERVICE_NAME

    return logging.Formatter(f"{service_name}: %(message)s")


def _setup_console_logging(stream: Optional[TextIO] = None) -> None:
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(create_formatter())
    logging.getLogger().addHandler(handler)
