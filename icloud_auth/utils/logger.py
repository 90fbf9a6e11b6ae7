"""Logging configuration for the rclone iCloud authenticator."""

import logging
import sys
from pathlib import Path
from typing import Optional


# Component to log file mapping
COMPONENT_LOG_FILES = {
    'auth': 'auth.log',
    'rclone': 'rclone.log',
    'main': 'main.log',
}


def _get_component_from_logger_name(name: str) -> str:
    """Determine component from logger name.

    Args:
        name: Logger name (e.g., 'icloud_auth.auth.flow')

    Returns:
        Component name or 'main' if no match
    """
    if '.auth' in name:
        return 'auth'
    elif 'rclone' in name or 'orchestrator' in name or 'remote_selection' in name:
        return 'rclone'
    else:
        return 'main'


class ComponentFilter(logging.Filter):
    """Filter that only allows records from a specific component."""

    def __init__(self, component: str):
        """Initialize component filter.

        Args:
            component: Component name (auth, rclone, main)
        """
        super().__init__()
        self.component = component

    def filter(self, record: logging.LogRecord) -> bool:
        """Check if record belongs to this component."""
        return _get_component_from_logger_name(record.name) == self.component


def setup_logging(
    log_level: str = "INFO",
    log_to_console: bool = True,
    log_dir: Optional[Path] = None
) -> None:
    """Configure logging with optional component-based file logging.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_to_console: Whether to log to console (default: True)
        log_dir: Directory for component log files (default: no files)
    """
    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    detailed_formatter = logging.Formatter(
        fmt='[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )
    console_formatter = logging.Formatter(fmt='[%(levelname)s] %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    # Progress is printed to stdout already, so the console only gets
    # warnings unless DEBUG is requested
    if log_to_console:
        console_handler = logging.StreamHandler(sys.stderr)
        console_level = logging.DEBUG if numeric_level == logging.DEBUG else logging.WARNING
        console_handler.setLevel(console_level)
        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

    if log_dir:
        log_directory = Path(log_dir)
        log_directory.mkdir(parents=True, exist_ok=True)
        for component, filename in COMPONENT_LOG_FILES.items():
            handler = logging.FileHandler(log_directory / filename, mode='a', encoding='utf-8')
            handler.setLevel(numeric_level)
            handler.setFormatter(detailed_formatter)
            handler.addFilter(ComponentFilter(component))
            root_logger.addHandler(handler)

    # Suppress noisy third-party loggers
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("playwright").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        logging.Logger: Logger instance
    """
    return logging.getLogger(name)
