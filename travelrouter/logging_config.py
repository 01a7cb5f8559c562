"""
Centralized logging configuration for Travel Router.

Every run appends DEBUG records to a size-capped log file under
/var/log/travelrouter, so a failed reconfiguration can be diagnosed after the
SSH session is gone. The console only carries log records when ``--debug`` is
given; normal operator output comes from the progress reporter.
"""

import logging
import logging.handlers
import sys
from typing import Optional

from . import config

LOG_MAX_BYTES = 512 * 1024
LOG_BACKUP_COUNT = 3


class RouterLogger:
    """Process-wide logging setup for Travel Router."""

    _initialized = False
    _debug_enabled = False

    @classmethod
    def setup(cls, debug: bool = False, force_reinit: bool = False) -> None:
        """
        Attach the file and console handlers to the root logger.

        Args:
            debug: Mirror DEBUG records to stderr
            force_reinit: Replace handlers from an earlier setup() call
        """
        if cls._initialized and not force_reinit:
            return

        cls._debug_enabled = debug
        formatter = logging.Formatter(config.LOG_FORMAT, datefmt=config.LOG_DATE_FORMAT)

        root = logging.getLogger()
        root.handlers.clear()
        root.setLevel(logging.DEBUG)
        for handler in (cls._file_handler(), cls._console_handler()):
            if handler is not None:
                handler.setFormatter(formatter)
                root.addHandler(handler)

        cls._initialized = True
        logging.getLogger(__name__).debug(
            f"Logging to {config.LOG_FILE} (console level {'DEBUG' if debug else 'WARNING'})"
        )

    @classmethod
    def _file_handler(cls) -> Optional[logging.Handler]:
        try:
            config.LOG_DIR.mkdir(parents=True, exist_ok=True)
            handler = logging.handlers.RotatingFileHandler(
                config.LOG_FILE, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT
            )
        except OSError as e:
            # Unprivileged runs (status, --help) cannot write under /var/log
            if cls._debug_enabled:
                sys.stderr.write(f"File logging disabled: {e}\n")
            return None
        handler.setLevel(logging.DEBUG)
        return handler

    @classmethod
    def _console_handler(cls) -> logging.Handler:
        handler = logging.StreamHandler(sys.stderr)
        handler.setLevel(logging.DEBUG if cls._debug_enabled else logging.WARNING)
        return handler

    @classmethod
    def get_logger(cls, name: Optional[str] = None) -> logging.Logger:
        # Handlers live on the root logger; named loggers just propagate
        return logging.getLogger(name)

    @classmethod
    def is_debug_enabled(cls) -> bool:
        return cls._debug_enabled


def setup_logging(debug: bool = False, force_reinit: bool = False) -> None:
    """Configure logging once per process. Wrapper for RouterLogger.setup()."""
    RouterLogger.setup(debug=debug, force_reinit=force_reinit)


def get_logger(name: Optional[str] = None) -> logging.Logger:
    return RouterLogger.get_logger(name)


def is_debug_enabled() -> bool:
    return RouterLogger.is_debug_enabled()
