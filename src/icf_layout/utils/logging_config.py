# File: src/icf_layout/utils/logging_config.py

"""
Logging configuration for the ICF layout engine.

This module provides the logging setup used by the layout pipeline, including a custom
TRACE level for per-sample and per-iteration diagnostics (side votes, reduction passes).
It supports file and console output with different formats.
"""

import logging
import os
import sys
from datetime import datetime
from typing import Optional

class LayoutLogger:
    """
    Configures logging for the layout engine with multiple levels.

    Supports:
    - Standard levels (CRITICAL, ERROR, WARNING, INFO, DEBUG)
    - Custom TRACE level for extremely detailed diagnostics
    - Optional file output next to console output
    """

    # Define custom TRACE level (between DEBUG and NOTSET)
    TRACE_LEVEL = 5
    logging.addLevelName(TRACE_LEVEL, "TRACE")

    @staticmethod
    def _add_trace_method():
        """Add the TRACE method to the Logger class if not already present."""
        if not hasattr(logging.Logger, 'trace'):
            def trace(self, message, *args, **kwargs):
                """
                Log a message with level TRACE.

                This level provides extremely detailed tracing information beyond DEBUG.
                """
                if self.isEnabledFor(LayoutLogger.TRACE_LEVEL):
                    self._log(LayoutLogger.TRACE_LEVEL, message, args, **kwargs)
            logging.Logger.trace = trace

    @staticmethod
    def configure(debug_mode: bool = False, log_dir: Optional[str] = None) -> Optional[str]:
        """
        Configure the logging system for the layout engine.

        Args:
            debug_mode: If True, sets DEBUG level for the icf_layout loggers
            log_dir: Directory to store log files; console only when None

        Returns:
            Path to the created log file, or None when logging to console only
        """
        LayoutLogger._add_trace_method()

        package_logger = logging.getLogger("icf_layout")
        package_logger.setLevel(logging.DEBUG if debug_mode else logging.INFO)

        # Clear any existing handlers
        if package_logger.handlers:
            package_logger.handlers.clear()

        log_file = None
        if log_dir:
            os.makedirs(log_dir, exist_ok=True)
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            log_file = os.path.join(log_dir, f"icf_layout_{timestamp}.log")

            file_handler = logging.FileHandler(log_file)
            file_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            file_handler.setFormatter(file_formatter)
            file_handler.setLevel(logging.DEBUG if debug_mode else logging.INFO)
            package_logger.addHandler(file_handler)

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(
            logging.Formatter('%(name)s - %(levelname)s: %(message)s')
        )
        console_handler.setLevel(logging.INFO)  # Console shows less info by default
        package_logger.addHandler(console_handler)

        return log_file

    @staticmethod
    def get_logger(name: str, level: Optional[int] = None):
        """
        Get a configured logger for a specific module.

        Args:
            name: Logger name, typically __name__
            level: Optional specific level for this logger

        Returns:
            A configured logger
        """
        LayoutLogger._add_trace_method()
        logger = logging.getLogger(name)
        if level:
            logger.setLevel(level)
        return logger

# For direct import convenience
def get_logger(name: str, level: Optional[int] = None):
    """
    Get a configured logger for a specific module.

    Convenience function that delegates to LayoutLogger.get_logger.
    """
    return LayoutLogger.get_logger(name, level)
