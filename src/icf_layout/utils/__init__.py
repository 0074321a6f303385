# File: src/icf_layout/utils/__init__.py

"""Shared utilities for the ICF layout engine.

Usage:
    from icf_layout.utils import LayoutLogger, get_logger

    LayoutLogger.configure(debug_mode=True)
    logger = get_logger(__name__)
    logger.trace("sample %d", 3)
"""

from .logging_config import LayoutLogger, get_logger

__all__ = ["LayoutLogger", "get_logger"]
