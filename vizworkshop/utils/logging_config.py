"""
Logging configuration for vizworkshop.

Workflow functions print their progress; finer detail (file paths, parameter
choices, skipped steps) goes through the ``vizworkshop`` logger. Set the
VIZWORKSHOP_DEBUG environment variable to see it:

    export VIZWORKSHOP_DEBUG=1
    python your_script.py

Or in Python:
    import vizworkshop as vw
    vw.utils.enable_debug_logging()
"""

import logging
import os
import sys


def _debug_requested() -> bool:
    return os.getenv('VIZWORKSHOP_DEBUG', '').lower() in ('1', 'true', 'yes')


def setup_logging(level: str = None) -> logging.Logger:
    """
    Configure the ``vizworkshop`` logger.

    Args:
        level: Logging level ('DEBUG', 'INFO', 'WARNING', 'ERROR').
               If None, checks the VIZWORKSHOP_DEBUG environment variable.

    Returns:
        The configured package logger.
    """
    if level is None:
        level = 'DEBUG' if _debug_requested() else 'INFO'

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logger = logging.getLogger('vizworkshop')
    logger.setLevel(numeric_level)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    for handler in logger.handlers:
        handler.setLevel(numeric_level)

    if numeric_level == logging.DEBUG:
        print(f"✓ vizworkshop debug logging enabled (level: {level})", file=sys.stderr)
    return logger


def enable_debug_logging() -> logging.Logger:
    """Enable DEBUG level logging for all vizworkshop modules."""
    return setup_logging('DEBUG')


def disable_debug_logging() -> logging.Logger:
    """Disable debug logging (set to INFO level)."""
    return setup_logging('INFO')


if _debug_requested():
    setup_logging('DEBUG')
