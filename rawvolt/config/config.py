"""
System configuration for the rawvolt reader
===========================================

This file exposes the settings used at runtime by the reader and the logging
helpers. Values come from config.yaml through user_config.py and can be
overridden programmatically with :func:`inject_config`.

IMPORTANT:
- Do NOT modify this file directly
- To configure user parameters, edit config.yaml
"""

from __future__ import annotations

import os
from pathlib import Path

from .user_config import (
    BAND_READ_WORKERS,
    DEBUG_HEADER_INFO,
    LOG_COLORS,
    LOG_FILE,
    LOG_LEVEL,
    WARN_ON_MISSING_BLOCKS,
)

# ==============================================================================
# READER CONFIGURATION
# ==============================================================================

MAX_BAND_READ_WORKERS: int = os.cpu_count() or 4   # Cap for the ambient band-read pool

# ==============================================================================
# LOGGING CONFIGURATION
# ==============================================================================

VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

# ==============================================================================
# HELPER FUNCTIONS
# ==============================================================================

def inject_config(config_dict: dict):
    """Inject configuration from external source.

    Overrides module-level variables with values from config_dict.

    Args:
        config_dict: Dictionary with configuration values to inject
    """
    import sys

    current_module = sys.modules[__name__]

    for key, value in config_dict.items():
        if not hasattr(current_module, key):
            raise KeyError(f"Unknown configuration key: {key}")
        setattr(current_module, key, value)


def band_worker_count(nants: int) -> int:
    """Number of threads the ambient pool should use for ``nants`` antennas."""
    if BAND_READ_WORKERS > 0:
        return BAND_READ_WORKERS
    return max(1, min(nants, MAX_BAND_READ_WORKERS))


def validate_configuration():
    """Validate the configuration and generate informative error messages.

    Raises:
        ValueError: If any configuration parameter is invalid

    Returns:
        bool: True if all validations pass
    """
    errors = []

    if BAND_READ_WORKERS < 0:
        errors.append(
            f"BAND_READ_WORKERS={BAND_READ_WORKERS} is invalid\n"
            f"  → Use 0 for one worker per antenna or a positive thread count\n"
            f"  → Recommendation: Adjust reader.band_workers in config.yaml"
        )

    if str(LOG_LEVEL).upper() not in VALID_LOG_LEVELS:
        errors.append(
            f"LOG_LEVEL={LOG_LEVEL} is invalid\n"
            f"  → Valid levels: {', '.join(VALID_LOG_LEVELS)}\n"
            f"  → Recommendation: Adjust logging.level in config.yaml"
        )

    if LOG_FILE is not None and Path(LOG_FILE).is_dir():
        errors.append(
            f"LOG_FILE={LOG_FILE} is a directory\n"
            f"  → logging.log_file must name a file\n"
            f"  → Recommendation: Give a file path or null"
        )

    if errors:
        error_message = "Invalid rawvolt configuration:\n\n"
        for i, error in enumerate(errors, 1):
            error_message += f"{i}. {error}\n\n"
        raise ValueError(error_message)

    return True
