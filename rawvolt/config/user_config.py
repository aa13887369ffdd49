"""
User Configuration Module
===========================
This module loads configuration from config.yaml and makes it available
to the rest of the package through config.py.

DO NOT hardcode values here. Edit config.yaml instead.
"""

import os
from pathlib import Path

import yaml


_DEFAULTS = {
    'reader': {
        'band_workers': 0,
        'warn_on_missing_blocks': True,
    },
    'logging': {
        'level': 'INFO',
        'colors': True,
        'log_file': None,
    },
    'debug': {
        'show_header_info': False,
    },
}


def _config_path():
    """Return the configuration file to load, or ``None`` when there is none."""
    override = os.environ.get('RAWVOLT_CONFIG')
    if override:
        path = Path(override)
        if not path.exists():
            raise FileNotFoundError(
                f"Configuration file given by RAWVOLT_CONFIG not found: {path}"
            )
        return path

    project_root = Path(__file__).parent.parent.parent
    main_config_path = project_root / "config.yaml"
    if main_config_path.exists():
        return main_config_path
    return None


def _load_config():
    """Load configuration from config.yaml, filling gaps with the defaults."""
    config = {section: dict(values) for section, values in _DEFAULTS.items()}

    path = _config_path()
    if path is None:
        return config

    with open(path, 'r', encoding='utf-8') as f:
        loaded = yaml.safe_load(f) or {}

    for section, values in loaded.items():
        if isinstance(values, dict):
            config.setdefault(section, {}).update(values)
        else:
            config[section] = values

    return config


# Load configuration from YAML
_config = _load_config()

# =============================================================================
# READER CONFIGURATION
# =============================================================================
BAND_READ_WORKERS = int(_config['reader']['band_workers'])
WARN_ON_MISSING_BLOCKS = bool(_config['reader']['warn_on_missing_blocks'])

# =============================================================================
# LOGGING AND DEBUG CONFIGURATION
# =============================================================================
LOG_LEVEL = str(_config['logging']['level'])
LOG_COLORS = bool(_config['logging']['colors'])
LOG_FILE = _config['logging']['log_file']
DEBUG_HEADER_INFO = bool(_config['debug']['show_header_info'])
