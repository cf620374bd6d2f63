from __future__ import annotations

"""Central logging configuration for Outline Toolkit.

Import and call :func:`setup_logging` at application start-up.
"""

import logging
import os
import logging.config

import yaml

from outline_toolkit.config import ConfigManager
from outline_toolkit.version import get_app_version

__all__ = ["setup_logging"]

_EDITING_LOGGERS = (
    'outline_toolkit.core.services.structure_editing_service',
    'outline_toolkit.ui.controllers.outline_controller',
)


def setup_logging() -> None:
    """Configure logging for the application using configuration from YAML files."""
    log_dir = os.environ.get("OUTLINE_LOG_DIR", "logs")
    os.makedirs(log_dir, exist_ok=True)
    log_file = os.path.join(log_dir, "app.log")

    try:
        logging_config = ConfigManager().get_logging_config()
    except (OSError, yaml.YAMLError) as exc:
        logging_config = {}
        print(f"Error loading logging config: {exc}")

    if logging_config and isinstance(logging_config, dict) and logging_config.get("version"):
        if "handlers" in logging_config and "file" in logging_config["handlers"]:
            logging_config["handlers"]["file"]["filename"] = log_file
        try:
            logging.config.dictConfig(logging_config)
            logging.info("===== Logging initialised from config files (%s) =====", get_app_version())
        except (ValueError, TypeError, AttributeError, ImportError) as exc:
            print(f"Invalid logging config: {exc}")
            _setup_minimal_logging()
    else:
        _setup_minimal_logging()

    _apply_debug_overrides()


def _setup_minimal_logging() -> None:
    """Set up minimal console-only logging when config is unavailable."""
    minimal_config = {
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'simple': {
                'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            },
        },
        'handlers': {
            'console': {
                'class': 'logging.StreamHandler',
                'formatter': 'simple',
                'level': 'INFO',
            },
        },
        'root': {
            'level': 'INFO',
            'handlers': ['console'],
        },
        # Module logger entries so env overrides can flip them even here
        'loggers': {name: {'level': 'INFO'} for name in _EDITING_LOGGERS},
    }

    logging.config.dictConfig(minimal_config)
    logging.error("===== Logging initialised with minimal fallback (config error) =====")


def _apply_debug_overrides() -> None:
    """Apply environment-driven module-specific debug overrides.

    Supports:
    - OUTLINE_DEBUG_EDITING=true -> DEBUG for the edit engine and key dispatcher
    - OUTLINE_DEBUG_MODULES=comma,separated,logger,names -> DEBUG for listed loggers
    """
    debug_editing = os.environ.get('OUTLINE_DEBUG_EDITING', '').strip().lower() in {'1', 'true', 'yes', 'on'}
    extra_modules = os.environ.get('OUTLINE_DEBUG_MODULES', '').strip()
    targets = []
    if debug_editing:
        targets.extend(_EDITING_LOGGERS)
    if extra_modules:
        targets.extend([m.strip() for m in extra_modules.split(',') if m.strip()])

    for name in targets:
        logger = logging.getLogger(name)
        logger.setLevel(logging.DEBUG)
        # Ensure at least one handler emits DEBUG for this logger
        has_debug_handler = any(h.level <= logging.DEBUG for h in logger.handlers)
        if not has_debug_handler:
            h = logging.StreamHandler()
            h.setLevel(logging.DEBUG)
            h.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
            logger.addHandler(h)
        logger.info("Debug override active for logger '%s'", name)
