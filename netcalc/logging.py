"""Centralized logging configuration for NetCalc.

Every module logs through a child of the ``netcalc`` logger obtained with
`get_logger`. A single stdout handler is attached to that logger on import.

Levels:
    * INFO carries one line per finished analysis (flow, delay and backlog
      bound).
    * DEBUG adds one line per traversed server and per arrival bound, which
      grows with path length times flow count.
    * ERROR precedes every raised validation or analysis error.

The starting level can be set with the ``NETCALC_LOG_LEVEL`` environment
variable (a level name such as ``debug`` or a number). Per-hop output of a
single component can be switched on without the rest of the package, e.g.
``enable_debug_logging("analysis")``.
"""

import logging
import os
import sys
from typing import Optional, Set, Union

LOG_LEVEL_ENV = "NETCALC_LOG_LEVEL"

_ROOT_LOGGER_NAME = "netcalc"

# Flag to track if the package root logger has been configured
_ROOT_LOGGER_CONFIGURED = False

# Components switched to DEBUG by enable_debug_logging(component)
_DEBUG_COMPONENTS: Set[str] = set()


def resolve_level(level: Union[int, str]) -> int:
    """Turn a level name or number into a `logging` level.

    Args:
        level: ``logging.DEBUG``, ``"debug"``, ``"10"`` and the like.

    Raises:
        ValueError: If a name does not denote a logging level.
    """
    if isinstance(level, int):
        return level
    text = level.strip()
    if text.isdigit():
        return int(text)
    value = logging.getLevelName(text.upper())
    if not isinstance(value, int):
        raise ValueError(f"Invalid log level '{level}'.")
    return value


def _env_level(default: int) -> int:
    raw = os.getenv(LOG_LEVEL_ENV)
    if not raw:
        return default
    try:
        return resolve_level(raw)
    except ValueError:
        return default


def setup_root_logger(
    level: Optional[Union[int, str]] = None,
    format_string: Optional[str] = None,
    handler: Optional[logging.Handler] = None,
) -> None:
    """Set up the ``netcalc`` logger with a single handler.

    Repeated calls are no-ops until `reset_logging()` is called.

    Args:
        level: Logging level. Defaults to ``NETCALC_LOG_LEVEL`` when set,
            otherwise INFO.
        format_string: Custom format string (optional).
        handler: Custom handler (optional, defaults to a stdout StreamHandler).
    """
    global _ROOT_LOGGER_CONFIGURED

    if _ROOT_LOGGER_CONFIGURED:
        return

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    if level is None:
        root_logger.setLevel(_env_level(logging.INFO))
    else:
        root_logger.setLevel(resolve_level(level))
    root_logger.handlers.clear()

    if format_string is None:
        format_string = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    if handler is None:
        handler = logging.StreamHandler(sys.stdout)

    handler.setFormatter(logging.Formatter(format_string))
    root_logger.addHandler(handler)

    # Propagate so pytest's caplog sees package records
    root_logger.propagate = True

    _ROOT_LOGGER_CONFIGURED = True


def get_logger(name: str) -> logging.Logger:
    """Get a logger that inherits the NetCalc configuration.

    Args:
        name: Logger name (typically ``__name__`` of the calling module).

    Returns:
        Logger instance with level NOTSET so the package level applies.
    """
    setup_root_logger()

    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    return logger


def set_global_log_level(level: Union[int, str]) -> None:
    """Set the log level for all NetCalc loggers and their handlers.

    Args:
        level: Level number or name (e.g. ``logging.DEBUG`` or ``"info"``).
    """
    setup_root_logger()

    value = resolve_level(level)
    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.setLevel(value)
    for handler in root_logger.handlers:
        handler.setLevel(value)


def enable_debug_logging(component: Optional[str] = None) -> None:
    """Enable debug output for the package or one of its sub-packages.

    Args:
        component: Sub-package below ``netcalc`` such as ``"analysis"`` or
            ``"analysis.tfa"``. The whole package when omitted.
    """
    if component is None:
        set_global_log_level(logging.DEBUG)
        return

    setup_root_logger()
    name = f"{_ROOT_LOGGER_NAME}.{component}"
    logging.getLogger(name).setLevel(logging.DEBUG)
    # Handler levels would otherwise drop the component's records
    for handler in logging.getLogger(_ROOT_LOGGER_NAME).handlers:
        handler.setLevel(logging.DEBUG)
    _DEBUG_COMPONENTS.add(name)


def disable_debug_logging() -> None:
    """Disable debug logging everywhere and return to INFO."""
    for name in _DEBUG_COMPONENTS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    _DEBUG_COMPONENTS.clear()
    set_global_log_level(logging.INFO)


def reset_logging() -> None:
    """Reset logging configuration (mainly for testing)."""
    global _ROOT_LOGGER_CONFIGURED
    _ROOT_LOGGER_CONFIGURED = False

    for name in _DEBUG_COMPONENTS:
        logging.getLogger(name).setLevel(logging.NOTSET)
    _DEBUG_COMPONENTS.clear()

    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.handlers.clear()
    root_logger.setLevel(logging.NOTSET)


setup_root_logger()
