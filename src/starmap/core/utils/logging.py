"""Logging utilities for starmap.

Modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`configure_logging` once to install a stderr handler.
"""

from __future__ import annotations

import logging
import sys
from typing import Union

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_QUIET_LOGGERS = ("httpx", "httpcore", "openai", "anthropic", "urllib3")
_HANDLER_MARK = "_starmap_handler"


def get_logger(name: str) -> logging.Logger:
    """Get a module logger by name (no prefixing).

    Args:
        name: Logger name (typically ``__name__``).

    Returns:
        Configured logger instance.
    """
    return logging.getLogger(name)


def configure_logging(verbose: bool = False) -> None:
    """Install the starmap stderr handler on the root logger.

    Calling this more than once replaces the previous handler instead of
    stacking duplicates.

    Args:
        verbose: Enable DEBUG output, including third-party HTTP loggers.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    setattr(handler, _HANDLER_MARK, True)
    root.addHandler(handler)
    root.setLevel(logging.DEBUG if verbose else logging.INFO)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.DEBUG if verbose else logging.WARNING)


def set_component_level(component: str, level: Union[str, int]) -> None:
    """Set log level for a specific component.

    Accepts either string levels (e.g., "INFO") or numeric constants. Bare
    component names such as ``"sync"`` are expanded to ``"starmap.sync"``.
    """
    if isinstance(level, str):
        level_value = getattr(logging, level.upper(), logging.INFO)
    else:
        level_value = level
    name = component if component.startswith("starmap") else f"starmap.{component}"
    logging.getLogger(name).setLevel(level_value)


__all__ = ["get_logger", "configure_logging", "set_component_level"]
