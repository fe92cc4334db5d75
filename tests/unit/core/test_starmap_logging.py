import logging

import pytest

from starmap.core.utils.logging import configure_logging, get_logger, set_component_level


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_does_not_stack_handlers(restore_root):
    configure_logging()
    configure_logging(verbose=True)

    marked = [h for h in restore_root.handlers if getattr(h, "_starmap_handler", False)]
    assert len(marked) == 1
    assert restore_root.level == logging.DEBUG
    assert logging.getLogger("httpx").level == logging.DEBUG


def test_quiet_http_loggers_by_default(restore_root):
    configure_logging()
    assert restore_root.level == logging.INFO
    assert logging.getLogger("httpx").level == logging.WARNING
    assert logging.getLogger("anthropic").level == logging.WARNING


def test_set_component_level():
    set_component_level("sync", "debug")
    assert logging.getLogger("starmap.sync").level == logging.DEBUG
    set_component_level("starmap.providers", logging.ERROR)
    assert logging.getLogger("starmap.providers").level == logging.ERROR
    set_component_level("sync", "bogus")
    assert logging.getLogger("starmap.sync").level == logging.INFO


def test_get_logger():
    assert get_logger("starmap.catalogs").name == "starmap.catalogs"
