import logging

import pytest

from calendar_mcp.logging import FILE_HANDLER_NAME, STDERR_HANDLER_NAME, configure_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)


def test_logs_go_to_the_configured_file(settings, root_logger):
    log_file = configure_logging(settings.logging)
    logging.getLogger("calendar_mcp.test").warning("hello from the test")
    for handler in root_logger.handlers:
        handler.flush()

    assert log_file == settings.logging.file
    assert root_logger.level == logging.DEBUG
    assert "hello from the test" in log_file.read_text(encoding="utf-8")


def test_repeat_calls_do_not_duplicate_handlers(settings, root_logger):
    configure_logging(settings.logging)
    configure_logging(settings.logging)

    names = [handler.get_name() for handler in root_logger.handlers]
    assert names.count(FILE_HANDLER_NAME) == 1
    assert names.count(STDERR_HANDLER_NAME) == 1
