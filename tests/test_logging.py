import logging
from pathlib import Path

import pytest

from pruxy.config import LoggingConfig
from pruxy.logging import NETWORK_LOGGERS, configure_logging


@pytest.fixture
def restore_logging():
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    network_levels = {name: logging.getLogger(name).level for name in NETWORK_LOGGERS}
    try:
        yield
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            if handler not in handlers:
                handler.close()
        for handler in handlers:
            root.addHandler(handler)
        root.setLevel(level)
        for name, network_level in network_levels.items():
            logging.getLogger(name).setLevel(network_level)
        logging.captureWarnings(False)


def test_file_handler_receives_formatted_records(
    tmp_path: Path, restore_logging
) -> None:
    log_path = tmp_path / "logs" / "pruxy.log"

    configure_logging(LoggingConfig(level="debug", path=log_path))
    logging.getLogger("pruxy.collector").debug("collected %d samples", 12)
    for handler in logging.getLogger().handlers:
        handler.flush()

    assert logging.getLogger().level == logging.DEBUG
    assert " | DEBUG | pruxy.collector | collected 12 samples" in log_path.read_text()


def test_network_loggers_quiet_by_default(restore_logging) -> None:
    configure_logging()

    assert logging.getLogger().level == logging.INFO
    for name in NETWORK_LOGGERS:
        assert logging.getLogger(name).level == logging.WARNING


def test_log_network_keeps_aiohttp_loggers(restore_logging) -> None:
    configure_logging(LoggingConfig(level="warning", log_network=True))

    for name in NETWORK_LOGGERS:
        assert logging.getLogger(name).level == logging.NOTSET


def test_unknown_level_falls_back_to_info(restore_logging) -> None:
    configure_logging(LoggingConfig(level="chatty"))

    assert logging.getLogger().level == logging.INFO
