from __future__ import annotations

import logging

import pytest

from utils.logging_setup import LoggingProgressSink, setup_logging, setup_logging_from_config


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield root
    for handler in root.handlers[:]:
        if handler not in handlers:
            root.removeHandler(handler)
            handler.close()
    for handler in handlers:
        if handler not in root.handlers:
            root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_writes_file(tmp_path, restore_root_logger) -> None:
    log_file = tmp_path / "daylight.log"
    root = setup_logging('debug', str(log_file))
    assert root.level == logging.DEBUG

    logging.getLogger('core.daylight_calculator').info("grid ready")
    for handler in root.handlers:
        handler.flush()
    assert "grid ready" in log_file.read_text(encoding='utf-8')

    # Repeated calls replace the console handler instead of adding another
    setup_logging('INFO')
    console = [h for h in root.handlers if type(h) is logging.StreamHandler]
    assert len(console) == 1


def test_setup_logging_from_config(restore_root_logger) -> None:
    root = setup_logging_from_config({'logging': {'level': 'WARNING', 'file': None}})
    assert root.level == logging.WARNING
    assert setup_logging_from_config({}).level == logging.INFO


def test_invalid_level_rejected(restore_root_logger) -> None:
    with pytest.raises(ValueError):
        setup_logging('LOUD')


def test_progress_sink_formats_percent(caplog) -> None:
    sink = LoggingProgressSink(logging.getLogger('core.progress.test'))
    with caplog.at_level(logging.INFO, logger='core.progress.test'):
        sink('Calculating: 10/49 points...', 26.3)
    assert "[ 26.3%] Calculating: 10/49 points..." in caplog.text
