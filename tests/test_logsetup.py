import logging
import os

import pytest

from pbench.logsetup import LOGGER_NAME, parse_level, setup


@pytest.fixture
def logger():
    log = logging.getLogger(LOGGER_NAME)
    yield log
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()
    log.propagate = True
    log.setLevel(logging.NOTSET)


def _flush(log):
    for handler in log.handlers:
        handler.flush()


@pytest.mark.parametrize(
    "name, expected",
    [
        ("debug", logging.DEBUG),
        ("Info", logging.INFO),
        ("WARNING", logging.WARNING),
        ("error", logging.ERROR),
        ("bogus", logging.INFO),
    ],
)
def test_parse_level(name, expected):
    assert parse_level(name) == expected


def test_setup_creates_file_named_by_pid(tmp_path, logger):
    path = setup(tmp_path, "info")
    assert path.parent == tmp_path
    assert path.name.endswith(f".{os.getpid()}.log")
    assert path.exists()


def test_info_written_debug_filtered(tmp_path, logger):
    path = setup(tmp_path, "info")
    logger.info("hello world")
    logger.debug("hidden message")
    _flush(logger)
    text = path.read_text(encoding="utf-8")
    assert "[INFO]" in text
    assert "hello world" in text
    assert "hidden message" not in text


def test_debug_level_writes_debug(tmp_path, logger):
    path = setup(tmp_path, "DEBUG")
    logger.debug("visible message")
    _flush(logger)
    assert "[DEBUG]" in path.read_text(encoding="utf-8")


def test_warning_goes_to_file_and_stderr(tmp_path, logger, capsys):
    path = setup(tmp_path, "info")
    logger.warning("careful now")
    logger.info("quiet note")
    _flush(logger)
    err = capsys.readouterr().err
    assert "[WARNING]" in err and "careful now" in err
    assert "quiet note" not in err
    assert "careful now" in path.read_text(encoding="utf-8")


def test_error_level_still_logs_errors(tmp_path, logger):
    path = setup(tmp_path, "error")
    logger.warning("dropped warning")
    logger.error("kept error")
    _flush(logger)
    text = path.read_text(encoding="utf-8")
    assert "kept error" in text
    assert "dropped warning" not in text