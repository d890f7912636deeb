import logging
from logging.handlers import TimedRotatingFileHandler

from commons.base_logger import LOG_DIR_ENV, BaseLogger


def test_same_name_configured_once():
    first = BaseLogger(name="test_logger_once")
    second = BaseLogger(name="test_logger_once", level=logging.DEBUG)
    assert first.logger is second.logger
    assert len(second.logger.handlers) == 1
    assert second.logger.level == logging.INFO


def test_file_handler_in_log_dir(tmp_path, monkeypatch):
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path))
    log = BaseLogger(name="test_logger_file", to_file=True)
    file_handlers = [h for h in log.logger.handlers if isinstance(h, TimedRotatingFileHandler)]
    assert len(file_handlers) == 1
    assert file_handlers[0].baseFilename == str(tmp_path / "test_logger_file.log")
    assert file_handlers[0].level == logging.ERROR
    for h in file_handlers:
        h.close()


def test_set_level_keeps_file_handler_at_error(tmp_path, monkeypatch):
    monkeypatch.setenv(LOG_DIR_ENV, str(tmp_path))
    log = BaseLogger(name="test_logger_verbose", to_file=True)
    log.set_level(logging.DEBUG)
    assert log.logger.level == logging.DEBUG
    levels = {type(h): h.level for h in log.logger.handlers}
    assert levels[logging.StreamHandler] == logging.DEBUG
    assert levels[TimedRotatingFileHandler] == logging.ERROR
    for h in log.logger.handlers:
        h.close()
