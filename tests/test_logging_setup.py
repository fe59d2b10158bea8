# tests/test_logging_setup.py

import logging

from app.logging_setup import _ConsoleNoiseFilter, setup_logging


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_app_logs_and_quiets_libraries():
    noise = _ConsoleNoiseFilter()

    assert noise.filter(_record("app.routers.users", logging.DEBUG))
    assert noise.filter(_record("uvicorn.access", logging.INFO))
    assert not noise.filter(_record("sqlalchemy.engine", logging.INFO))
    assert noise.filter(_record("sqlalchemy.engine", logging.WARNING))


def test_setup_logging_writes_log_file(tmp_path):
    root = logging.getLogger()
    saved = list(root.handlers), root.level
    log_file = tmp_path / "logs" / "api.log"
    try:
        setup_logging(log_file=log_file)
        logging.getLogger("app.test").debug("hello file")
        for handler in root.handlers:
            handler.flush()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved[0]:
            root.addHandler(handler)
        root.setLevel(saved[1])
        logging.captureWarnings(False)

    assert "hello file" in log_file.read_text(encoding="utf-8")
