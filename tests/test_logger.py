from __future__ import annotations

import logging

from utils import logger as logger_module
from utils.logger import setup_logger


def test_setup_logger_writes_to_log_file(tmp_path, monkeypatch) -> None:
    monkeypatch.setattr(logger_module, "LOG_DIR", tmp_path / "logs")
    log = setup_logger("hotlist.test.file", level=logging.INFO, log_file="run.log", use_rich=False)
    try:
        log.info("fetched 3 items")
        for handler in log.handlers:
            handler.flush()
        text = (tmp_path / "logs" / "run.log").read_text(encoding="utf-8")
        assert "hotlist.test.file | INFO | fetched 3 items" in text
    finally:
        for handler in list(log.handlers):
            handler.close()
            log.removeHandler(handler)


def test_setup_logger_does_not_stack_handlers() -> None:
    log = setup_logger("hotlist.test.once", use_rich=False)
    try:
        assert setup_logger("hotlist.test.once", use_rich=False) is log
        assert len(log.handlers) == 1
    finally:
        for handler in list(log.handlers):
            log.removeHandler(handler)
