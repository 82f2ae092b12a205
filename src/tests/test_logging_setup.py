from __future__ import annotations

import logging
from pathlib import Path

from readout.core.logging_setup import get_logger, reset_logger


def test_logger_writes_file_and_stderr(tmp_path: Path, capsys) -> None:
    name = "readout.test-logging"
    reset_logger(name)
    logger = get_logger(name, tmp_path / "logs")
    logger.info("quiet on console")
    logger.error("loud")
    for handler in logger.handlers:
        handler.flush()

    log_text = (tmp_path / "logs" / f"{name}.log").read_text()
    assert "| INFO | readout.test-logging | quiet on console" in log_text
    assert "| ERROR |" in log_text
    err = capsys.readouterr().err
    assert "ERROR: loud" in err
    assert "quiet on console" not in err
    reset_logger(name)


def test_logger_is_configured_once(tmp_path: Path) -> None:
    name = "readout.test-once"
    reset_logger(name)
    first = get_logger(name, tmp_path)
    second = get_logger(name, tmp_path / "elsewhere", level=logging.DEBUG)
    assert first is second
    assert len(first.handlers) == 2
    assert not (tmp_path / "elsewhere").exists()
    reset_logger(name)
