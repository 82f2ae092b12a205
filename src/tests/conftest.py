from __future__ import annotations

import pytest

from readout.core.logging_setup import reset_logger
from readout.tools.cli import LOGGER_NAME


@pytest.fixture(autouse=True)
def _fresh_logger():
    reset_logger(LOGGER_NAME)
    yield
    reset_logger(LOGGER_NAME)
