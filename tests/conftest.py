"""
Общие фикстуры pytest.

Логгер пакета ``src`` не передаёт записи корневому логгеру
(propagate = False), поэтому обработчик caplog подключается к нему напрямую.
"""

from __future__ import annotations

import logging
from typing import Iterator

import pytest

import src


# ============================================================================
# Логирование
# ============================================================================


@pytest.fixture(autouse=True)
def _capture_package_logs(caplog: pytest.LogCaptureFixture) -> Iterator[None]:
    """Направить записи логгеров модулей пакета в caplog."""
    package_logger = logging.getLogger(src.LOGGER_NAME)
    package_logger.addHandler(caplog.handler)
    yield
    package_logger.removeHandler(caplog.handler)
