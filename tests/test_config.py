from __future__ import annotations

import pytest
from pydantic import ValidationError

from emlview.core.config import Settings, get_settings


def test_defaults() -> None:
    settings = Settings()
    assert settings.MAX_EML_BYTES == 25 * 1024 * 1024
    assert settings.PROMETHEUS_METRICS_PATH == "/metrics"


def test_max_eml_bytes_must_be_positive() -> None:
    with pytest.raises(ValidationError):
        Settings(MAX_EML_BYTES=0)


def test_settings_read_from_environment(monkeypatch) -> None:
    monkeypatch.setenv("MAX_EML_BYTES", "1024")
    get_settings.cache_clear()
    try:
        assert get_settings().MAX_EML_BYTES == 1024
    finally:
        get_settings.cache_clear()
