from __future__ import annotations

import json
import logging

import pytest
from pydantic import ValidationError

from cyfra_client.logging_config import JsonLogFormatter, configure_logging
from cyfra_client.settings import Settings


def test_settings_read_environment(monkeypatch) -> None:
    monkeypatch.setenv("CYFRA_API_URL", "http://catalog.example/ ")
    monkeypatch.setenv("CYFRA_SEARCH_DEBOUNCE_SECONDS", "0.5")
    monkeypatch.setenv("CYFRA_DEFAULT_DATE", "2024-06-01")
    settings = Settings(_env_file=None)
    assert settings.api_url == "http://catalog.example"
    assert settings.cyfra_search_debounce_seconds == 0.5
    assert str(settings.cyfra_default_date) == "2024-06-01"
    assert settings.cyfra_date_display_limit == 10


def test_settings_reject_out_of_range_defaults() -> None:
    with pytest.raises(ValidationError):
        Settings(_env_file=None, cyfra_default_width=32)


def test_json_log_formatter_includes_context() -> None:
    record = logging.LogRecord("cyfra.dates", logging.INFO, __file__, 1, "dates_fetched", None, None)
    record.tile_id = "34UDC"
    payload = json.loads(JsonLogFormatter().format(record))
    assert payload["logger"] == "cyfra.dates"
    assert payload["tile_id"] == "34UDC"
    assert payload["message"] == "dates_fetched"


def test_configure_logging_installs_single_handler() -> None:
    root = logging.getLogger()
    previous = (root.level, list(root.handlers))
    try:
        configure_logging(level="debug", json_logs=True)
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonLogFormatter)
    finally:
        root.setLevel(previous[0])
        root.handlers = previous[1]
