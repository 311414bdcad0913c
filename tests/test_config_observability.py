"""
Tests for configuration, logging setup and the tracer.
"""

import json
import logging
from pathlib import Path

import pytest
from pydantic import ValidationError

from seedi.config import LoggingSettings, Settings, get_settings, reset_settings
from seedi.observability import (
    JsonFormatter,
    SpanStatus,
    Tracer,
    configure_logging,
    get_tracer,
    reset_tracers,
)


class TestSettings:
    """Tests for the settings aggregator."""

    def test_defaults(self, monkeypatch):
        for name in ("SEEDI_CATALOG_SOURCE", "SEEDI_CATALOG_PATH", "SEEDI_CATALOG_URL"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings()
        assert settings.catalog.source == "bundled"
        assert settings.catalog.path is None
        assert settings.catalog.page_size == 100
        assert settings.baseline.post_harvest_loss == 18

    def test_singleton_and_reset(self):
        first = get_settings()
        assert get_settings() is first
        reset_settings()
        assert get_settings() is not first

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SEEDI_CATALOG_SOURCE", "remote")
        monkeypatch.setenv("SEEDI_CATALOG_URL", "https://kb.example.org")
        monkeypatch.setenv("SEEDI_CATALOG_PAGE_SIZE", "25")
        monkeypatch.setenv("SEEDI_DB_PATH", str(tmp_path / "x" / ".." / "db.sqlite"))
        reset_settings()

        settings = get_settings()
        assert settings.catalog.source == "remote"
        assert settings.catalog.url == "https://kb.example.org"
        assert settings.catalog.page_size == 25
        assert settings.storage.db_path == (tmp_path / "db.sqlite").resolve()

    def test_invalid_source_rejected(self, monkeypatch):
        monkeypatch.setenv("SEEDI_CATALOG_SOURCE", "ftp")
        reset_settings()
        with pytest.raises(ValidationError):
            get_settings()

    def test_baseline_bounds(self, monkeypatch):
        monkeypatch.setenv("SEEDI_BASELINE_SOIL_HEALTH", "120")
        reset_settings()
        with pytest.raises(ValidationError):
            get_settings()

    def test_user_path_expanded(self, monkeypatch):
        monkeypatch.setenv("SEEDI_DB_PATH", "~/seedi-test.db")
        reset_settings()
        assert get_settings().storage.db_path == Path("~/seedi-test.db").expanduser().resolve()

    def test_ensure_directories(self, monkeypatch, tmp_path):
        monkeypatch.setenv("SEEDI_DB_PATH", str(tmp_path / "nested" / "seedi.db"))
        monkeypatch.setenv("SEEDI_DEBUG", "true")
        monkeypatch.setenv("SEEDI_TRACE_PATH", str(tmp_path / "traces"))
        reset_settings()
        get_settings().ensure_directories()
        assert (tmp_path / "nested").is_dir()
        assert (tmp_path / "traces").is_dir()


class TestLogging:
    """Tests for configure_logging and JsonFormatter."""

    @pytest.fixture(autouse=True)
    def _restore_logger(self):
        logger = logging.getLogger("seedi")
        handlers, level = list(logger.handlers), logger.level
        yield
        logger.handlers = handlers
        logger.setLevel(level)

    def test_single_named_handler(self):
        configure_logging(LoggingSettings(LOG_LEVEL="WARNING", LOG_FORMAT="text"))
        logger = configure_logging(LoggingSettings(LOG_LEVEL="INFO", LOG_FORMAT="json"))
        named = [h for h in logger.handlers if h.get_name() == "seedi"]
        assert len(named) == 1
        assert isinstance(named[0].formatter, JsonFormatter)
        assert logger.level == logging.INFO

    def test_json_formatter(self):
        record = logging.LogRecord(
            "seedi.catalog.store", logging.INFO, __file__, 1, "Loaded %d innovations", (12,), None
        )
        payload = json.loads(JsonFormatter().format(record))
        assert payload["message"] == "Loaded 12 innovations"
        assert payload["level"] == "INFO"
        assert payload["logger"] == "seedi.catalog.store"


class TestTracer:
    """Tests for Tracer spans and export."""

    def test_span_ok(self):
        tracer = Tracer("seedi.test")
        with tracer.span("work", attributes={"n": 1}) as span:
            span.set_attribute("m", 2)
        recorded = tracer.get_spans()[0]
        assert recorded.name == "seedi.test.work"
        assert recorded.status == SpanStatus.OK
        assert recorded.attributes == {"n": 1, "m": 2}
        assert recorded.duration_ms is not None

    def test_span_error_reraises(self):
        tracer = Tracer("seedi.test")
        with pytest.raises(KeyError):
            with tracer.span("boom"):
                raise KeyError("x")
        assert tracer.get_spans()[0].status == SpanStatus.ERROR

    def test_nested_spans_link_parent(self):
        tracer = Tracer("seedi.test")
        with tracer.span("outer") as outer:
            with tracer.span("inner") as inner:
                pass
        assert inner.parent_id == outer.span_id
        assert outer.parent_id is None

    def test_exports_jsonl(self, tmp_path):
        tracer = Tracer("seedi.test", export_path=tmp_path)
        with tracer.span("export"):
            pass
        files = list(tmp_path.glob("trace_*.jsonl"))
        assert len(files) == 1
        line = json.loads(files[0].read_text().splitlines()[0])
        assert line["name"] == "seedi.test.export"
        assert line["status"] == "ok"

    def test_registry(self):
        assert get_tracer("seedi.a") is get_tracer("seedi.a")
        first = get_tracer("seedi.a")
        reset_tracers()
        assert get_tracer("seedi.a") is not first
