"""Telemetry instrumentation unit tests."""

from __future__ import annotations

import logging
import random
from unittest.mock import MagicMock

import pytest

from seabattle.config import GameConfig
from seabattle.engine.board import Board
from seabattle.engine.errors import GameNotFound
from seabattle.engine.ship import Coordinate
from seabattle.service import SessionRegistry
from seabattle.telemetry import config as telemetry_config_module
from seabattle.telemetry import logger as logger_module
from seabattle.telemetry import metrics as metrics_module
from seabattle.telemetry import tracer as tracer_module
from seabattle.telemetry.config import TelemetryConfig


class DummySpan:
    def __init__(self, names: list[str], span_name: str) -> None:
        self._names = names
        self._names.append(span_name)
        self.attributes: dict = {}

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        return False

    def set_attribute(self, key, value):
        self.attributes[key] = value


class DummyTracer:
    def __init__(self) -> None:
        self.span_names: list[str] = []

    def start_as_current_span(self, name: str):
        return DummySpan(self.span_names, name)


def reset_singletons() -> None:
    tracer_module._TRACER = None
    tracer_module._TRACER_PROVIDER = None
    metrics_module._METER = None
    metrics_module._METER_PROVIDER = None
    metrics_module._INSTRUMENTS = {}


def test_lazy_init_tracer_and_meter(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    assert tracer_module.get_tracer() is tracer_module.get_tracer()

    provider_instance = MagicMock()
    provider_instance.get_tracer.return_value = MagicMock()
    monkeypatch.setattr(tracer_module, "TracerProvider", MagicMock(return_value=provider_instance))
    monkeypatch.setattr(tracer_module, "OTLPSpanExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(tracer_module, "BatchSpanProcessor", MagicMock())
    monkeypatch.setattr(tracer_module.trace, "set_tracer_provider", MagicMock())
    tracer_module.init_tracing(
        TelemetryConfig(enable_tracing=True, otlp_traces_endpoint="http://example")
    )
    assert tracer_module._TRACER is provider_instance.get_tracer.return_value
    tracer_module.OTLPSpanExporter.assert_called_once_with(endpoint="http://example", insecure=True)

    meter_provider = MagicMock()
    meter_provider.get_meter.return_value = MagicMock()
    monkeypatch.setattr(metrics_module, "MeterProvider", MagicMock(return_value=meter_provider))
    monkeypatch.setattr(metrics_module, "OTLPMetricExporter", MagicMock(return_value=MagicMock()))
    monkeypatch.setattr(metrics_module, "PeriodicExportingMetricReader", MagicMock())
    monkeypatch.setattr(metrics_module.otel_metrics, "set_meter_provider", MagicMock())
    metrics_module.init_metrics(
        TelemetryConfig(enable_metrics=True, otlp_metrics_endpoint="http://example")
    )
    assert metrics_module._METER is meter_provider.get_meter.return_value
    reset_singletons()


def test_record_game_metric_reuses_counters(monkeypatch: pytest.MonkeyPatch) -> None:
    reset_singletons()
    meter = MagicMock()
    monkeypatch.setattr(metrics_module, "_METER", meter)

    metrics_module.record_game_metric("seabattle_test_total", 1, {"mode": "Local"})
    metrics_module.record_game_metric("seabattle_test_total", 2)

    meter.create_counter.assert_called_once_with("seabattle_test_total")
    counter = meter.create_counter.return_value
    counter.add.assert_any_call(1, attributes={"mode": "Local"})
    counter.add.assert_any_call(2, attributes={})
    reset_singletons()


def test_get_logger_defaults_to_info() -> None:
    logger = logger_module.get_logger("seabattle.test")
    assert logger.level == logging.INFO


def test_init_telemetry_noop(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(tracer_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(metrics_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(logger_module, "init_logging", lambda cfg: calls.append("lo"))

    telemetry_config_module.init_telemetry(TelemetryConfig())
    assert calls == []


def test_init_telemetry_respects_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[str] = []

    monkeypatch.setattr(tracer_module, "init_tracing", lambda cfg: calls.append("tr"))
    monkeypatch.setattr(metrics_module, "init_metrics", lambda cfg: calls.append("me"))
    monkeypatch.setattr(logger_module, "init_logging", lambda cfg: calls.append("lo"))

    config = TelemetryConfig(enable_tracing=True, enable_logging=True)
    telemetry_config_module.init_telemetry(config)
    assert calls == ["tr", "lo"]


def test_config_from_env_derives_endpoints(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "SEABATTLE_ENABLE_TRACING",
        "SEABATTLE_ENABLE_METRICS",
        "SEABATTLE_ENABLE_LOGGING",
        "OTEL_TRACES_ENABLED",
        "OTEL_METRICS_ENABLED",
        "OTEL_LOGS_ENABLED",
        "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT",
        "OTEL_EXPORTER_OTLP_METRICS_ENDPOINT",
        "OTEL_EXPORTER_OTLP_LOGS_ENDPOINT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://collector:4317/")
    monkeypatch.setenv("OTEL_SERVICE_NAME", "sessions")
    monkeypatch.setenv("OTEL_RESOURCE_ATTRIBUTES", "deployment.environment=test,bogus")

    config = TelemetryConfig.from_env()
    assert config.otlp_traces_endpoint == "http://collector:4317/v1/traces"
    assert config.otlp_logs_endpoint == "http://collector:4317/v1/logs"
    assert config.enable_tracing and config.enable_metrics and config.enable_logging
    assert config.service_name == "sessions"
    assert config.resource_dict()["deployment.environment"] == "test"


def test_config_from_env_flags(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OTEL_EXPORTER_OTLP_ENDPOINT", "OTEL_EXPORTER_OTLP_TRACES_ENDPOINT"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("SEABATTLE_ENABLE_TRACING", "yes")
    monkeypatch.setenv("SEABATTLE_ENABLE_METRICS", "off")
    config = TelemetryConfig.from_env()
    assert config.enable_tracing is True


def test_load_telemetry_config_cached(monkeypatch: pytest.MonkeyPatch) -> None:
    telemetry_config_module.load_telemetry_config.cache_clear()
    calls = {"count": 0}

    class CountingConfig:
        @classmethod
        def from_env(cls, **overrides):
            calls["count"] += 1
            return TelemetryConfig(enable_tracing=True)

    monkeypatch.setattr(telemetry_config_module, "TelemetryConfig", CountingConfig)

    first = telemetry_config_module.load_telemetry_config()
    second = telemetry_config_module.load_telemetry_config()
    assert first is second
    assert calls["count"] == 1
    telemetry_config_module.load_telemetry_config.cache_clear()


def test_registry_emits_spans_and_metrics(monkeypatch: pytest.MonkeyPatch) -> None:
    tracer = DummyTracer()
    metric_calls: list[tuple[str, float, dict | None]] = []

    monkeypatch.setattr("seabattle.service.registry.tracer", tracer)
    monkeypatch.setattr(
        "seabattle.service.registry.record_game_metric",
        lambda name, value, attrs=None: metric_calls.append((name, value, attrs)),
    )

    registry = SessionRegistry(GameConfig(rng_seed=8))
    created = registry.create_game(10)
    registry.join_game(created.game_id, "P2")
    registry.shoot(created.game_id, created.player_id, 0, 0)
    with pytest.raises(GameNotFound):
        registry.game_status("missing", created.player_id)

    assert tracer.span_names == [
        "registry.create_game",
        "registry.join_game",
        "registry.shoot",
        "registry.game_status",
    ]
    metric_names = [name for name, _, _ in metric_calls]
    assert metric_names == [
        "seabattle_sessions_created_total",
        "seabattle_rejected_operations_total",
    ]
    assert metric_calls[1][2] == {"operation": "game_status", "reason": "GameNotFound"}


def test_board_logs_structured_shot_events(caplog: pytest.LogCaptureFixture) -> None:
    board = Board(owner="player-x")
    with caplog.at_level(logging.INFO, logger="seabattle.engine.board"):
        board.receive_shot(Coordinate(2, 3))

    record = next(r for r in caplog.records if r.getMessage() == "shot_resolved")
    assert record.result == "Water"
    assert (record.x, record.y) == (2, 3)
    assert record.owner == "player-x"


def test_placement_span_is_opened(monkeypatch: pytest.MonkeyPatch) -> None:
    from seabattle.engine import placement

    tracer = DummyTracer()
    monkeypatch.setattr(placement, "tracer", tracer)
    placement.place_fleet(Board(), random.Random(0))
    assert tracer.span_names == ["placement.place_fleet"]
