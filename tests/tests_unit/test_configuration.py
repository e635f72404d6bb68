import os
from concurrent.futures import ThreadPoolExecutor
from io import StringIO
from pathlib import Path
from unittest.mock import patch

import pytest

from kron.clock import SystemClock
from kron.configuration import (
    ConfigFormat,
    LogConsoleHandlerConfig,
    LogFileHandlerConfig,
    LogLevel,
    MetricsConfig,
    PatternConfig,
    SchedulerConfig,
    load_dict,
    load_file,
    load_io,
)
from kron.exceptions import InvalidConfigError
from kron.pattern import Pattern

CONFIG_EXAMPLE = """
timezone: Europe/Oslo
max-workers: 8

log-handlers:
  - type: console
    level: info
  - type: file
    level: DEBUG
    path: logs/kron.log
    retention: 3

metrics:
  server:
    port: 9100

schedules:
  nightly-report: "0 2 * * *"
  poll-inbox: "*/5 8-17 * * MON-FRI"
"""


def test_load_yaml() -> None:
    config = load_io(StringIO(CONFIG_EXAMPLE), ConfigFormat.YAML, SchedulerConfig)

    assert config.timezone == "Europe/Oslo"
    assert config.max_workers == 8

    console, file = config.log_handlers
    assert isinstance(console, LogConsoleHandlerConfig)
    assert console.level == LogLevel.INFO
    assert isinstance(file, LogFileHandlerConfig)
    assert file.level == LogLevel.DEBUG
    assert file.path == Path("logs/kron.log")
    assert file.retention == 3

    assert config.metrics is not None
    assert config.metrics.server is not None
    assert config.metrics.server.port == 9100
    assert config.metrics.server.host == "0.0.0.0"

    assert config.schedules["nightly-report"].pattern == Pattern.parse("0 2 * * *")
    assert str(config.schedules["poll-inbox"]) == "*/5 8-17 * * MON-FRI"


def test_defaults() -> None:
    config = load_dict({}, SchedulerConfig)

    assert config.timezone == "UTC"
    assert config.max_workers is None
    assert config.metrics is None
    assert config.schedules == {}
    assert config.log_handlers == [LogConsoleHandlerConfig(type="console", level=LogLevel.INFO)]


def test_empty_yaml_document() -> None:
    config = load_io(StringIO(""), ConfigFormat.YAML, SchedulerConfig)

    assert config.timezone == "UTC"


def test_load_json() -> None:
    config = load_io(
        StringIO('{"timezone": "America/New_York", "schedules": {"hourly": "0 * * * *"}}'),
        ConfigFormat.JSON,
        SchedulerConfig,
    )

    assert config.timezone == "America/New_York"
    assert config.schedules["hourly"] == PatternConfig("0 * * * *")


def test_invalid_json() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        load_io(StringIO('{"timezone": '), ConfigFormat.JSON, SchedulerConfig)

    assert "Invalid JSON" in excinfo.value.message


def test_environment_variables() -> None:
    with patch.dict(os.environ, {"KRON_TZ": "Asia/Tokyo", "KRON_REPORT_SCHEDULE": "30 6 * * *"}):
        config = load_io(
            StringIO("timezone: ${KRON_TZ}\nschedules:\n  report: ${KRON_REPORT_SCHEDULE}\n"),
            ConfigFormat.YAML,
            SchedulerConfig,
        )

    assert config.timezone == "Asia/Tokyo"
    assert config.schedules["report"].pattern == Pattern.parse("30 6 * * *")


def test_invalid_pattern() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        load_io(StringIO('schedules:\n  report: "61 * * * *"\n'), ConfigFormat.YAML, SchedulerConfig)

    assert excinfo.value.details is not None
    (detail,) = excinfo.value.details
    assert detail.startswith("Schedule 'report': Invalid pattern '61 * * * *'")
    assert "greater than max of [59]" in detail


def test_all_errors_are_reported() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        load_dict(
            {"max-workers": 0, "schedules": {"a": "* * *", "b": "0 0 * * *"}, "unknown-field": 1},
            SchedulerConfig,
        )

    assert excinfo.value.details is not None
    subjects = sorted(detail.split(": ", 1)[0] for detail in excinfo.value.details)
    assert subjects == ["Schedule 'a'", "max-workers", "unknown-field"]
    assert str(excinfo.value).startswith("Invalid config: ")


def test_invalid_log_handler() -> None:
    with pytest.raises(InvalidConfigError):
        load_dict({"log-handlers": [{"type": "syslog", "level": "INFO"}]}, SchedulerConfig)

    with pytest.raises(InvalidConfigError):
        load_dict({"log-handlers": [{"type": "console", "level": "LOUD"}]}, SchedulerConfig)


def test_log_levels() -> None:
    assert LogLevel("trace") == LogLevel.TRACE
    assert LogLevel("Warning") == LogLevel.WARNING
    with pytest.raises(ValueError):
        LogLevel("LOUD")
    with pytest.raises(ValueError):
        LogLevel(3)


def test_invalid_yaml() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        load_io(StringIO("timezone: 'UTC\nschedules: {}\n"), ConfigFormat.YAML, SchedulerConfig)

    assert "Invalid YAML" in excinfo.value.message


def test_yaml_root_must_be_object() -> None:
    with pytest.raises(InvalidConfigError):
        load_io(StringIO("- a\n- b\n"), ConfigFormat.YAML, SchedulerConfig)


def test_load_file(tmp_path: Path) -> None:
    path = tmp_path / "kron.yaml"
    path.write_text(CONFIG_EXAMPLE)

    config = load_file(path, SchedulerConfig)

    assert config.max_workers == 8


def test_load_file_unknown_type(tmp_path: Path) -> None:
    path = tmp_path / "kron.toml"
    path.write_text("timezone = 'UTC'")

    with pytest.raises(InvalidConfigError) as excinfo:
        load_file(path, SchedulerConfig)

    assert excinfo.value.message == "Unknown file type .toml"


def test_pattern_config() -> None:
    config = PatternConfig("0 12 * JAN,JUL SUN")

    assert config.pattern == Pattern.parse("0 12 * 1,7 0")
    assert str(config) == "0 12 * JAN,JUL SUN"
    assert config == PatternConfig("0 12 * 1,7 0")
    assert hash(config) == hash(PatternConfig("0 12 * 1,7 0"))

    with pytest.raises(ValueError):
        PatternConfig("* * * A *")


def test_serialization() -> None:
    config = SchedulerConfig(schedules={"report": PatternConfig("0 2 * * *")})

    dumped = config.model_dump(mode="json", by_alias=True)

    assert dumped["schedules"] == {"report": "0 2 * * *"}
    assert "log-handlers" in dumped
    assert load_dict(dumped, SchedulerConfig) == config


def test_create_clock_and_executor() -> None:
    config = SchedulerConfig(timezone="Europe/Oslo", max_workers=3)

    clock = config.create_clock()
    assert isinstance(clock, SystemClock)
    assert clock.now().utcoffset() is not None

    executor = config.create_executor()
    try:
        assert isinstance(executor, ThreadPoolExecutor)
        assert executor._max_workers == 3
    finally:
        executor.shutdown()


def test_metrics_server() -> None:
    with patch("kron.configuration.models.start_http_server") as start_http_server:
        MetricsConfig.model_validate({"server": {"port": 9200, "host": "127.0.0.1"}}).start()
        MetricsConfig().start()

    start_http_server.assert_called_once()
    assert start_http_server.call_args.args == (9200, "127.0.0.1")


def test_nested_error_locations() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        load_dict({"log-handlers": [{"type": "console", "level": "INFO"}, {"type": "file"}]}, SchedulerConfig)

    assert excinfo.value.details is not None
    assert all(detail.startswith("log-handlers[1]") for detail in excinfo.value.details)


def test_missing_environment_variable() -> None:
    with patch.dict(os.environ, clear=True):
        with pytest.raises(InvalidConfigError) as excinfo:
            load_io(StringIO("timezone: UTC\nschedules:\n  report: ${KRON_UNSET}\n"), ConfigFormat.YAML)

    assert excinfo.value.message == "Environment variable KRON_UNSET is not set (line 3)"


def test_json_root_must_be_object() -> None:
    with pytest.raises(InvalidConfigError) as excinfo:
        load_io(StringIO('["0 * * * *"]'), ConfigFormat.JSON)

    assert excinfo.value.message == "The root of a JSON configuration must be an object"


def test_scheduler_config_is_the_default_schema(tmp_path: Path) -> None:
    path = tmp_path / "kron.json"
    path.write_text('{"schedules": {"hourly": "0 * * * *"}}')

    config = load_file(path)

    assert isinstance(config, SchedulerConfig)
    assert config.schedules["hourly"].pattern == Pattern.parse("0 * * * *")
