import json

import pytest

import config


@pytest.fixture(autouse=True)
def _clean_environment(monkeypatch, tmp_path):
    for name in (
        "NOTEFALL_CONFIG_PATH",
        "NOTEFALL_CHART_PATH",
        "NOTEFALL_SEED",
        "NOTEFALL_FRAME_INTERVAL_MS",
        "NOTEFALL_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config, "_default_config_candidates", lambda: [tmp_path / "notefall_config.json"])


def test_defaults_when_no_file_exists():
    app_config, resolved_path = config.load_config()
    assert resolved_path is None
    assert app_config.chart.path is None
    assert app_config.chart.seed == 1
    assert app_config.input.lane_keys == {"green": "H", "red": "J", "blue": "K", "yellow": "L"}
    assert app_config.logging.level == "INFO"


def test_file_values_are_loaded(tmp_path):
    config_path = tmp_path / "custom.json"
    config_path.write_text(
        json.dumps(
            {
                "chart": {"path": " song.csv ", "seed": 42},
                "input": {"lane_keys": {"Green": "A", "red": "S", "blue": "D", "yellow": "F"}},
                "logging": {"level": "warn"},
            }
        ),
        encoding="utf-8",
    )
    app_config, resolved_path = config.load_config(config_path)
    assert resolved_path == config_path
    assert app_config.chart.path == "song.csv"
    assert app_config.chart.seed == 42
    assert app_config.input.lane_keys["green"] == "A"
    assert app_config.logging.level == "WARNING"


def test_environment_overrides_file(tmp_path, monkeypatch):
    config_path = tmp_path / "custom.json"
    config_path.write_text(json.dumps({"chart": {"seed": 3}}), encoding="utf-8")
    monkeypatch.setenv("NOTEFALL_CONFIG_PATH", str(config_path))
    monkeypatch.setenv("NOTEFALL_SEED", "77")
    monkeypatch.setenv("NOTEFALL_LOG_LEVEL", "debug")
    app_config, resolved_path = config.load_config()
    assert resolved_path == config_path
    assert app_config.chart.seed == 77
    assert app_config.logging.level == "DEBUG"


@pytest.mark.parametrize(
    "payload",
    [
        {"chart": {"seed": -1}},
        {"input": {"lane_keys": {"green": "H", "red": "H", "blue": "K", "yellow": "L"}}},
        {"input": {"lane_keys": {"green": "H", "red": "J", "blue": "K"}}},
        {"logging": {"level": "LOUD"}},
        {"window": {"frame_interval_ms": 0}},
    ],
)
def test_invalid_values_raise_value_error(tmp_path, payload):
    config_path = tmp_path / "bad.json"
    config_path.write_text(json.dumps(payload), encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_config(config_path)


def test_non_object_json_is_rejected(tmp_path):
    config_path = tmp_path / "list.json"
    config_path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError):
        config.load_config(config_path)


def test_to_json_round_trips_through_model():
    app_config, _ = config.load_config()
    assert config.AppConfig.model_validate(json.loads(config.to_json(app_config))) == app_config
