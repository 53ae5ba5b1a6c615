from pathlib import Path

import pytest

from dictmaths.core.config import DictMathsConfig, load_config
from dictmaths.core.exceptions import ConfigLoadError, ConfigValidationError
from dictmaths.core.types import TABLE_PRIMES


def test_defaults_are_valid():
    config = DictMathsConfig()
    assert config.validate() == []
    assert config.moduli == TABLE_PRIMES
    assert config.allow_partial is False
    assert config.check() is config


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("DICTMATHS_MIN_RESIDUES", "3")
    monkeypatch.setenv("DICTMATHS_MODULI", "23, 41,0x47")
    monkeypatch.setenv("DICTMATHS_VALIDATE_ORDER", "false")
    monkeypatch.setenv("DICTMATHS_LOG_FILE", "none")
    monkeypatch.setenv("DICTMATHS_ALLOW_PARTIAL", "yes")

    config = DictMathsConfig()
    assert config.min_residues == 3
    assert config.moduli == (23, 41, 71)
    assert config.validate_order is False
    assert config.log_file is None
    assert config.allow_partial is True


def test_invalid_environment_value(monkeypatch):
    monkeypatch.setenv("DICTMATHS_MAX_WORKERS", "many")
    with pytest.raises(ConfigValidationError) as exc_info:
        DictMathsConfig()
    assert exc_info.value.field == "max_workers"


def test_yaml_round_trip(tmp_path):
    path = tmp_path / "dictmaths.yaml"
    original = DictMathsConfig(moduli=(23, 41, 71, 127), min_residues=4, log_file="run.log")
    original.to_yaml(str(path))

    loaded = DictMathsConfig.from_yaml(str(path))
    assert loaded.moduli == (23, 41, 71, 127)
    assert loaded.log_file == Path("run.log")
    assert loaded.to_dict() == original.to_dict()
    assert load_config(str(path)).min_residues == 4


def test_yaml_ignores_unknown_fields(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("max_workers: 3\nunrelated: true\n", encoding="utf-8")
    assert DictMathsConfig.from_yaml(str(path)).max_workers == 3


@pytest.mark.parametrize("content", ["moduli: [23, 41", "- 23\n- 41\n"])
def test_bad_yaml(tmp_path, content):
    path = tmp_path / "config.yaml"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigLoadError):
        DictMathsConfig.from_yaml(str(path))


def test_missing_yaml(tmp_path):
    with pytest.raises(ConfigLoadError) as exc_info:
        load_config(str(tmp_path / "missing.yaml"))
    assert exc_info.value.config_path.endswith("missing.yaml")


@pytest.mark.parametrize("overrides,fragment", [
    ({"moduli": (3, 23)}, "too small"),
    ({"moduli": (23, 23)}, "duplicates"),
    ({"moduli": ()}, "must not be empty"),
    ({"min_residues": 10}, "exceeds"),
    ({"max_workers": 0}, "max_workers"),
    ({"calibration_samples": 1}, "calibration_samples"),
    ({"marker_class": ""}, "marker_class"),
    ({"log_level": "LOUD"}, "log_level"),
])
def test_validation_errors(overrides, fragment):
    config = DictMathsConfig(**overrides)
    assert any(fragment in error for error in config.validate())
    with pytest.raises(ConfigValidationError) as exc_info:
        config.check()
    assert exc_info.value.details["errors"] == config.validate()
