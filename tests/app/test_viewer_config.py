from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from app.config import AppSettings, ViewerSettings, load_settings
from domain.services.diagram import LayoutConfig


def test_defaults_match_layout_constants() -> None:
    settings = AppSettings()

    assert settings.viewer.log_level == "INFO"
    assert settings.viewer.layout.to_layout_config() == LayoutConfig()


def test_env_overrides_nested_layout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("FSMV_VIEWER__LAYOUT__BORDER", "30")
    monkeypatch.setenv("FSMV_VIEWER__LOG_LEVEL", "debug")

    settings = AppSettings()

    assert settings.viewer.layout.border == 30
    assert settings.viewer.log_level == "DEBUG"


def test_load_settings_from_yaml(tmp_path: Path) -> None:
    config_path = tmp_path / "viewer.yaml"
    config_path.write_text(
        "viewer:\n"
        "  title: From YAML\n"
        "  output_dir: out/svg\n"
        "  layout:\n"
        "    state_space: 24\n",
        encoding="utf-8",
    )

    settings = load_settings(config_path)

    assert settings.viewer.title == "From YAML"
    assert settings.viewer.output_dir == Path("out/svg")
    assert settings.viewer.layout.state_space == 24
    assert settings.viewer.layout.border == 20


def test_env_wins_over_yaml(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "viewer.yaml"
    config_path.write_text("viewer:\n  title: From YAML\n", encoding="utf-8")
    monkeypatch.setenv("FSMV_CONFIG_PATH", str(config_path))
    monkeypatch.setenv("FSMV_VIEWER__TITLE", "From env")

    settings = load_settings()

    assert settings.viewer.title == "From env"


def test_missing_config_file_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_settings(tmp_path / "missing.yaml")


def test_invalid_values_are_rejected() -> None:
    with pytest.raises(ValidationError):
        ViewerSettings(log_level="LOUD")
    with pytest.raises(ValidationError):
        ViewerSettings.model_validate({"layout": {"state_space": 0}})

