from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.services.diagram import LayoutConfig

DEFAULT_CONFIG_PATH = Path("config/viewer.yaml")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class LayoutSettings(BaseModel):
    border: float = Field(default=20.0, gt=0)
    state_space: float = Field(default=16.0, gt=0)
    special_node_offset: float = Field(default=8.0, gt=0)
    min_distance: float = Field(default=4.0, gt=0)

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            border=self.border,
            state_space=self.state_space,
            special_node_offset=self.special_node_offset,
            min_distance=self.min_distance,
        )


class ViewerSettings(BaseModel):
    title: str = "FSM Diagram Viewer"
    log_level: str = "INFO"
    output_dir: Path = Path("data/svg_out")
    layout: LayoutSettings = LayoutSettings()

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> str:
        level = str(value or "INFO").strip().upper()
        if level not in logging.getLevelNamesMapping():
            msg = f"viewer.log_level must be a logging level name, got {value!r}"
            raise ValueError(msg)
        return level


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="FSMV_", env_nested_delimiter="__")

    viewer: ViewerSettings = ViewerSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv("FSMV_CONFIG_PATH")
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous


def configure_logging(settings: AppSettings) -> None:
    logging.basicConfig(level=settings.viewer.log_level, format=LOG_FORMAT)
