from __future__ import annotations

import os
from collections.abc import Callable, Generator

import pytest

from app.config import AppSettings, LayoutSettings, ViewerSettings


def _clear_fsmv_env() -> None:
    for key in list(os.environ):
        if key.startswith("FSMV_"):
            os.environ.pop(key, None)


_clear_fsmv_env()


@pytest.fixture(autouse=True)
def clear_fsmv_env() -> Generator[None, None, None]:
    _clear_fsmv_env()
    yield
    _clear_fsmv_env()


@pytest.fixture
def viewer_settings() -> ViewerSettings:
    return ViewerSettings(title="Test Viewer", log_level="DEBUG", layout=LayoutSettings())


@pytest.fixture
def app_settings(viewer_settings: ViewerSettings) -> AppSettings:
    return AppSettings(viewer=viewer_settings)


@pytest.fixture
def app_settings_factory(
    viewer_settings: ViewerSettings,
) -> Callable[..., AppSettings]:
    def _factory(**overrides: object) -> AppSettings:
        return AppSettings(viewer=viewer_settings.model_copy(update=overrides))

    return _factory
