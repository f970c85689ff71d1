"""Shared fixtures for the yoke test suite."""

import json
import logging
from pathlib import Path
from typing import Any, Dict

import pytest

from yoke.config.settings import YokeSettings


@pytest.fixture(autouse=True)
def isolated_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    """Run every test with a private home and working directory."""
    home = tmp_path / "home"
    project = tmp_path / "project"
    home.mkdir()
    project.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    for name in (
        "YOKE_DEBUG",
        "AEROBATIC_ENV",
        "YOKE_SETTINGS_DEBUG",
        "YOKE_SETTINGS_LOG_LEVEL",
        "YOKE_SETTINGS_ENVIRONMENT",
    ):
        # setenv first so the variable is restored even if a test exports it
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(project)
    yield project

    logger = logging.getLogger("yoke")
    logger.handlers.clear()
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def project_dir(isolated_environment: Path) -> Path:
    return isolated_environment


@pytest.fixture
def settings(tmp_path: Path) -> YokeSettings:
    return YokeSettings(credentials_file=tmp_path / "home" / ".aerobatic")


@pytest.fixture
def write_credentials(settings: YokeSettings):
    def _write(data: Any) -> Path:
        text = data if isinstance(data, str) else json.dumps(data)
        settings.credentials_file.write_text(text, encoding="utf-8")
        return settings.credentials_file

    return _write


@pytest.fixture
def write_manifest(project_dir: Path):
    def _write(data: Any) -> Path:
        path = project_dir / "package.json"
        text = data if isinstance(data, str) else json.dumps(data)
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def bound_manifest():
    """Factory for a package.json bound to an app."""
    def _manifest(app_id: str = "app-123", **extra: Any) -> Dict[str, Any]:
        manifest: Dict[str, Any] = {
            "name": "my-site",
            "version": "1.2.3",
            "scripts": {"build": "gulp build"},
            "_aerobatic": {"appId": app_id},
        }
        manifest.update(extra)
        return manifest

    return _manifest
