"""Pytest configuration and fixtures."""

from collections.abc import Generator
from pathlib import Path

import pytest

from eventseal.audit.signer import EventSigner
from eventseal.config import Settings


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    """Per-test temporary directory."""
    return tmp_path


@pytest.fixture
def signer() -> EventSigner:
    """Signer with a fixed test secret."""
    return EventSigner(b"test-secret")


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated eventseal settings scoped to tests."""

    import eventseal.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    data_dir = temp_dir / "appdata"
    config_dir = temp_dir / "appconfig"
    data_dir.mkdir(parents=True, exist_ok=True)
    config_dir.mkdir(parents=True, exist_ok=True)

    settings = config_module.Settings(
        data_dir=data_dir,
        config_dir=config_dir,
        audit_enabled=True,
        audit_secret="cli-test-secret",
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings
