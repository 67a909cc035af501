from __future__ import annotations

from pathlib import Path  # noqa: TC003

import pytest

_ENVIRONMENT = (
    "CF_API_URL",
    "CF_ACCESS_TOKEN",
    "CF_SKIP_SSL_VALIDATION",
    "CF_ORGANIZATION",
    "CF_SPACE",
    "CF_APP_NAME",
    "CFRESTART_POLL_INTERVAL",
)


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    """Keep tests away from the developer's Cloud Foundry session and data dir."""

    for name in _ENVIRONMENT:
        monkeypatch.delenv(name, raising=False)
    data_dir = tmp_path / "cfrestart-data"
    monkeypatch.setenv("CFRESTART_DATA_DIR", str(data_dir))
    return data_dir


@pytest.fixture
def cf_session(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CF_API_URL", "https://api.example.com/")
    monkeypatch.setenv("CF_ACCESS_TOKEN", "bearer token-123")
