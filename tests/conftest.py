"""Shared fixtures."""

import pytest

_ENV_VARS = (
    "GITHUB_TOKEN",
    "GITHUB_REPOSITORY",
    "GITHUB_SHA",
    "GITHUB_JOB",
    "GITHUB_API_URL",
    "GATE_CHECK_NAME",
    "GATE_TIMEOUT_MINUTES",
    "GATE_PAGE_SIZE",
    "GATE_POLL_INTERVAL_SECONDS",
    "GATE_ALLOWED_CONCLUSIONS",
    "GATE_REQUIRE_OTHER_CHECKS",
    "GATE_REGISTRY_RETRIES",
    "GATE_REQUEST_TIMEOUT_SECONDS",
    "LOG_LEVEL",
    "LOG_FORMAT",
    "SANITIZE_LOGS",
)


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Isolate settings from the CI environment running the tests."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    # Keep a developer's .env out of the picture
    monkeypatch.chdir(tmp_path)
    yield monkeypatch
