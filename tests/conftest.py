"""Shared pytest fixtures for crossiam tests."""
import pytest


@pytest.fixture(autouse=True)
def cloud_env(monkeypatch):
    """Prevent accidental real cloud calls and ambient credential files."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.delenv("AWS_SESSION_TOKEN", raising=False)
    monkeypatch.delenv("GOOGLE_APPLICATION_CREDENTIALS", raising=False)
