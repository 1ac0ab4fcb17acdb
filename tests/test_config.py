"""Tests for credential loading."""

from __future__ import annotations

import pytest

from salute_speech.config import build_auth_key, load_auth_key

_VARS = ("SALUTE_SPEECH_AUTH_KEY", "SALUTE_SPEECH_CLIENT_ID", "SALUTE_SPEECH_CLIENT_SECRET")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _VARS:
        monkeypatch.delenv(name, raising=False)


def test_build_auth_key():
    assert build_auth_key("id", "secret") == "aWQ6c2VjcmV0"


def test_auth_key_from_env(monkeypatch):
    monkeypatch.setenv("SALUTE_SPEECH_AUTH_KEY", "  abc==  ")
    assert load_auth_key() == "abc=="


def test_auth_key_built_from_client_credentials(monkeypatch):
    monkeypatch.setenv("SALUTE_SPEECH_CLIENT_ID", "id")
    monkeypatch.setenv("SALUTE_SPEECH_CLIENT_SECRET", "secret")
    assert load_auth_key() == "aWQ6c2VjcmV0"


def test_explicit_key_wins_over_client_credentials(monkeypatch):
    monkeypatch.setenv("SALUTE_SPEECH_AUTH_KEY", "explicit")
    monkeypatch.setenv("SALUTE_SPEECH_CLIENT_ID", "id")
    monkeypatch.setenv("SALUTE_SPEECH_CLIENT_SECRET", "secret")
    assert load_auth_key() == "explicit"


def test_missing_credentials_raise(monkeypatch):
    with pytest.raises(ValueError, match="SALUTE_SPEECH_AUTH_KEY"):
        load_auth_key()


def test_client_id_alone_is_not_enough(monkeypatch):
    monkeypatch.setenv("SALUTE_SPEECH_CLIENT_ID", "id")
    with pytest.raises(ValueError):
        load_auth_key()
