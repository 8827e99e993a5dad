"""Tests for environment-driven settings."""

from __future__ import annotations

import pytest

from ges_annex.config import Settings


def test_author_emails_accept_comma_separated_env(monkeypatch):
    monkeypatch.setenv("GES_ANNEX_AUTHOR_EMAILS", "Ama.Mensah@school.edu.gh, kojo@school.edu.gh,")

    settings = Settings(_env_file=None)

    assert settings.author_emails == ["ama.mensah@school.edu.gh", "kojo@school.edu.gh"]


def test_single_author_email_env(monkeypatch):
    monkeypatch.setenv("GES_ANNEX_AUTHOR_EMAILS", "kofi.boateng@school.edu.gh")

    assert Settings(_env_file=None).author_emails == ["kofi.boateng@school.edu.gh"]


def test_defaults_keep_store_in_memory(monkeypatch):
    monkeypatch.delenv("GES_ANNEX_DATA_FILE", raising=False)
    monkeypatch.delenv("GES_ANNEX_AUTHOR_EMAILS", raising=False)

    settings = Settings(_env_file=None)

    assert settings.data_path is None
    assert settings.author_emails == []


def test_session_limits_and_data_file_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GES_ANNEX_MAX_SESSIONS", "25")
    monkeypatch.setenv("GES_ANNEX_DATA_FILE", str(tmp_path / "store.json"))

    settings = Settings(_env_file=None)

    assert settings.MAX_SESSIONS == 25
    assert settings.data_path == tmp_path / "store.json"


def test_bcrypt_rounds_out_of_range_rejected(monkeypatch):
    monkeypatch.setenv("GES_ANNEX_BCRYPT_ROUNDS", "2")

    with pytest.raises(ValueError):
        Settings(_env_file=None)
