"""Tests for settings loading from YAML and environment."""

import pytest

from api.settings import Settings, load_settings, load_settings_file


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "DISCLOSURE_SETTINGS_PATH",
        "DISCLOSURE_API_BASE_URL",
        "DISCLOSURE_STORAGE_DIR",
        "DISCLOSURE_DEFAULT_REGION",
        "DISCLOSURE_RATE_LIMIT_MS",
        "DISCLOSURE_RETRY_DELAY_MS",
        "DISCLOSURE_MAX_ATTEMPTS",
        "DISCLOSURE_HTTP_TIMEOUT",
        "DISCLOSURE_MAX_SESSIONS",
    ):
        monkeypatch.delenv(var, raising=False)


def test_defaults_without_file(tmp_path):
    empty = tmp_path / "empty.yaml"
    empty.write_text("", encoding="utf-8")
    assert load_settings(empty) == Settings()


def test_yaml_values_are_applied(tmp_path):
    path = tmp_path / "disclosure.yaml"
    path.write_text(
        "api_base_url: https://contact.example.com\nrate_limit_ms: 500\nmax_attempts: 5\n",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.api_base_url == "https://contact.example.com"
    assert settings.rate_limit_ms == 500
    assert settings.max_attempts == 5
    assert settings.default_region == "GH"


def test_env_overrides_yaml(tmp_path, monkeypatch):
    path = tmp_path / "disclosure.yaml"
    path.write_text("rate_limit_ms: 500\n", encoding="utf-8")
    monkeypatch.setenv("DISCLOSURE_RATE_LIMIT_MS", "750")
    monkeypatch.setenv("DISCLOSURE_STORAGE_DIR", str(tmp_path))
    settings = load_settings(path)
    assert settings.rate_limit_ms == 750
    assert settings.storage_dir == str(tmp_path)


def test_settings_path_from_env(tmp_path, monkeypatch):
    path = tmp_path / "custom.yaml"
    path.write_text("default_region: NG\n", encoding="utf-8")
    monkeypatch.setenv("DISCLOSURE_SETTINGS_PATH", str(path))
    assert load_settings().default_region == "NG"


def test_unknown_keys_are_rejected(tmp_path):
    path = tmp_path / "disclosure.yaml"
    path.write_text("rate_limit: 10\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Unknown settings: rate_limit"):
        load_settings_file(path)


def test_non_mapping_yaml_is_rejected(tmp_path):
    path = tmp_path / "disclosure.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ValueError, match="mapping"):
        load_settings_file(path)


def test_bad_number_is_rejected(tmp_path, monkeypatch):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    monkeypatch.setenv("DISCLOSURE_MAX_ATTEMPTS", "many")
    with pytest.raises(ValueError, match="max_attempts"):
        load_settings(path)


def test_max_attempts_must_be_positive(tmp_path, monkeypatch):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    monkeypatch.setenv("DISCLOSURE_MAX_ATTEMPTS", "0")
    with pytest.raises(ValueError, match="at least 1"):
        load_settings(path)


def test_max_sessions_must_be_positive(tmp_path, monkeypatch):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    monkeypatch.setenv("DISCLOSURE_MAX_SESSIONS", "0")
    with pytest.raises(ValueError, match="max_sessions"):
        load_settings(path)
