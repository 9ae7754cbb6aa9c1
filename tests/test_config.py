import pytest

from core.config import AppSettings, get_settings, reset_settings


@pytest.fixture
def clean_env(monkeypatch):
    for key in ["OPENAI_API_KEY", "DEEPSEEK_API_KEY", "GEMINI_API_KEY", "GOOGLE_API_KEY",
                "GOOGLE_GENAI_API_KEY", "DEFAULT_MODEL", "REQUEST_TIMEOUT"]:
        monkeypatch.delenv(key, raising=False)
    yield monkeypatch
    reset_settings()


def test_defaults_without_credentials(clean_env):
    settings = AppSettings(_env_file=None)
    assert settings.DEFAULT_MODEL == "openai:gpt-5-mini"
    assert settings.REQUEST_TIMEOUT == 60.0
    for provider in ("openai", "deepseek", "google"):
        assert settings.credential_for(provider) is None


def test_credentials_from_environment(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "sk-env")
    clean_env.setenv("DEEPSEEK_API_KEY", "ds-env")
    clean_env.setenv("REQUEST_TIMEOUT", "15")

    settings = AppSettings(_env_file=None)
    assert settings.credential_for("openai") == "sk-env"
    assert settings.credential_for("deepseek") == "ds-env"
    assert settings.REQUEST_TIMEOUT == 15.0


@pytest.mark.parametrize("alias", ["GEMINI_API_KEY", "GOOGLE_API_KEY", "GOOGLE_GENAI_API_KEY"])
def test_gemini_key_aliases(clean_env, alias):
    clean_env.setenv(alias, "gm-env")
    assert AppSettings(_env_file=None).credential_for("google") == "gm-env"


def test_empty_credential_counts_as_missing(clean_env):
    clean_env.setenv("OPENAI_API_KEY", "")
    assert AppSettings(_env_file=None).credential_for("openai") is None


def test_base_urls(clean_env):
    settings = AppSettings(_env_file=None)
    assert settings.base_url_for("deepseek") == "https://api.deepseek.com"
    with pytest.raises(KeyError):
        settings.base_url_for("acme")


def test_get_settings_is_cached_until_reset(clean_env):
    first = get_settings()
    assert get_settings() is first
    reset_settings()
    assert get_settings() is not first
