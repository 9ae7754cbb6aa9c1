import logging
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Base Path ---
BASE_DIR = Path(__file__).resolve().parent.parent
logger = logging.getLogger(__name__)

# --- Environment-based Settings ---

class AppSettings(BaseSettings):
    """
    Main application settings loaded from environment variables.
    The .env file is loaded automatically by pydantic-settings.
    """
    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

    # --- General & Core ---
    LOG_LEVEL: str = Field("INFO", description="Log level for the application (e.g., DEBUG, INFO, WARNING, ERROR)")
    DEFAULT_MODEL: str = Field("openai:gpt-5-mini", description="Model id used when the caller selects none.")
    MODELS_CONFIG_PATH: Optional[str] = Field(None, description="Optional: YAML file replacing the built-in model catalogue.")
    STORE_SNAPSHOT_PATH: Optional[str] = Field(None, description="Optional: JSON file the in-memory store is persisted to.")

    # --- Generation ---
    AI_TEMPERATURE: float = Field(0.7, description="Sampling temperature sent to providers that accept one.")
    REQUEST_TIMEOUT: float = Field(60.0, description="Timeout in seconds for a single provider request.")

    # --- Provider A: OpenAI responses API ---
    OPENAI_API_KEY: Optional[str] = Field(None)
    OPENAI_BASE_URL: str = Field("https://api.openai.com/v1")

    # --- Provider B: DeepSeek / OpenAI-compatible chat completions ---
    DEEPSEEK_API_KEY: Optional[str] = Field(None)
    DEEPSEEK_BASE_URL: str = Field("https://api.deepseek.com")

    # --- Provider C: Gemini generateContent ---
    # Gemini keys are exported under several names depending on the SDK in use
    GEMINI_API_KEY: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("GEMINI_API_KEY", "GOOGLE_API_KEY", "GOOGLE_GENAI_API_KEY"),
    )
    GEMINI_BASE_URL: str = Field("https://generativelanguage.googleapis.com/v1beta")

    def credential_for(self, provider: str) -> Optional[str]:
        """Return the configured credential for a provider family, or None."""
        key = {
            "openai": self.OPENAI_API_KEY,
            "deepseek": self.DEEPSEEK_API_KEY,
            "google": self.GEMINI_API_KEY,
        }.get(provider)
        return key or None

    def base_url_for(self, provider: str) -> str:
        return {
            "openai": self.OPENAI_BASE_URL,
            "deepseek": self.DEEPSEEK_BASE_URL,
            "google": self.GEMINI_BASE_URL,
        }[provider]

# --- Global Config Instance ---
_settings_instance = None

def get_settings() -> AppSettings:
    """
    Returns a singleton instance of the settings object.
    This function controls when the settings are loaded and validated,
    making the application more testable.
    """
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = AppSettings()
        logger.debug(f"Settings loaded, default model {_settings_instance.DEFAULT_MODEL}")
    return _settings_instance

def reset_settings() -> None:
    """Drops the cached settings so the next get_settings() re-reads the environment."""
    global _settings_instance
    _settings_instance = None

# The settings object should be retrieved by calling get_settings() in the
# application modules. This prevents the settings from being loaded and
# validated when the module is imported by tests.
