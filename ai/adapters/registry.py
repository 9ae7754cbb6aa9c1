"""Model registry mapping opaque model ids to provider configurations."""
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Sequence

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import ConfigError
from core.logging import logger


class Provider(str, Enum):
    """Upstream provider families, one per wire protocol."""
    OPENAI = "openai"       # "responses" style
    DEEPSEEK = "deepseek"   # chat-completions style
    GOOGLE = "google"       # generate-content style


class ModelConfig(BaseModel):
    """A selectable model: provider family, upstream name and optional fallback."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Opaque key, e.g. 'openai:gpt-5-mini'")
    label: str = Field("", description="Human readable name shown in pickers")
    provider: Provider
    upstream_model: str = Field(..., alias="model")
    fallback_model: Optional[str] = Field(None, alias="fallback")
    default: bool = False

    @property
    def has_fallback(self) -> bool:
        return bool(self.fallback_model)


class ModelCatalogue(BaseModel):
    models: List[ModelConfig]


DEFAULT_MODELS: List[ModelConfig] = [
    ModelConfig(id="openai:gpt-5-nano", label="ChatGPT · GPT-5 Nano",
                provider=Provider.OPENAI, model="gpt-5-nano", fallback="gpt-4.1-nano"),
    ModelConfig(id="openai:gpt-5-mini", label="ChatGPT · GPT-5 Mini",
                provider=Provider.OPENAI, model="gpt-5-mini", fallback="gpt-4.1-mini", default=True),
    ModelConfig(id="openai:gpt-5.2", label="ChatGPT · GPT-5.2",
                provider=Provider.OPENAI, model="gpt-5.2", fallback="gpt-5-mini"),
    ModelConfig(id="google:gemini-3-flash", label="Gemini · 3 Flash",
                provider=Provider.GOOGLE, model="gemini-3-flash"),
    ModelConfig(id="google:gemini-3.1-pro", label="Gemini · 3.1 Pro",
                provider=Provider.GOOGLE, model="gemini-3.1-pro"),
    ModelConfig(id="deepseek:deepseek-chat", label="DeepSeek · V3.2 (Non-thinking)",
                provider=Provider.DEEPSEEK, model="deepseek-chat"),
    ModelConfig(id="deepseek:deepseek-reasoner", label="DeepSeek · V3.2 (Thinking)",
                provider=Provider.DEEPSEEK, model="deepseek-reasoner"),
]


class ModelRegistry:
    """Immutable lookup table of :class:`ModelConfig` entries.

    ``resolve`` never fails: an absent or unknown id yields the entry marked
    ``default``.
    """

    def __init__(self, models: Sequence[ModelConfig] = DEFAULT_MODELS):
        self._models: Dict[str, ModelConfig] = {}
        for model in models:
            if model.id in self._models:
                raise ConfigError(f"Duplicate model id '{model.id}'")
            self._models[model.id] = model

        defaults = [m for m in self._models.values() if m.default]
        if len(defaults) != 1:
            raise ConfigError(f"Exactly one default model required, found {len(defaults)}")
        self._default = defaults[0]

    @property
    def default(self) -> ModelConfig:
        return self._default

    def resolve(self, model_id: Optional[str] = None) -> ModelConfig:
        if model_id and model_id in self._models:
            return self._models[model_id]
        if model_id:
            logger.debug(f"Unknown model id '{model_id}', using default '{self._default.id}'")
        return self._default

    def list_models(self) -> List[ModelConfig]:
        return list(self._models.values())

    def __contains__(self, model_id: str) -> bool:
        return model_id in self._models

    @classmethod
    def from_yaml(cls, path: str, default_id: Optional[str] = None) -> "ModelRegistry":
        """Loads a catalogue file of the form ``models: [{id, provider, model, ...}]``."""
        config_path = Path(path)
        if not config_path.exists():
            raise ConfigError(f"Model catalogue '{config_path}' not found")
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        try:
            catalogue = ModelCatalogue.model_validate(data)
        except ValidationError as e:
            raise ConfigError(f"Invalid model catalogue '{config_path}': {e}") from e
        models = catalogue.models
        if default_id is not None and default_id in {m.id for m in models}:
            models = [m.model_copy(update={"default": m.id == default_id}) for m in models]
        logger.info(f"Loaded {len(models)} models from {config_path}")
        return cls(models)


# Global registry instance
_registry: Optional[ModelRegistry] = None


def get_registry() -> ModelRegistry:
    """Get the process-wide model registry, building it from settings on first use."""
    global _registry
    if _registry is None:
        from core.config import get_settings

        settings = get_settings()
        if settings.MODELS_CONFIG_PATH:
            _registry = ModelRegistry.from_yaml(settings.MODELS_CONFIG_PATH, settings.DEFAULT_MODEL)
        elif settings.DEFAULT_MODEL in {m.id for m in DEFAULT_MODELS}:
            _registry = ModelRegistry([
                m.model_copy(update={"default": m.id == settings.DEFAULT_MODEL}) for m in DEFAULT_MODELS
            ])
        else:
            _registry = ModelRegistry()
    return _registry
