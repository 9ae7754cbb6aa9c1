"""Adapters layer: model registry, prompt building, provider adapters and routing.

The public API is intentionally minimal; services depend on
:class:`ResponseRouter` and the request/result types only.
"""

from __future__ import annotations

from .prompts import (
    TutorRequest,
    build_customization_prompt,
    build_guided_prompt,
    build_title_prompt,
    build_tutor_prompt,
)
from .providers import (
    BaseProvider,
    ChatCompletionsProvider,
    GeminiProvider,
    OpenAIResponsesProvider,
    create_provider,
)
from .registry import DEFAULT_MODELS, ModelConfig, ModelRegistry, Provider, get_registry
from .router import ResponseRouter, TutorResult, get_router

__all__ = [
    "TutorRequest",
    "TutorResult",
    "build_tutor_prompt",
    "build_guided_prompt",
    "build_title_prompt",
    "build_customization_prompt",
    "BaseProvider",
    "OpenAIResponsesProvider",
    "ChatCompletionsProvider",
    "GeminiProvider",
    "create_provider",
    "DEFAULT_MODELS",
    "ModelConfig",
    "ModelRegistry",
    "Provider",
    "get_registry",
    "ResponseRouter",
    "get_router",
]
