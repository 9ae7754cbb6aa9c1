from __future__ import annotations
"""Response router: model id → provider adapter, with single-shot fallback.

Routing is stateless per call.  For every request the router

1. resolves the :class:`ModelConfig` through the registry,
2. builds the prompt,
3. refuses to go on if the provider credential is missing,
4. calls the adapter with the primary upstream model,
5. retries *once* with the fallback model, for the provider family that
   supports it and only when a fallback is configured,
6. rejects an empty answer.

Adapters are built lazily, one per provider family, and reused.
"""

from typing import Callable, Dict, Optional

import httpx
from pydantic import BaseModel, Field

from core.config import AppSettings, get_settings
from core.errors import ConfigurationError, EmptyResultError, UpstreamError
from core.logging import logger

from . import metrics
from .prompts import TutorRequest, build_tutor_prompt
from .providers import BaseProvider, create_provider
from .registry import ModelConfig, ModelRegistry, Provider, get_registry

__all__ = ["TutorResult", "ResponseRouter", "get_router"]

# Only this family declares fallback models; others fail on the first error.
FALLBACK_PROVIDERS = frozenset({Provider.OPENAI})


class TutorResult(BaseModel):
    tutor_response: str = Field(..., min_length=1)
    model_id: Optional[str] = None


class ResponseRouter:
    def __init__(
        self,
        registry: Optional[ModelRegistry] = None,
        settings: Optional[AppSettings] = None,
        provider_factory: Callable[..., BaseProvider] = create_provider,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._registry = registry
        self._settings = settings
        self._provider_factory = provider_factory
        self._transport = transport
        self._providers: Dict[Provider, BaseProvider] = {}

    @property
    def registry(self) -> ModelRegistry:
        if self._registry is None:
            self._registry = get_registry()
        return self._registry

    @property
    def settings(self) -> AppSettings:
        if self._settings is None:
            self._settings = get_settings()
        return self._settings

    def _provider_for(self, config: ModelConfig) -> BaseProvider:
        family = config.provider
        api_key = self.settings.credential_for(family.value)
        if not api_key:
            raise ConfigurationError(
                f"No API key configured for provider '{family.value}' (model '{config.id}')"
            )
        if family not in self._providers:
            self._providers[family] = self._provider_factory(
                family.value,
                api_key=api_key,
                base_url=self.settings.base_url_for(family.value),
                timeout=self.settings.REQUEST_TIMEOUT,
                temperature=self.settings.AI_TEMPERATURE,
                transport=self._transport,
            )
        return self._providers[family]

    async def route(self, request: TutorRequest) -> TutorResult:
        """Answers a tutoring request or raises one of the typed routing errors."""
        config = self.registry.resolve(request.model)
        prompt = build_tutor_prompt(request)
        text = await self._complete(config, prompt)
        return TutorResult(tutor_response=text, model_id=config.id)

    async def complete(self, prompt: str, model_id: Optional[str] = None) -> str:
        """Routes an already built prompt. Used by the title and sandbox flows."""
        return await self._complete(self.registry.resolve(model_id), prompt)

    async def _complete(self, config: ModelConfig, prompt: str) -> str:
        provider = self._provider_for(config)
        family = config.provider.value
        logger.info(f"Routing to {family}/{config.upstream_model} for model '{config.id}'")

        try:
            text = await provider.call(config.upstream_model, prompt)
            metrics.provider_requests.labels(provider=family, outcome="success").inc()
        except UpstreamError as e:
            metrics.provider_requests.labels(provider=family, outcome="error").inc()
            if config.provider not in FALLBACK_PROVIDERS or not config.fallback_model:
                raise
            logger.warning(
                f"{family}/{config.upstream_model} failed ({e.status_code}), "
                f"retrying with fallback {config.fallback_model}"
            )
            metrics.provider_fallbacks.labels(provider=family).inc()
            try:
                text = await provider.call(config.fallback_model, prompt)
            except UpstreamError:
                metrics.provider_requests.labels(provider=family, outcome="error").inc()
                raise
            metrics.provider_requests.labels(provider=family, outcome="success").inc()

        if not text or not text.strip():
            metrics.provider_requests.labels(provider=family, outcome="empty").inc()
            raise EmptyResultError(f"No response produced by model '{config.id}'")
        return text.strip()


_router: Optional[ResponseRouter] = None


def get_router() -> ResponseRouter:
    """Process-wide router built from settings."""
    global _router
    if _router is None:
        _router = ResponseRouter()
    return _router
