"""AI Provider Adapters, one per upstream wire protocol."""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import httpx

from core.errors import UpstreamError
from core.logging import logger

from .registry import Provider

CHAT_SYSTEM_MESSAGE = "Follow the tutoring instructions given in the user message."


class BaseProvider(ABC):
    """Base class for AI providers.

    Subclasses turn a single prompt into their upstream's request body and pull
    the answer text back out.  They never retry.
    """

    name: str = "base"

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        temperature: float = 0.7,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key = api_key
        self.base_url = (base_url or "").rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self._transport = transport

    @abstractmethod
    async def call(self, upstream_model: str, prompt: str) -> str:
        """Send the prompt to ``upstream_model`` and return the trimmed answer text."""
        pass

    async def _post(
        self,
        url: str,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            try:
                response = await client.post(url, headers=headers, params=params, json=payload)
            except httpx.HTTPError as e:
                logger.error(f"{self.name} transport error: {e}")
                raise UpstreamError(self.name, 0, str(e)) from e

            if not response.is_success:
                body = response.text
                logger.error(f"{self.name} API error {response.status_code}: {body[:500]}")
                raise UpstreamError(self.name, response.status_code, body)

            try:
                data = response.json()
            except ValueError as e:
                raise UpstreamError(self.name, response.status_code, f"invalid JSON body: {e}") from e
            return data if isinstance(data, dict) else {}

    def _bearer_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }


class OpenAIResponsesProvider(BaseProvider):
    """OpenAI "responses" API: prompt as a single ``input`` field."""

    name = Provider.OPENAI.value

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        super().__init__(api_key, base_url or "https://api.openai.com/v1", **kwargs)

    async def call(self, upstream_model: str, prompt: str) -> str:
        payload = {
            "model": upstream_model,
            "input": prompt,
            "temperature": self.temperature,
        }
        data = await self._post(f"{self.base_url}/responses", payload, headers=self._bearer_headers())
        return self.extract_text(data)

    @staticmethod
    def extract_text(data: Dict[str, Any]) -> str:
        """Tries the known answer locations in priority order."""
        output_text = data.get("output_text")
        if isinstance(output_text, str) and output_text.strip():
            return output_text.strip()

        parts: List[str] = []
        for item in data.get("output") or []:
            if not isinstance(item, dict):
                continue
            for content in item.get("content") or []:
                if isinstance(content, dict) and isinstance(content.get("text"), str):
                    parts.append(content["text"])
        joined = "".join(parts).strip()
        if joined:
            return joined

        try:
            message = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return message.strip() if isinstance(message, str) else ""


class ChatCompletionsProvider(BaseProvider):
    """DeepSeek and other OpenAI-compatible ``/chat/completions`` endpoints."""

    name = Provider.DEEPSEEK.value

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        super().__init__(api_key, base_url or "https://api.deepseek.com", **kwargs)

    async def call(self, upstream_model: str, prompt: str) -> str:
        payload = {
            "model": upstream_model,
            "temperature": self.temperature,
            "messages": [
                {"role": "system", "content": CHAT_SYSTEM_MESSAGE},
                {"role": "user", "content": prompt},
            ],
        }
        data = await self._post(f"{self.base_url}/chat/completions", payload, headers=self._bearer_headers())
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            return ""
        return content.strip() if isinstance(content, str) else ""


class GeminiProvider(BaseProvider):
    """Google ``generateContent``: content-parts body, API key in the query string."""

    name = Provider.GOOGLE.value

    def __init__(self, api_key: Optional[str] = None, base_url: Optional[str] = None, **kwargs):
        super().__init__(api_key, base_url or "https://generativelanguage.googleapis.com/v1beta", **kwargs)

    async def call(self, upstream_model: str, prompt: str) -> str:
        payload = {
            "contents": [
                {"role": "user", "parts": [{"text": prompt}]},
            ],
        }
        data = await self._post(
            f"{self.base_url}/models/{upstream_model}:generateContent",
            payload,
            headers={"Content-Type": "application/json"},
            params={"key": self.api_key or ""},
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError):
            return ""
        return "".join(p.get("text", "") for p in parts if isinstance(p, dict)).strip()


# Provider factory
def create_provider(provider_type: str, **kwargs) -> BaseProvider:
    """Create a provider instance by type."""
    providers = {
        Provider.OPENAI.value: OpenAIResponsesProvider,
        Provider.DEEPSEEK.value: ChatCompletionsProvider,
        Provider.GOOGLE.value: GeminiProvider,
    }

    key = provider_type.value if isinstance(provider_type, Provider) else str(provider_type).lower()
    provider_class = providers.get(key)
    if not provider_class:
        raise ValueError(f"Unknown provider type: {provider_type}")

    return provider_class(**kwargs)
