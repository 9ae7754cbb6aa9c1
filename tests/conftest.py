"""Shared fixtures for the adapter, router and service tests."""
import sys
from pathlib import Path
from typing import List, Tuple, Union

import pytest

# Add project root to the path to allow imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from ai.adapters.router import ResponseRouter
from core.config import AppSettings
from core.errors import UpstreamError
from core.store import InMemoryDocumentStore


class FakeProvider:
    """Scripted provider: each call pops the next outcome (text or exception)."""

    def __init__(self, outcomes: List[Union[str, Exception]]):
        self.outcomes = list(outcomes)
        self.calls: List[Tuple[str, str]] = []

    async def call(self, upstream_model: str, prompt: str) -> str:
        self.calls.append((upstream_model, prompt))
        outcome = self.outcomes.pop(0) if self.outcomes else ""
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def make_settings(**overrides) -> AppSettings:
    values = {
        "OPENAI_API_KEY": "sk-test",
        "DEEPSEEK_API_KEY": "ds-test",
        "GEMINI_API_KEY": "gm-test",
    }
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


def make_router(provider: FakeProvider, **setting_overrides):
    """Router whose every provider family is served by ``provider``."""
    created = []

    def factory(name, **kwargs):
        created.append((name, kwargs))
        return provider

    router = ResponseRouter(settings=make_settings(**setting_overrides), provider_factory=factory)
    return router, created


@pytest.fixture
def settings():
    return make_settings()


@pytest.fixture
def store():
    return InMemoryDocumentStore()


@pytest.fixture
def upstream_500():
    return UpstreamError("openai", 500, "internal error")
