"""Shared fixtures: a three-model registry and a scripted fake upstream."""

import asyncio
from typing import Any, Dict, List

import pytest

from relay.adapters.base import BaseModelAdapter
from relay.config import Settings
from relay.models.dispatch import FallbackOrder, ModelRegistry

MODELS = {"A": "a-id", "B": "b-id", "C": "c-id"}
FALLBACK = ["A", "B", "C"]

HANG = object()


class FakeAdapter(BaseModelAdapter):
    """
    Scripted upstream keyed by upstream model id:
      str       -> reply text
      dict      -> returned as-is
      Exception -> raised
      HANG      -> never returns
    Unscripted ids fail with RuntimeError.
    """

    def __init__(self, outcomes: Dict[str, Any]):
        self.outcomes = outcomes
        self.calls: List[str] = []

    async def generate(self, model_id: str, message: str) -> Dict[str, Any]:
        self.calls.append(model_id)
        outcome = self.outcomes.get(model_id, RuntimeError(f"{model_id} unavailable"))
        if outcome is HANG:
            await asyncio.sleep(3600)
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, dict):
            return outcome
        return {"response": outcome, "model": model_id, "provider": "fake"}


@pytest.fixture
def registry() -> ModelRegistry:
    return ModelRegistry(MODELS)


@pytest.fixture
def fallback_order(registry) -> FallbackOrder:
    return FallbackOrder.build(FALLBACK, registry)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        OPENROUTER_API_KEY="sk-test-secret",
        MODELS=MODELS,
        FALLBACK_ORDER=FALLBACK,
        UPSTREAM_TIMEOUT_SECONDS=0.2,
        _env_file=None,
    )
