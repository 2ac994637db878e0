"""
Pytest configuration and shared fixtures.

Fixtures defined here are available to all tests.
"""
from typing import List, Union

import pytest

from cookingpro.core.config import Settings
from cookingpro.core.retry import RetryPolicy
from cookingpro.models.request import ModelRequest
from cookingpro.models.schema import UserPreferences
from cookingpro.services.model_gateway import ModelGateway
from cookingpro.services.prompt_builder import PromptBuilder
from cookingpro.services.response_cache import ResponseCache


# =============================================================================
# Fakes
# =============================================================================


class FakeModelClient:
    """Scripted model client: each call pops the next reply or raises it."""

    def __init__(self, replies: List[Union[str, Exception]]):
        self.replies = list(replies)
        self.requests: List[ModelRequest] = []

    async def generate(self, request: ModelRequest) -> str:
        self.requests.append(request)
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply

    @property
    def call_count(self) -> int:
        return len(self.requests)


class RecordingSleep:
    """Stands in for asyncio.sleep and records every requested delay."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


class FakeClock:
    def __init__(self, now: float = 1_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def settings():
    """Settings isolated from the environment and any .env file."""
    return Settings(_env_file=None, gemini_api_key="test-key")


@pytest.fixture
def preferences():
    return UserPreferences(
        diet="Vegan",
        allergies=["Peanuts", "Soy"],
        budget="₹500",
        city_type="Town",
        kitchen_setup=["Stove", "Mixer"],
        cooking_time_per_meal="30 mins",
        cooking_slot="19:00",
        shopping_frequency="Weekly",
    )


# =============================================================================
# Gateway Fixtures
# =============================================================================


@pytest.fixture
def sleeper():
    return RecordingSleep()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def make_gateway(settings, sleeper, clock):
    """Build a gateway around scripted replies; returns (gateway, client)."""

    def _make(*replies):
        client = FakeModelClient(list(replies))
        gateway = ModelGateway(
            client=client,
            prompt_builder=PromptBuilder(settings=settings),
            cache=ResponseCache(default_ttl=settings.cache_ttl_seconds, clock=clock),
            retry_policy=RetryPolicy.from_settings(settings, sleep=sleeper),
            settings=settings,
        )
        return gateway, client

    return _make


# =============================================================================
# Sample Data Fixtures
# =============================================================================


@pytest.fixture
def recipe_response():
    """Model reply carrying a single recipe."""
    return """Here's a quick spinach rice for tonight!

```json
{
  "type": "recipe",
  "id": "spinach-rice",
  "title": "Spinach Rice",
  "description": "Comforting one-pot rice.",
  "emoji": "🍚",
  "time": "25 mins",
  "calories": 420,
  "difficulty": "easy",
  "budget": "Low",
  "tags": ["Dinner", "One-pot", "Dinner"],
  "ingredients": [
    {"item": "Spinach", "amount": "2 cups", "isDone": true, "substitution": "Methi"},
    {"item": "Rice", "amount": "1 cup"}
  ],
  "steps": [
    {"instruction": "Rinse the rice.", "isCompleted": true},
    {"instruction": "Simmer with spinach.", "tip": "Keep the lid on", "timerSeconds": 900}
  ]
}
```"""


@pytest.fixture
def meal_plan_response():
    """Model reply carrying a two-day meal plan."""
    return """Your plan fits the ₹500 budget.

```json
{
  "type": "meal_plan",
  "title": "2-Day Plan",
  "personalisationProof": "Based on your Town location and ₹500 budget...",
  "totalBudgetEstimate": "₹450",
  "isFallback": false,
  "groceryList": [{"category": "Produce", "items": ["Spinach", "Onions"]}],
  "cookingSequence": ["Day 1: soak dal", "Day 2: chop onions"],
  "days": [
    {"day": 1, "slots": [{"meal": "Dinner", "recipe": {"title": "Dal Palak", "steps": [{"instruction": "Cook dal"}],
      "ingredients": [{"item": "Spinach", "amount": "1 bunch", "substitution": "Amaranth"}]}}]},
    {"day": 2, "slots": [{"meal": "lunch", "recipe": {"title": "Veg Pulao", "steps": []}}]}
  ]
}
```"""
