"""
Tests for chat session state and the session store.
"""
import asyncio

import pytest

from cookingpro.core.constants import PromptConstants
from cookingpro.core.exceptions import ConfigurationError, SessionBusyError, TransientModelError
from cookingpro.models.schema import UserPreferences
from cookingpro.services.chat_session import ChatSession, SessionStore


@pytest.fixture
def make_session(make_gateway, preferences):
    def _make(*replies):
        gateway, client = make_gateway(*replies)
        return ChatSession("s1", gateway, preferences=preferences), client

    return _make


class TestSendMessage:
    async def test_starts_with_welcome(self, make_session):
        session, _ = make_session()
        assert [m.id for m in session.messages] == [PromptConstants.WELCOME_MESSAGE_ID]

    async def test_turn_appends_user_and_model_messages(self, make_session, recipe_response):
        session, client = make_session(recipe_response)

        result = await session.send_message("I have spinach and rice")

        assert [m.role for m in session.messages] == ["model", "user", "model"]
        assert session.messages[1].text == "I have spinach and rice"
        assert session.messages[2].recipe.id == "spinach-rice"
        assert session.recipes == [result.recipe]
        assert session.is_loading is False
        assert client.call_count == 1

    async def test_history_excludes_current_turn(self, make_session):
        session, client = make_session("first", "second")

        await session.send_message("hello")
        await session.send_message("again")

        contents = client.requests[1].contents
        assert [turn.role for turn in contents] == ["user", "model", "user"]
        assert contents[0].parts[-1].text.endswith("hello")
        assert contents[-1].parts[-1].text.endswith("again")

    async def test_hidden_prompt_goes_to_model(self, make_session):
        session, client = make_session("A plan")

        await session.send_message("Make me a plan", hidden_prompt="Generate a 7 day plan")

        assert session.messages[1].text == "Make me a plan"
        assert client.requests[0].contents[-1].parts[-1].text.endswith("Generate a 7 day plan")

    async def test_meal_plan_becomes_current(self, make_session, meal_plan_response):
        session, _ = make_session(meal_plan_response)

        result = await session.send_message("Plan two days")

        assert session.current_meal_plan is result.meal_plan
        assert session.recipes == []

    async def test_model_failure_returns_apology(self, make_session, sleeper):
        session, client = make_session(*[TransientModelError("down")] * 3)

        result = await session.send_message("hello")

        assert result.text == PromptConstants.TURN_FAILURE_MESSAGE
        assert result.recipe is None and result.meal_plan is None
        assert session.messages[-1].text == PromptConstants.TURN_FAILURE_MESSAGE
        assert session.is_loading is False
        assert client.call_count == 3

    async def test_braces_in_preferences_reach_the_model(self, make_gateway):
        gateway, client = make_gateway("Sure")
        session = ChatSession("s1", gateway, preferences=UserPreferences(diet="{{TIME}} free"))

        result = await session.send_message("hi")

        assert result.text == "Sure"
        assert "{{TIME}} free" in client.requests[0].system_instruction

    async def test_configuration_error_propagates(self, make_session):
        session, _ = make_session(ConfigurationError("GEMINI_API_KEY is not set"))

        with pytest.raises(ConfigurationError):
            await session.send_message("hello")
        assert session.is_loading is False

    async def test_overlapping_turns_are_refused(self, make_session):
        session, _ = make_session("slow reply")
        release = asyncio.Event()
        original = session.gateway.client.generate

        async def slow_generate(request):
            await release.wait()
            return await original(request)

        session.gateway.client.generate = slow_generate

        first = asyncio.create_task(session.send_message("one"))
        await asyncio.sleep(0)
        assert session.is_loading is True

        with pytest.raises(SessionBusyError):
            await session.send_message("two")

        release.set()
        result = await first
        assert result.text == "slow reply"
        assert session.is_loading is False


class TestCollections:
    async def test_recipes_are_deduplicated_newest_first(self, make_session, recipe_response):
        other = recipe_response.replace('"spinach-rice"', '"veg-pulao"')
        session, _ = make_session(recipe_response, other, recipe_response)

        await session.send_message("one")
        await session.send_message("two")
        await session.send_message("three")

        assert [r.id for r in session.recipes] == ["veg-pulao", "spinach-rice"]

    async def test_clear_history_keeps_recipes(self, make_session, recipe_response):
        session, _ = make_session(recipe_response)
        await session.send_message("one")

        session.clear_history()

        assert len(session.messages) == 1
        assert len(session.recipes) == 1

    async def test_logout_forgets_everything(self, make_session, recipe_response):
        session, client = make_session(recipe_response, recipe_response)
        await session.send_message("one")

        session.logout()

        assert len(session.messages) == 1
        assert session.recipes == []
        assert session.current_meal_plan is None
        assert len(session.gateway.cache) == 0

        await session.send_message("one")
        assert client.call_count == 2

    async def test_summary(self, make_session, meal_plan_response):
        session, _ = make_session(meal_plan_response)
        await session.send_message("Plan two days")

        summary = session.summary()

        assert summary.session_id == "s1"
        assert len(summary.messages) == 3
        assert summary.current_meal_plan.title == "2-Day Plan"


class TestSessionStore:
    def test_get_or_create_reuses_sessions(self, make_gateway):
        store = SessionStore(lambda: make_gateway()[0])

        first = store.get_or_create("a")
        assert store.get_or_create("a") is first
        assert store.get("b") is None

    def test_sessions_have_separate_gateways(self, make_gateway):
        store = SessionStore(lambda: make_gateway()[0])
        assert store.get_or_create("a").gateway is not store.get_or_create("b").gateway

    def test_remove(self, make_gateway):
        store = SessionStore(lambda: make_gateway()[0])
        store.get_or_create("a")

        assert store.remove("a") is True
        assert store.get("a") is None
        assert store.remove("a") is False

    def test_idle_sessions_expire(self, make_gateway, clock):
        store = SessionStore(lambda: make_gateway()[0], idle_ttl=60, clock=clock)
        old = store.get_or_create("old")
        store.get_or_create("fresh")

        clock.advance(45)
        store.get("fresh")
        clock.advance(30)

        assert store.get("old") is None
        assert store.get("fresh") is not None
        assert len(store) == 1
        assert store.get_or_create("old") is not old

    def test_loading_sessions_are_kept(self, make_gateway, clock):
        store = SessionStore(lambda: make_gateway()[0], idle_ttl=60, clock=clock)
        store.get_or_create("busy").is_loading = True

        clock.advance(120)

        assert store.prune_idle() == 0
        assert store.get("busy") is not None

    def test_expired_session_is_logged_out(self, make_gateway, clock):
        store = SessionStore(lambda: make_gateway()[0], idle_ttl=60, clock=clock)
        session = store.get_or_create("a")
        session.recipes.append(object())

        clock.advance(61)

        assert store.prune_idle() == 1
        assert session.recipes == []

    def test_no_expiry_without_ttl(self, make_gateway, clock):
        store = SessionStore(lambda: make_gateway()[0], idle_ttl=None, clock=clock)
        store.get_or_create("a")

        clock.advance(10 ** 6)

        assert store.get("a") is not None
