"""
Tests for the response cache.
"""
from cookingpro.models.schema import UserPreferences
from cookingpro.services.response_cache import ResponseCache


class TestGetSet:
    def test_get_after_set_returns_value(self, clock):
        cache = ResponseCache(clock=clock)
        cache.set("k", {"text": "hi"}, ttl=60)
        assert cache.get("k") == {"text": "hi"}

    def test_unknown_key_is_absent(self, clock):
        assert ResponseCache(clock=clock).get("missing") is None

    def test_value_survives_until_expiry(self, clock):
        cache = ResponseCache(clock=clock)
        cache.set("k", "v", ttl=60)
        clock.advance(60)
        assert cache.get("k") == "v"

    def test_expired_entry_is_absent_and_evicted(self, clock):
        cache = ResponseCache(clock=clock)
        cache.set("k", "v", ttl=60)
        clock.advance(61)

        assert cache.get("k") is None
        assert len(cache) == 0

    def test_default_ttl_is_thirty_minutes(self, clock):
        cache = ResponseCache(clock=clock)
        cache.set("k", "v")

        clock.advance(30 * 60)
        assert cache.get("k") == "v"
        clock.advance(1)
        assert cache.get("k") is None

    def test_set_overwrites_and_refreshes_expiry(self, clock):
        cache = ResponseCache(clock=clock)
        cache.set("k", "old", ttl=10)
        clock.advance(5)
        cache.set("k", "new", ttl=10)
        clock.advance(8)

        assert cache.get("k") == "new"

    def test_clear(self, clock):
        cache = ResponseCache(clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.clear()

        assert len(cache) == 0
        assert cache.get("a") is None


class TestKey:
    def test_equal_inputs_collide(self):
        context = {"historyLastId": "42", "zen": False, "prefs": {"diet": "Vegan"}}
        assert ResponseCache.key("rice?", context) == ResponseCache.key("rice?", dict(context))

    def test_key_ignores_dict_ordering_and_prompt_padding(self):
        first = ResponseCache.key("rice?", {"zen": True, "historyLastId": "1"})
        second = ResponseCache.key("  rice?\n", {"historyLastId": "1", "zen": True})
        assert first == second

    def test_any_context_change_changes_key(self):
        base = {"historyLastId": "1", "zen": False, "prefs": {"diet": "Vegan", "allergies": []}}
        variants = [
            {**base, "historyLastId": "2"},
            {**base, "zen": True},
            {**base, "prefs": {"diet": "Keto", "allergies": []}},
            {**base, "prefs": {"diet": "Vegan", "allergies": ["Soy"]}},
        ]
        keys = {ResponseCache.key("rice?", variant) for variant in variants}
        keys.add(ResponseCache.key("rice?", base))
        assert len(keys) == len(variants) + 1

    def test_different_prompt_changes_key(self):
        assert ResponseCache.key("rice?", {}) != ResponseCache.key("pasta?", {})

    def test_pydantic_models_in_context(self):
        vegan = UserPreferences(diet="Vegan")
        keto = UserPreferences(diet="Keto")
        assert ResponseCache.key("p", {"prefs": vegan}) == ResponseCache.key("p", {"prefs": UserPreferences(diet="Vegan")})
        assert ResponseCache.key("p", {"prefs": vegan}) != ResponseCache.key("p", {"prefs": keto})
