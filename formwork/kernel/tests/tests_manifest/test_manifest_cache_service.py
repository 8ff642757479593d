"""
Component Cache Service Tests

MemoryCache expiry with a fake clock, and the service's enable switch,
prefixing and clear_all bookkeeping.
"""

from formwork.kernel.cache import ComponentCacheService, MemoryCache


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


class TestMemoryCache:
    def test_entries_expire(self):
        clock = FakeClock()
        cache = MemoryCache(clock=clock)
        cache.set("k", {"a": 1}, ttl=10)

        clock.now += 9
        assert cache.get("k") == {"a": 1}

        clock.now += 1
        assert cache.get("k") is None
        assert len(cache) == 0

    def test_values_are_copied(self):
        cache = MemoryCache()
        value = {"roles": ["builder"]}
        cache.set("k", value, ttl=60)
        value["roles"].append("mutated")

        fetched = cache.get("k")
        fetched["roles"].append("also mutated")

        assert cache.get("k") == {"roles": ["builder"]}


class TestComponentCacheService:
    def test_disabled_service_is_a_no_op(self):
        backend = MemoryCache()
        service = ComponentCacheService(backend, enabled=False)

        service.set("fields.text", {"builder": None})

        assert service.get("fields.text") is None
        assert len(backend) == 0

    def test_keys_are_prefixed(self):
        backend = MemoryCache()
        service = ComponentCacheService(backend, enabled=True, prefix="test_")

        service.set("fields.text", "meta")

        assert backend.get("test_fields.text") == "meta"
        assert service.key_for("x") == "test_x"

    def test_clear_all_removes_written_keys(self):
        backend = MemoryCache()
        backend.set("unrelated", "keep", ttl=60)
        service = ComponentCacheService(backend, enabled=True, prefix="p_")
        service.set("a", 1)
        service.set("b", 2)

        assert service.clear_all() == 2
        assert backend.get("unrelated") == "keep"
        assert service.get("a") is None

    def test_delete(self):
        service = ComponentCacheService(MemoryCache(), enabled=True)
        service.set("a", 1)
        service.delete("a")

        assert service.get("a") is None
        assert service.get_stats()["entries"] == 0

    def test_explicit_ttl_is_passed_to_backend(self):
        clock = FakeClock()
        service = ComponentCacheService(MemoryCache(clock=clock), enabled=True, ttl=5)
        service.set("a", 1)

        clock.now += 5
        assert service.get("a") is None

    def test_enabled_follows_environment(self, monkeypatch):
        service = ComponentCacheService(MemoryCache())

        monkeypatch.setenv("FORMWORK_ENVIRONMENT", "development")
        assert service.is_enabled() is False

        monkeypatch.setenv("FORMWORK_ENVIRONMENT", "production")
        assert service.is_enabled() is True

        monkeypatch.setenv("FORMWORK_COMPONENT_CACHE_DISABLED", "1")
        assert service.is_enabled() is False
