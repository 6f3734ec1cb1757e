import threading

import pytest

from bo_core.common.invalidation import invalidate
from bo_core.iam.permission_cache import PermissionCache, get_permission_cache


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class CountingLoader:
    def __init__(self, grants):
        self.grants = grants
        self.calls = []

    def __call__(self, actor_id):
        self.calls.append(actor_id)
        return self.grants.get(actor_id, set())


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def loader():
    return CountingLoader({1: {"item:read", "item:update"}, 2: {"system:admin"}})


@pytest.fixture
def cache(loader, clock):
    return PermissionCache(loader=loader, ttl_seconds=60, sweep_every=10, clock=clock)


def test_hit_within_ttl_does_not_reload(cache, loader, clock):
    assert cache.permissions_for(1) == frozenset({"item:read", "item:update"})
    clock.advance(59)
    assert cache.permissions_for(1) == frozenset({"item:read", "item:update"})

    assert loader.calls == [1]


def test_expired_entry_is_reloaded(cache, loader, clock):
    cache.permissions_for(1)
    clock.advance(60)
    cache.permissions_for(1)

    assert loader.calls == [1, 1]


def test_actor_without_role_caches_empty_set(cache, loader):
    assert cache.permissions_for(99) == frozenset()
    assert cache.permissions_for(99) == frozenset()

    assert loader.calls == [99]


def test_has_permission(cache):
    assert cache.has_permission(1, "item:read")
    assert cache.has_permission(1, "order:read", "item:update")
    assert not cache.has_permission(1, "item:delete")


def test_super_permission_short_circuits(cache):
    assert cache.has_permission(2, "item:delete")
    assert cache.has_permission(2, "anything:at-all")


def test_invalidate_all_forces_reload(cache, loader):
    cache.permissions_for(1)
    loader.grants[1] = {"item:read"}

    cache.invalidate_all()

    assert cache.permissions_for(1) == frozenset({"item:read"})
    assert loader.calls == [1, 1]


def test_loader_failure_propagates_and_caches_nothing(clock):
    def broken(actor_id):
        raise RuntimeError("store unavailable")

    cache = PermissionCache(loader=broken, clock=clock)

    with pytest.raises(RuntimeError):
        cache.has_permission(1, "item:read")
    assert len(cache) == 0


def test_expired_entries_swept_every_kth_miss(loader, clock):
    cache = PermissionCache(loader=loader, ttl_seconds=60, sweep_every=3, clock=clock)

    cache.permissions_for(1)  # miss 1
    cache.permissions_for(2)  # miss 2
    clock.advance(61)
    assert len(cache) == 2  # expired but not yet swept

    cache.permissions_for(3)  # miss 3 -> sweep, then store actor 3
    assert len(cache) == 1


def test_returned_sets_are_immutable(cache):
    perms = cache.permissions_for(1)
    with pytest.raises(AttributeError):
        perms.add("item:delete")


def test_invalidate_during_load_discards_the_loaded_entry(clock):
    """A load that started before invalidate_all() must not repopulate the cache."""
    started = threading.Event()
    release = threading.Event()

    def slow_loader(actor_id):
        started.set()
        release.wait(timeout=5)
        return {"item:read"}

    cache = PermissionCache(loader=slow_loader, clock=clock)

    result = {}
    t = threading.Thread(target=lambda: result.setdefault("perms", cache.permissions_for(1)))
    t.start()
    assert started.wait(timeout=5)

    cache.invalidate_all()
    release.set()
    t.join(timeout=5)

    assert result["perms"] == frozenset({"item:read"})
    assert len(cache) == 0


def test_concurrent_readers_see_complete_entries(cache):
    errors = []

    def read():
        try:
            for _ in range(200):
                perms = cache.permissions_for(1)
                assert perms in (frozenset({"item:read", "item:update"}),)
        except AssertionError as exc:
            errors.append(exc)

    def invalidate():
        for _ in range(200):
            cache.invalidate_all()

    threads = [threading.Thread(target=read) for _ in range(4)] + [threading.Thread(target=invalidate)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=10)

    assert errors == []


@pytest.mark.django_db
def test_role_and_user_invalidations_clear_the_shared_cache(user):
    shared = get_permission_cache()

    shared.permissions_for(user.id)
    invalidate("item")
    assert len(shared) == 1

    for kind in ("role", "user"):
        shared.permissions_for(user.id)
        invalidate(kind)
        assert len(shared) == 0
