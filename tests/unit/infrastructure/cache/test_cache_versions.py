from sbclient.domain.models.common import AccessToken, CacheVersion
from sbclient.infrastructure.cache.cache_versions import SHARED_CACHE_VERSIONS, CacheVersionTracker


def test_tracker_is_keyed_by_token():
    tracker = CacheVersionTracker()
    tracker.set("token-a", 100)
    tracker.set("token-b", 200)

    assert tracker.get("token-a") == 100
    assert tracker.get("token-b") == 200
    assert tracker.get("unknown") is None
    assert tracker.all() == {"token-a": 100, "token-b": 200}


def test_tracker_ignores_missing_token():
    tracker = CacheVersionTracker()
    tracker.set(None, 5)
    assert tracker.get(None) is None
    assert tracker.all() == {}


def test_all_returns_a_snapshot():
    tracker = CacheVersionTracker()
    tracker.set("t", 1)
    snapshot = tracker.all()
    snapshot["t"] = 99
    assert tracker.get("t") == 1


def test_clear_resets_shared_tracker():
    SHARED_CACHE_VERSIONS.set("t", 1)
    SHARED_CACHE_VERSIONS.clear()
    assert SHARED_CACHE_VERSIONS.get("t") is None


def test_versions_are_tracked_per_typed_token():
    tracker = CacheVersionTracker()
    public, preview = AccessToken("public"), AccessToken("preview")

    tracker.set(public, CacheVersion(10))
    tracker.set(preview, CacheVersion(20))
    tracker.set(public, CacheVersion(11))

    assert tracker.all() == {public: CacheVersion(11), preview: CacheVersion(20)}
