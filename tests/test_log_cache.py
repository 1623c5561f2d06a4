from app.services.log_cache import LogCache
from conftest import make_log


def test_stale_read_does_not_clobber_a_newer_write():
    cache = LogCache()
    token = cache.begin_read()
    cache.record_write(make_log("2024-03-01", {"read": "done"}))

    cache.apply_read(
        [make_log("2024-03-01", {"read": "none"}), make_log("2024-03-02", {"read": "done"})],
        token,
    )

    assert cache.get("2024-03-01").habit_status["read"].status.value == "done"
    assert cache.dates() == ["2024-03-01", "2024-03-02"]


def test_read_after_write_replaces_the_snapshot():
    cache = LogCache()
    cache.record_write(make_log("2024-03-01", {"read": "done"}))
    token = cache.begin_read()

    cache.apply_read([make_log("2024-03-02", {})], token)

    assert cache.get("2024-03-01") is None
    assert len(cache) == 1


def test_snapshot_is_a_copy():
    cache = LogCache()
    cache.record_write(make_log("2024-03-01", {}))
    snapshot = cache.snapshot()
    cache.clear()
    assert list(snapshot) == ["2024-03-01"]
    assert len(cache) == 0
