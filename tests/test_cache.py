import threading

import pytest

from terminus_activities.cache import ActivityCache, ReadWriteLock


def test_read_hits_within_window(cache, clock):
    cache.write("123", [{"name": "Cached Ride"}])
    clock.advance(599)
    entry = cache.read("123")
    assert entry is not None
    assert entry.activities == ({"name": "Cached Ride"},)
    assert entry.user_id == "123"


def test_read_misses_for_unknown_user(cache):
    assert cache.read("nobody") is None


def test_expired_entry_reads_as_miss_but_is_retained(cache, clock):
    cache.write("123", [{"name": "Old Ride"}])
    clock.advance(600)
    assert cache.read("123") is None
    assert cache.peek("123") is not None
    assert len(cache) == 1


def test_write_replaces_entry_and_resets_timestamp(cache, clock):
    cache.write("123", [{"name": "First"}])
    clock.advance(500)
    cache.write("123", [{"name": "Second"}])
    clock.advance(500)
    entry = cache.read("123")
    assert entry is not None
    assert entry.activities == ({"name": "Second"},)
    assert len(cache) == 1


def test_entries_are_snapshots_of_written_list(cache):
    activities = [{"name": "Ride"}]
    cache.write("123", activities)
    activities.append({"name": "Sneaky"})
    assert len(cache.read("123").activities) == 1


def test_editing_a_written_record_does_not_change_the_entry(cache):
    activities = [{"name": "Ride to Terminus", "map": {"polyline": "abc"}}]
    cache.write("123", activities)
    activities[0]["name"] = "tampered"
    activities[0]["map"]["polyline"] = "xyz"
    entry = cache.read("123")
    assert entry.activities[0]["name"] == "Ride to Terminus"
    assert entry.activities[0]["map"] == {"polyline": "abc"}


def test_users_are_isolated(cache):
    cache.write("a", [{"name": "A"}])
    assert cache.read("b") is None


def test_invalid_ttl_rejected():
    with pytest.raises(ValueError):
        ActivityCache(ttl_seconds=0)


def test_readers_share_the_lock():
    lock = ReadWriteLock()
    inside = threading.Barrier(3, timeout=1.0)

    def reader():
        with lock.read_locked():
            inside.wait()

    threads = [threading.Thread(target=reader) for _ in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=2)
    assert not inside.broken, "Readers should hold the lock concurrently"
    assert lock.snapshot()["readers"] == 0


def test_writer_excludes_readers_and_blocks_new_ones():
    lock = ReadWriteLock()
    lock.acquire_read()

    writer_in = threading.Event()
    release_writer = threading.Event()

    def writer():
        with lock.write_locked():
            writer_in.set()
            release_writer.wait(1.0)

    w = threading.Thread(target=writer)
    w.start()
    assert not writer_in.wait(0.07), "Writer must wait for the active reader"

    late_reader_in = threading.Event()

    def late_reader():
        with lock.read_locked():
            late_reader_in.set()

    r = threading.Thread(target=late_reader)
    r.start()
    assert not late_reader_in.wait(0.07), "New readers queue behind a waiting writer"

    lock.release_read()
    assert writer_in.wait(0.5), "Writer did not start after reader released"
    assert not late_reader_in.wait(0.07), "Reader must not enter while writer holds lock"

    release_writer.set()
    w.join(timeout=1)
    assert late_reader_in.wait(0.5), "Queued reader did not start after writer released"
    r.join(timeout=1)
    assert lock.snapshot() == {"readers": 0, "writer": False, "writers_waiting": 0}


def test_release_without_acquire_raises():
    lock = ReadWriteLock()
    with pytest.raises(RuntimeError):
        lock.release_read()
    with pytest.raises(RuntimeError):
        lock.release_write()


def test_concurrent_writes_and_reads_stay_consistent():
    cache = ActivityCache(ttl_seconds=600)
    errors = []

    def worker(user):
        for i in range(50):
            cache.write(user, [{"n": i}])
            entry = cache.read(user)
            if entry is None or len(entry.activities) != 1:
                errors.append(user)

    threads = [threading.Thread(target=worker, args=(f"u{i}",)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=5)
    assert errors == []
    assert len(cache) == 8
