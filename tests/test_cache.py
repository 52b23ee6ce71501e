import threading

from mediathek2rss.core.cache import FeedCache


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_get_missing_key_returns_none():
    cache = FeedCache(60, timer=FakeClock())
    assert cache.get("show#width=1920,minLength=0") is None


def test_entry_valid_until_duration_elapsed():
    clock = FakeClock()
    cache = FeedCache(60, timer=clock)
    cache.put("key", "<rss/>")

    assert cache.get("key") == "<rss/>"
    clock.now += 59.999
    assert cache.get("key") == "<rss/>"


def test_entry_expires_at_duration():
    clock = FakeClock()
    cache = FeedCache(60, timer=clock)
    cache.put("key", "<rss/>")

    clock.now += 60
    assert cache.get("key") is None


def test_expired_entries_are_evicted_on_read():
    clock = FakeClock()
    cache = FeedCache(10, timer=clock)
    cache.put("a", "1")
    cache.put("b", "2")
    clock.now += 11

    assert cache.get("a") is None
    assert len(cache) == 0


def test_put_overwrites_and_restarts_lifetime():
    clock = FakeClock()
    cache = FeedCache(10, timer=clock)
    cache.put("key", "old")
    clock.now += 8
    cache.put("key", "new")
    clock.now += 8

    assert cache.get("key") == "new"


def test_keys_are_independent():
    cache = FeedCache(10, timer=FakeClock())
    cache.put("show#width=1920,minLength=0", "a")
    cache.put("show#width=1280,minLength=0", "b")

    assert cache.get("show#width=1920,minLength=0") == "a"
    assert cache.get("show#width=1280,minLength=0") == "b"


def test_concurrent_put_and_get():
    cache = FeedCache(60)
    errors = []

    def worker(n: int) -> None:
        try:
            for i in range(200):
                key = f"show{n}#width={i}"
                cache.put(key, f"{n}-{i}")
                assert cache.get(key) == f"{n}-{i}"
                cache.get(f"missing{n}-{i}")
        except Exception as e:
            errors.append(e)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    assert len(cache) == 8 * 200
