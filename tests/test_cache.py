import time
from datetime import timedelta

from ridge.infra.cache import Cache, cache_key

_MISSING = object()


def test_hit_and_miss():
    c = Cache(10.0, 10)
    c.put("key1", "value1")
    assert c.get("key1") == "value1"
    assert c.get("missing", _MISSING) is _MISSING


def test_falsy_value_is_a_hit():
    c = Cache(10.0, 10)
    c.put("zero", 0)
    assert c.get("zero", _MISSING) == 0


def test_ttl_expiration():
    c = Cache(timedelta(milliseconds=1), 10)
    c.put("key1", "value1")
    time.sleep(0.005)
    assert c.get("key1", _MISSING) is _MISSING
    assert len(c) == 0


def test_eviction():
    c = Cache(10.0, 2)
    c.put("key1", "val1")
    c.put("key2", "val2")
    c.put("key3", "val3")
    assert len(c) <= 2
    assert c.get("key3") == "val3"
    assert c.get("key1", _MISSING) is _MISSING


def test_invalidate():
    c = Cache(10.0, 10)
    c.put("key1", "val1")
    c.invalidate("key1")
    assert c.get("key1", _MISSING) is _MISSING


def test_clear():
    c = Cache(10.0, 10)
    c.put("a", 1)
    c.put("b", 2)
    c.put("c", 3)
    c.clear()
    assert len(c) == 0


def test_cache_key_deterministic():
    first = cache_key("/some/path", "opts1")
    second = cache_key("/some/path", "opts1")
    assert len(first) == 32
    assert first == second


def test_cache_key_different_options():
    assert cache_key("/some/path", "opts1") != cache_key("/some/path", "opts2")


def test_cache_key_shape():
    key = cache_key("/some/path", "opts1")
    assert len(key) == 32
    assert set(key) <= set("0123456789abcdef")