import logging
import time

import pytest

from levelcache.cache import CacheError, LevelCache


@pytest.fixture
def db_path(tmp_path):
    return str(tmp_path / "levelcache_test_db")


@pytest.fixture
def cache(db_path):
    c = LevelCache(db_path, 0, 1, 0, logging.CRITICAL)
    yield c
    c.close()


def test_put_and_get(cache):
    cache.put("test_key", "test_value", 0)
    assert cache.get("test_key") == "test_value"


def test_get_non_existent(cache):
    assert cache.get("non_existent_key") is None


def test_delete(cache):
    cache.put("test_key", "test_value", 0)
    cache.delete("test_key")
    assert cache.get("test_key") is None


def test_ttl(cache):
    cache.put("ttl_key", "ttl_value", 1)
    time.sleep(2)
    assert cache.get("ttl_key") is None

    cache.put("ttl_key", "ttl_value", 5)
    assert cache.get("ttl_key") == "ttl_value"


def test_overwrite_key(cache):
    cache.put("overwrite_key", "value1", 0)
    assert cache.get("overwrite_key") == "value1"
    cache.put("overwrite_key", "value2", 0)
    assert cache.get("overwrite_key") == "value2"


def test_update_ttl(cache):
    cache.put("update_ttl_key", "update_ttl_value", 1)
    cache.put("update_ttl_key", "update_ttl_value", 3)
    time.sleep(2)
    assert cache.get("update_ttl_key") == "update_ttl_value"
    time.sleep(2)
    assert cache.get("update_ttl_key") is None


def test_delete_non_existent(cache):
    before = cache.memory_usage()
    cache.delete("non_existent_key")
    assert cache.memory_usage() == before


def test_empty_value(cache):
    cache.put("empty_value_key", "", 0)
    assert cache.get("empty_value_key") == ""


def test_default_ttl(db_path):
    with LevelCache(db_path, 0, 2, 0, logging.CRITICAL) as c:
        c.put("default_ttl_key", "default_ttl_value", 0)
        assert c.get("default_ttl_key") == "default_ttl_value"
        time.sleep(3)
        assert c.get("default_ttl_key") is None


def test_cleanup_thread(db_path):
    with LevelCache(db_path, 0, 1, 1, logging.CRITICAL) as c:
        c.put("key1", "value1", 1)
        c.put("key2", "value2", 3)
        after_puts = c.memory_usage()
        time.sleep(3)
        # The background thread removed key1 without any get call.
        assert c.memory_usage() < after_puts
        assert c.get("key1") is None
        assert c.get("key2") == "value2"
        time.sleep(2)
        assert c.get("key2") is None


def test_log_level(db_path):
    with LevelCache(db_path, 0, 1, 0, logging.INFO) as c:
        assert c.log_level == logging.INFO
        assert logging.getLogger("levelcache").level == logging.INFO


def test_memory_usage(cache):
    initial = cache.memory_usage()
    cache.put("mem_key_1", "value1", 0)
    after_put1 = cache.memory_usage()
    assert after_put1 > initial

    cache.put("mem_key_2", "value2", 0)
    after_put2 = cache.memory_usage()
    assert after_put2 > after_put1

    cache.delete("mem_key_1")
    after_delete1 = cache.memory_usage()
    assert after_delete1 < after_put2

    cache.delete("mem_key_2")
    assert cache.memory_usage() == initial


def test_overwrite_does_not_grow_memory(cache):
    cache.put("k", "short", 0)
    first = cache.memory_usage()
    cache.put("k", "a much longer value than before", 0)
    assert cache.memory_usage() == first


def test_lru_size_counts_towards_memory(tmp_path):
    with LevelCache(str(tmp_path / "a"), 1, 0, 0, logging.CRITICAL) as with_lru:
        with LevelCache(str(tmp_path / "b"), 0, 0, 0, logging.CRITICAL) as without:
            assert with_lru.memory_usage() - without.memory_usage() == 1024 * 1024


def test_open_destroys_existing_data(db_path):
    with LevelCache(db_path, 0, 0, 0, logging.CRITICAL) as c:
        c.put("persist", "value", 0)
    with LevelCache(db_path, 0, 0, 0, logging.CRITICAL) as c:
        assert c.get("persist") is None


def test_open_on_regular_file_fails(tmp_path):
    blocker = tmp_path / "not_a_dir"
    blocker.write_text("x")
    with pytest.raises(CacheError):
        LevelCache(str(blocker), 0, 0, 0, logging.CRITICAL)


def test_operations_after_close_raise(db_path):
    c = LevelCache(db_path, 0, 0, 0, logging.CRITICAL)
    c.close()
    c.close()
    with pytest.raises(CacheError):
        c.put("k", "v", 0)
    with pytest.raises(CacheError):
        c.get("k")


def test_close_releases_key_memory(db_path):
    c = LevelCache(db_path, 0, 0, 0, logging.CRITICAL)
    initial = c.memory_usage()
    c.put("a", "1", 0)
    c.put("b", "2", 0)
    c.close()
    assert c.memory_usage() == initial


def test_negative_ttl_rejected(cache):
    with pytest.raises(ValueError):
        cache.put("k", "v", -1)