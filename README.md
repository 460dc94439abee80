# levelcache

A small string key-value cache kept on disk, with a time-to-live for each
key, an optional background thread that removes expired keys, and an
estimate of the memory held by its in-memory index. The data lives in an
SQLite file (`store.sqlite`) inside the directory you give; only the
standard library is needed.

## Installation

```
pip install levelcache
```

## Usage

```python
import logging

from levelcache.cache import LevelCache

with LevelCache("/tmp/my_project_db", 10, 0, 0, logging.INFO) as cache:
    cache.put("greeting", "Hello from levelcache!", 0)   # 0 uses the default TTL
    print(cache.get("greeting"))                        # Hello from levelcache!
    cache.delete("greeting")
    print(cache.get("greeting"))                        # None
    print(cache.memory_usage())
```

`LevelCache(path, max_memory_mb, default_ttl_seconds, cleanup_frequency_sec, log_level)`:

- `path` – the directory holding the store. It is created if missing, and
  any store already there is wiped when the cache is opened.
- `max_memory_mb` – the size of the store's page cache in megabytes; 0
  leaves the store's default. It is also added to the memory estimate.
- `default_ttl_seconds` – the TTL used when `put` is given 0; 0 here means
  one day.
- `cleanup_frequency_sec` – how often, in seconds, a background thread
  deletes expired keys; 0 starts no thread.
- `log_level` – the level set on the `levelcache` logger.

Negative numbers for any of these raise `ValueError`.

Methods:

- `put(key, value, ttl_seconds=0)` – store a string; putting an existing key
  replaces its value and restarts its TTL.
- `get(key)` – the value, or `None` if the key is missing or has expired. An
  expired key is deleted when it is read.
- `delete(key)` – remove a key; removing a missing key is not an error.
- `memory_usage()` – the estimated bytes held by the cache: a fixed handle
  cost, the page cache size, and a cost per indexed key.
- `close()` – stop the cleanup thread and close the store; calling it twice
  is harmless. The cache is also a context manager that closes on exit.

A failure in the store, or any call on a closed cache, raises
`levelcache.cache.CacheError`. The cache is safe to use from several
threads. Expiry is tracked in memory only, so keys do not survive closing
and reopening the cache.

## Commands

Store one greeting and read it back (the database directory is optional and
defaults to `my_project_db` in the system temporary directory):

```
levelcache-example [db_path]
```

Time random writes and reads and print items per second with p50/p90/p95/p99
latencies in nanoseconds:

```
levelcache-benchmark [--path DIR] [--memory-mb N] [--prepopulate N] [--iterations N] [--repetitions N]
```

The benchmark removes `--path` (default `levelcache_gbenchmark_db` in the
system temporary directory) before and after it runs. Defaults: 100 MB,
20000 prepopulated keys, 100000 iterations, 3 repetitions.

## What it does not do

There is no server or network access: the cache is a library used within
one process. It stores strings only and does not evict keys when memory runs
short; `memory_usage()` is an estimate, not a limit.

## Tests

```
pip install "levelcache[test]"
pytest
```