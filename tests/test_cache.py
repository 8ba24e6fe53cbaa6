import json
from unittest.mock import MagicMock

import pytest

from todo_api.core.cache import MemoryCache, RedisCache


class FakeClock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def memory(clock):
    return MemoryCache(clock=clock)


def test_memory_set_get_until_ttl(memory, clock):
    memory.set("user_token:1", "abc", 1_000)

    assert memory.get("user_token:1") == "abc"
    clock.advance(0.5)
    assert memory.get("user_token:1") == "abc"
    clock.advance(0.5)
    assert memory.get("user_token:1") is None


def test_memory_round_trips_json_values(memory):
    memory.set("todo:1", {"id": 1, "tags": ["a"]}, 5_000)

    assert memory.get("todo:1") == {"id": 1, "tags": ["a"]}


def test_memory_set_overwrites_and_resets_ttl(memory, clock):
    memory.set("k", "old", 1_000)
    clock.advance(0.5)
    memory.set("k", "new", 1_000)
    clock.advance(0.9)

    assert memory.get("k") == "new"


def test_memory_delete_is_exact_and_idempotent(memory):
    memory.set("todo:1", 1, 5_000)
    memory.set("todo:10", 10, 5_000)

    memory.delete("todo:1")
    memory.delete("todo:1")

    assert memory.get("todo:1") is None
    assert memory.get("todo:10") == 10


def test_memory_hit_counts_within_fixed_window(memory, clock):
    assert memory.hit("rl:ip:1", 60_000) == 1
    assert memory.hit("rl:ip:1", 60_000) == 2
    clock.advance(30)
    assert memory.hit("rl:ip:1", 60_000) == 3
    clock.advance(30)
    assert memory.hit("rl:ip:1", 60_000) == 1


def test_memory_clear(memory):
    memory.set("a", 1, 5_000)
    memory.clear()

    assert memory.get("a") is None


# ---- redis backend (client mocked) ----
@pytest.fixture
def redis_client():
    return MagicMock()


def test_redis_set_uses_millisecond_ttl_and_json(redis_client):
    RedisCache(redis_client).set("user_token:1", "abc", 900_000)

    redis_client.psetex.assert_called_once_with("user_token:1", 900_000, json.dumps("abc"))


def test_redis_get_decodes_json(redis_client):
    redis_client.get.return_value = json.dumps({"total": 3})

    assert RedisCache(redis_client).get("todo:stats:1") == {"total": 3}


def test_redis_get_miss(redis_client):
    redis_client.get.return_value = None

    assert RedisCache(redis_client).get("missing") is None


def test_redis_delete(redis_client):
    RedisCache(redis_client).delete("todo:1")

    redis_client.delete.assert_called_once_with("todo:1")


def test_redis_hit_sets_window_only_once(redis_client):
    pipe = redis_client.pipeline.return_value
    pipe.execute.return_value = [3, False]

    assert RedisCache(redis_client).hit("rl:ip:1", 60_000) == 3
    pipe.incr.assert_called_once_with("rl:ip:1")
    pipe.pexpire.assert_called_once_with("rl:ip:1", 60_000, nx=True)


def test_redis_errors_propagate(redis_client):
    redis_client.get.side_effect = ConnectionError("down")

    with pytest.raises(ConnectionError):
        RedisCache(redis_client).get("k")
