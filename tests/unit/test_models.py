"""Tests for redis_lua.models."""

import hashlib

from redis_lua.models import RedisScript


class TestRedisScript:
    def test_sha1_matches_redis(self):
        body = "return redis.call('GET', KEYS[1])"

        script = RedisScript(body, str)

        assert script.sha1 == hashlib.sha1(body.encode("utf-8")).hexdigest()

    def test_default_result_type(self):
        assert RedisScript("return 1").result_type is None

    def test_equality_ignores_sha(self):
        assert RedisScript("return 1", int) == RedisScript("return 1", int)
        assert RedisScript("return 1", int) != RedisScript("return 1", str)

    def test_hashable(self):
        assert len({RedisScript("return 1"), RedisScript("return 1")}) == 1
