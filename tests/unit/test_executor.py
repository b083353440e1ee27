"""Tests for redis_lua.executor."""

from typing import Any, Dict, List, Optional
from unittest.mock import AsyncMock, Mock, patch

import pytest
import redis
import redis.asyncio

from redis_lua.exceptions import ConfigurationError, ScriptResultError
from redis_lua.executor import (
    AsyncRedisScriptExecutor,
    RedisScriptExecutor,
    ScriptExecutor,
    coerce_result,
)
from redis_lua.models import RedisScript


class TestCoerceResult:
    """Test conversion of raw script replies."""

    @pytest.mark.parametrize(
        "value,result_type,expected",
        [
            (5, int, 5),
            (b"12", int, 12),
            ("12", int, 12),
            (b"1.5", float, 1.5),
            (3, float, 3.0),
            (1, bool, True),
            (0, bool, False),
            (None, bool, False),
            (b"abc", str, "abc"),
            ("abc", str, "abc"),
            (42, str, "42"),
            (b"raw", bytes, b"raw"),
            ("text", bytes, b"text"),
            (None, Optional[int], None),
            (b"7", Optional[int], 7),
            (b"7", int | None, 7),
            (None, str, None),
            (None, List[str], None),
        ],
    )
    def test_scalar_and_optional(self, value, result_type, expected):
        result = coerce_result(value, result_type)

        assert result == expected
        assert type(result) is type(expected)

    def test_none_annotation_discards_reply(self):
        assert coerce_result(b"OK", type(None)) is None

    def test_missing_annotation_returns_raw_reply(self):
        reply = [b"a", 1]

        assert coerce_result(reply, None) is reply

    def test_any_returns_raw_reply(self):
        reply = object()

        assert coerce_result(reply, Any) is reply

    def test_unknown_type_returns_raw_reply(self):
        class Custom:
            pass

        assert coerce_result(b"x", Custom) == b"x"

    def test_typed_list(self):
        assert coerce_result([b"1", b"2"], List[int]) == [1, 2]

    def test_builtin_generic_list(self):
        assert coerce_result([b"a", b"b"], list[str]) == ["a", "b"]

    def test_bare_list_keeps_items(self):
        assert coerce_result((b"a", 1), list) == [b"a", 1]

    def test_list_expected_but_scalar_reply(self):
        with pytest.raises(ScriptResultError, match="array reply"):
            coerce_result(5, List[int])

    def test_flat_array_folded_into_dict(self):
        reply = [b"name", b"ada", b"age", b"36"]

        assert coerce_result(reply, Dict[str, str]) == {"name": "ada", "age": "36"}

    def test_dict_values_coerced(self):
        assert coerce_result([b"hits", b"3"], dict[str, int]) == {"hits": 3}

    def test_dict_reply_coerced(self):
        assert coerce_result({b"a": b"1"}, Dict[str, int]) == {"a": 1}

    def test_odd_array_for_dict_raises(self):
        with pytest.raises(ScriptResultError, match="key/value"):
            coerce_result([b"a"], Dict[str, str])

    def test_unconvertible_reply_raises(self):
        with pytest.raises(ScriptResultError, match="Cannot coerce"):
            coerce_result(b"not-a-number", int)

    def test_result_error_is_value_error(self):
        with pytest.raises(ValueError):
            coerce_result(b"x", float)


class TestRedisScriptExecutor:
    """Test the synchronous redis-py executor."""

    def test_requires_client(self):
        with pytest.raises(ConfigurationError, match="requires a Redis client"):
            RedisScriptExecutor(None)

    def test_satisfies_executor_protocol(self, mock_redis_client):
        assert isinstance(RedisScriptExecutor(mock_redis_client), ScriptExecutor)

    def test_execute_passes_keys_and_args(self, mock_redis_client):
        executor = RedisScriptExecutor(mock_redis_client)
        script = RedisScript("return 1", int)

        result = executor.execute(script, ["user:42"], ["field", "value"])

        assert result == 1
        mock_redis_client.register_script.assert_called_once_with("return 1")
        registered = executor._scripts[script.sha1]
        registered.assert_called_once_with(keys=["user:42"], args=["field", "value"])

    def test_script_registered_once(self, mock_redis_client):
        executor = RedisScriptExecutor(mock_redis_client)
        script = RedisScript("return 1", int)

        executor.execute(script, [], [])
        executor.execute(RedisScript("return 1", str), [], [])

        mock_redis_client.register_script.assert_called_once()

    def test_distinct_scripts_registered_separately(self, mock_redis_client):
        executor = RedisScriptExecutor(mock_redis_client)

        executor.execute(RedisScript("return 1"), [], [])
        executor.execute(RedisScript("return 2"), [], [])

        assert mock_redis_client.register_script.call_count == 2

    def test_reply_coerced_to_result_type(self, mock_redis_client):
        executor = RedisScriptExecutor(mock_redis_client)

        assert executor.execute(RedisScript("return '1'", str), [], []) == "1"

    def test_redis_error_propagates_once(self):
        client = Mock()
        registered = Mock(side_effect=redis.exceptions.ResponseError("ERR boom"))
        client.register_script.return_value = registered
        executor = RedisScriptExecutor(client)

        with pytest.raises(redis.exceptions.ResponseError, match="boom"):
            executor.execute(RedisScript("return x"), ["k"], [])

        assert registered.call_count == 1

    def test_from_url(self):
        with patch.object(redis.Redis, "from_url") as from_url:
            executor = RedisScriptExecutor.from_url(
                "redis://cache:6379/1", socket_timeout=2
            )

        from_url.assert_called_once_with("redis://cache:6379/1", socket_timeout=2)
        assert executor.client is from_url.return_value


class TestAsyncRedisScriptExecutor:
    """Test the redis.asyncio executor."""

    @pytest.fixture
    def async_client(self):
        client = Mock()
        client.register_script = Mock(
            side_effect=lambda body: AsyncMock(return_value=[b"a", b"b"])
        )
        return client

    @pytest.mark.asyncio
    async def test_execute_awaits_script(self, async_client):
        executor = AsyncRedisScriptExecutor(async_client)
        script = RedisScript("return {'a', 'b'}", List[str])

        result = await executor.execute(script, ["k"], ["v"])

        assert result == ["a", "b"]
        executor._scripts[script.sha1].assert_awaited_once_with(keys=["k"], args=["v"])

    @pytest.mark.asyncio
    async def test_script_registered_once(self, async_client):
        executor = AsyncRedisScriptExecutor(async_client)
        script = RedisScript("return {'a', 'b'}")

        await executor.execute(script, [], [])
        await executor.execute(script, [], [])

        async_client.register_script.assert_called_once()

    def test_from_url_uses_asyncio_client(self):
        with patch.object(redis.asyncio.Redis, "from_url") as from_url:
            executor = AsyncRedisScriptExecutor.from_url("redis://cache:6379/0")

        from_url.assert_called_once_with("redis://cache:6379/0")
        assert executor.client is from_url.return_value
