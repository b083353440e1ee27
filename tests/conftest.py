"""
Test configuration and fixtures for redis-lua tests.

Provides shared fixtures for:
- Mock script executors and redis-py clients
- Sample @redis_lua components
- Environment variable management
"""

import abc
from typing import Dict, List, Optional
from unittest.mock import AsyncMock, Mock

import pytest

from redis_lua import lua, redis_lua
from redis_lua.interceptor import LuaInterceptor

HSET_SCRIPT = "return redis.call('HSET', KEYS[1], ARGV[1], ARGV[2])"
INCRBY_SCRIPT = "return redis.call('INCRBY', KEYS[1], ARGV[1])"
HGETALL_SCRIPT = "return redis.call('HGETALL', KEYS[1])"


@redis_lua
class UserStore(abc.ABC):
    """Abstract component mixing script, abstract and concrete methods."""

    @lua(HSET_SCRIPT, keys_count=1, args_count=2)
    @abc.abstractmethod
    def set_field(self, key: str, field: str, value: str) -> int: ...

    @lua(HGETALL_SCRIPT, keys_count=1)
    @abc.abstractmethod
    def get_all(self, key: str) -> Dict[str, str]: ...

    @lua("return redis.call('PING')")
    @abc.abstractmethod
    def ping(self) -> str: ...

    @abc.abstractmethod
    def count(self) -> int: ...

    @abc.abstractmethod
    def ratio(self) -> float: ...

    @abc.abstractmethod
    def enabled(self) -> bool: ...

    @abc.abstractmethod
    def name(self) -> Optional[str]: ...

    @abc.abstractmethod
    def tags(self) -> List[str]: ...

    def greeting(self, who: str) -> str:
        return f"hello {who}"


@pytest.fixture
def mock_executor():
    """Provide a mock synchronous script executor.

    Returns:
        Mock with an ``execute`` method returning "OK".
    """
    executor = Mock(spec=["execute"])
    executor.execute.return_value = "OK"
    return executor


@pytest.fixture
def mock_async_executor():
    """Provide a mock asynchronous script executor."""
    executor = Mock(spec=["execute"])
    executor.execute = AsyncMock(return_value="OK")
    return executor


@pytest.fixture
def interceptor(mock_executor):
    return LuaInterceptor(mock_executor)


@pytest.fixture
def mock_redis_client():
    """Provide a mock redis-py client whose registered scripts return b"1".

    Returns:
        Mock with ``register_script`` producing a fresh callable per script.
    """
    client = Mock()
    client.register_script = Mock(side_effect=lambda body: Mock(return_value=b"1"))
    return client


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch):
    """Remove redis-lua environment variables for the duration of a test."""
    for key in (
        "REDIS_LUA_URL",
        "REDIS_LUA_SCAN_PACKAGES",
        "REDIS_LUA_RICH_UI",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


@pytest.fixture
def user_store_cls():
    """Provide the sample abstract UserStore component class."""
    return UserStore
