"""Script executors backed by redis-py.

An executor runs a ``RedisScript`` with KEYS and ARGV and coerces the reply
to the script's declared result type. Scripts are registered once per
executor with ``register_script``; redis-py then calls EVALSHA and reloads
the script on NOSCRIPT.
"""

import logging
import threading
import types
from typing import Any, Dict, List, Protocol, Union, get_args, get_origin, runtime_checkable

import redis
import redis.asyncio

from .exceptions import ConfigurationError, ScriptResultError
from .models import RedisScript

log = logging.getLogger(__name__)

NoneType = type(None)


@runtime_checkable
class ScriptExecutor(Protocol):
    """Anything able to run a script against the store."""

    def execute(self, script: RedisScript, keys: List[Any], args: List[Any]) -> Any: ...


def _text(value: Any) -> str:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8")
    return str(value)


def _coerce_scalar(value: Any, result_type: type) -> Any:
    if result_type is bool:
        # Lua true arrives as 1, false as nil
        if isinstance(value, (bytes, bytearray, str)):
            return _text(value) not in ("", "0", "false")
        return bool(value)
    if result_type is int:
        return int(_text(value)) if isinstance(value, (bytes, bytearray)) else int(value)
    if result_type is float:
        return float(_text(value)) if isinstance(value, (bytes, bytearray)) else float(value)
    if result_type is str:
        return _text(value)
    if result_type is bytes:
        if isinstance(value, (bytes, bytearray)):
            return bytes(value)
        return str(value).encode("utf-8")
    return value


def coerce_result(value: Any, result_type: Any) -> Any:
    """Coerce a raw script reply to ``result_type``.

    A ``-> None`` annotation discards the reply. A nil reply stays None for
    every other type except ``bool``, which maps it to False. A missing
    annotation (``result_type`` None), ``Any`` and types without a known
    conversion get the raw reply.

    Raises:
        ScriptResultError: If the reply cannot be converted.
    """
    if result_type is NoneType:
        return None
    # No annotation
    if result_type is None or result_type is Any:
        return value
    if value is None:
        return False if result_type is bool else None

    origin = get_origin(result_type)
    type_args = get_args(result_type)

    try:
        if origin is Union or origin is types.UnionType:
            candidates = [arg for arg in type_args if arg is not NoneType]
            if len(candidates) == 1:
                return coerce_result(value, candidates[0])
            return value

        if result_type is list or origin is list:
            if not isinstance(value, (list, tuple)):
                raise ScriptResultError(
                    f"Expected an array reply for {result_type}, got {type(value).__name__}"
                )
            item_type = type_args[0] if type_args else Any
            return [coerce_result(item, item_type) for item in value]

        if result_type is dict or origin is dict:
            key_type, value_type = type_args if type_args else (Any, Any)
            if isinstance(value, dict):
                pairs = list(value.items())
            elif isinstance(value, (list, tuple)) and len(value) % 2 == 0:
                pairs = list(zip(value[::2], value[1::2]))
            else:
                raise ScriptResultError(
                    f"Expected a flat key/value array reply for {result_type}"
                )
            return {
                coerce_result(k, key_type): coerce_result(v, value_type)
                for k, v in pairs
            }

        if isinstance(result_type, type):
            return _coerce_scalar(value, result_type)
    except ScriptResultError:
        raise
    except (TypeError, ValueError, UnicodeDecodeError) as e:
        raise ScriptResultError(
            f"Cannot coerce script reply {value!r} to {result_type}: {e}"
        ) from e

    return value


class RedisScriptExecutor:
    """Runs scripts on a synchronous ``redis.Redis`` client."""

    def __init__(self, client: Any):
        """
        Args:
            client: A redis-py client. Shared, never mutated by the executor.

        Raises:
            ConfigurationError: If client is None.
        """
        if client is None:
            raise ConfigurationError(
                f"{self.__class__.__name__} requires a Redis client, got None"
            )
        self.client = client
        self._scripts: Dict[str, Any] = {}
        self._lock = threading.Lock()

    @classmethod
    def from_url(cls, url: str, **kwargs):
        """Build an executor with a client created from a redis:// URL."""
        return cls(redis.Redis.from_url(url, **kwargs))

    def _get_registered(self, script: RedisScript) -> Any:
        registered = self._scripts.get(script.sha1)
        if registered is None:
            with self._lock:
                registered = self._scripts.get(script.sha1)
                if registered is None:
                    registered = self.client.register_script(script.script)
                    self._scripts[script.sha1] = registered
                    log.debug(f"Registered script {script.sha1}")
        return registered

    def execute(self, script: RedisScript, keys: List[Any], args: List[Any]) -> Any:
        registered = self._get_registered(script)
        result = registered(keys=keys, args=args)
        return coerce_result(result, script.result_type)


class AsyncRedisScriptExecutor(RedisScriptExecutor):
    """Runs scripts on a ``redis.asyncio.Redis`` client."""

    @classmethod
    def from_url(cls, url: str, **kwargs):
        return cls(redis.asyncio.Redis.from_url(url, **kwargs))

    async def execute(self, script: RedisScript, keys: List[Any], args: List[Any]) -> Any:
        registered = self._get_registered(script)
        result = await registered(keys=keys, args=args)
        return coerce_result(result, script.result_type)
