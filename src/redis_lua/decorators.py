"""Marker decorators for Redis Lua proxying."""

import inspect
import logging
from typing import Any, Callable, Optional, TypeVar

from pydantic import ValidationError

from .config import COMPONENT_ATTR, SCRIPT_SPEC_ATTR
from .exceptions import ScriptDefinitionError
from .models import LuaScriptSpec

log = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])
C = TypeVar("C", bound=type)


def lua(script: str, keys_count: int = 0, args_count: int = 0) -> Callable[[F], F]:
    """
    Mark a method so that calls on a proxy run ``script`` on Redis.

    The first ``keys_count`` call arguments are passed as KEYS and the next
    ``args_count`` as ARGV. The reply is coerced to the method's return
    annotation by the script executor.

    The method body is never executed through a proxy, so marked methods are
    usually declared abstract.

    Example:
    ```python
        @redis_lua
        class Counters(abc.ABC):
            @lua("return redis.call('INCRBY', KEYS[1], ARGV[1])", keys_count=1, args_count=1)
            @abc.abstractmethod
            def incr_by(self, key: str, amount: int) -> int: ...
    ```

    Raises:
        ScriptDefinitionError: If the script is blank or a count is negative.
    """
    try:
        spec = LuaScriptSpec(script=script, keys_count=keys_count, args_count=args_count)
    except ValidationError as e:
        raise ScriptDefinitionError(f"Invalid @lua definition: {e}") from e

    def decorator(func: F) -> F:
        if not inspect.isfunction(func):
            raise ScriptDefinitionError(
                f"@lua can only decorate plain or async functions, got {type(func).__name__}"
            )
        setattr(func, SCRIPT_SPEC_ATTR, spec)
        return func

    return decorator


def redis_lua(cls: Optional[C] = None) -> Any:
    """
    Mark a class for discovery and proxying by ``LuaProxyRegistry``.

    Supports both ``@redis_lua`` and ``@redis_lua()``.
    """

    def decorator(target: C) -> C:
        if not inspect.isclass(target):
            raise ScriptDefinitionError(
                f"@redis_lua can only decorate classes, got {type(target).__name__}"
            )
        setattr(target, COMPONENT_ATTR, True)
        log.debug(f"Marked {target.__qualname__} as a Redis Lua component")
        return target

    if cls is not None:
        return decorator(cls)
    return decorator


def get_script_spec(func: Any) -> Optional[LuaScriptSpec]:
    """Return the ``@lua`` metadata of a function, or None when unmarked."""
    spec = getattr(func, SCRIPT_SPEC_ATTR, None)
    return spec if isinstance(spec, LuaScriptSpec) else None


def is_redis_lua_component(obj: Any) -> bool:
    """Check whether a class itself carries the ``@redis_lua`` marker."""
    return inspect.isclass(obj) and vars(obj).get(COMPONENT_ATTR, False) is True


__all__ = ["lua", "redis_lua", "get_script_spec", "is_redis_lua_component"]
