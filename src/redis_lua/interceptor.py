"""Call interception for Redis Lua proxies.

Every method of a proxy class routes through ``LuaInterceptor``. Marked
methods are turned into one script execution; unmarked methods fall through
to their implementation, or return a zero value when they have none.
"""

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

from .core.utils.defaults import default_value
from .exceptions import ScriptArgumentError
from .models import LuaScriptSpec, RedisScript

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MethodEntry:
    """Dispatch table entry for one proxied method, built when the proxy class is created."""

    name: str
    func: Callable[..., Any]
    signature: inspect.Signature
    return_type: Any
    abstract: bool
    is_async: bool
    spec: Optional[LuaScriptSpec] = None
    script: Optional[RedisScript] = None

    @property
    def marked(self) -> bool:
        return self.spec is not None


def partition_arguments(
    arguments: Sequence[Any], keys_count: int, args_count: int
) -> Tuple[List[Any], List[Any]]:
    """Split call arguments into script KEYS and ARGV.

    keys is a new list of the first ``keys_count`` arguments. args is
    ``arguments[keys_count:keys_count + args_count]`` when ``args_count > 0``
    and at least ``keys_count + 1`` arguments were passed, else empty. A
    shorter tail truncates the args slice; missing ARGV slots are never
    padded with None, since redis-py rejects None arguments.

    Raises:
        ScriptArgumentError: If fewer than ``keys_count`` arguments were passed.
    """
    if len(arguments) < keys_count:
        raise ScriptArgumentError(
            f"Script expects {keys_count} key argument(s), got {len(arguments)}"
        )

    keys = list(arguments[:keys_count])
    if args_count > 0 and keys_count + 1 <= len(arguments):
        args = list(arguments[keys_count : keys_count + args_count])
    else:
        args = []
    return keys, args


def flatten_arguments(
    signature: inspect.Signature, instance: Any, args: tuple, kwargs: Dict[str, Any]
) -> List[Any]:
    """Bind a call to ``signature`` and return its arguments in declaration order.

    ``self`` is dropped, defaults are applied and ``*args`` is expanded in
    place. Keyword-only parameters follow the positional ones.
    """
    try:
        bound = signature.bind(instance, *args, **kwargs)
    except TypeError as e:
        raise ScriptArgumentError(str(e)) from e
    bound.apply_defaults()

    flat: List[Any] = []
    for index, (name, param) in enumerate(signature.parameters.items()):
        if index == 0:
            continue
        value = bound.arguments[name]
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            flat.extend(value)
        elif param.kind is inspect.Parameter.VAR_KEYWORD:
            if value:
                raise ScriptArgumentError(
                    f"Arbitrary keyword arguments cannot be passed to a script: {sorted(value)}"
                )
        else:
            flat.append(value)
    return flat


class LuaInterceptor:
    """Routes proxied calls either to the script executor or to the real method."""

    def __init__(self, executor: Any):
        self.executor = executor

    def _prepare(
        self, entry: MethodEntry, instance: Any, args: tuple, kwargs: Dict[str, Any]
    ) -> Tuple[RedisScript, List[Any], List[Any]]:
        arguments = flatten_arguments(entry.signature, instance, args, kwargs)
        keys, argv = partition_arguments(
            arguments, entry.spec.keys_count, entry.spec.args_count
        )
        log.debug(f"{entry.name}: script {entry.script.sha1[:8]} keys={keys} args={argv}")
        return entry.script, keys, argv

    def intercept(
        self, entry: MethodEntry, instance: Any, args: tuple, kwargs: Dict[str, Any]
    ) -> Any:
        """Handle one call of a synchronous method."""
        if not entry.marked:
            if entry.abstract:
                return default_value(entry.return_type)
            return entry.func(instance, *args, **kwargs)

        script, keys, argv = self._prepare(entry, instance, args, kwargs)
        return self.executor.execute(script, keys, argv)

    async def intercept_async(
        self, entry: MethodEntry, instance: Any, args: tuple, kwargs: Dict[str, Any]
    ) -> Any:
        """Handle one call of an ``async def`` method.

        Works with both executors: an awaitable result from the executor is
        awaited, a plain result is returned as is.
        """
        if not entry.marked:
            if entry.abstract:
                return default_value(entry.return_type)
            return await entry.func(instance, *args, **kwargs)

        script, keys, argv = self._prepare(entry, instance, args, kwargs)
        result = self.executor.execute(script, keys, argv)
        if inspect.isawaitable(result):
            result = await result
        return result
