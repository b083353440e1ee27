# Load .env vars from file before everything else
from dotenv import load_dotenv

load_dotenv()

from .logger import setup_logging  # noqa: E402

setup_logging()

# TYPE_CHECKING imports provide full IDE support (autocomplete, type hints)
# while __getattr__ defers importing redis until it is needed
from typing import TYPE_CHECKING  # noqa: E402

from .decorators import lua, redis_lua  # noqa: E402
from .exceptions import (  # noqa: E402
    ComponentLookupError,
    ConfigurationError,
    RedisLuaError,
    ScriptArgumentError,
    ScriptDefinitionError,
    ScriptResultError,
)
from .models import LuaScriptSpec, RedisScript  # noqa: E402

if TYPE_CHECKING:
    from .executor import (
        AsyncRedisScriptExecutor,
        RedisScriptExecutor,
        ScriptExecutor,
    )
    from .registry import LuaProxyFactory, LuaProxyRegistry

__version__ = "0.1.0"


def __getattr__(name):
    """Lazily import executor and registry modules only when accessed."""
    if name in ("AsyncRedisScriptExecutor", "RedisScriptExecutor", "ScriptExecutor"):
        from . import executor

        return getattr(executor, name)
    elif name in ("LuaProxyFactory", "LuaProxyRegistry"):
        from . import registry

        return getattr(registry, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "lua",
    "redis_lua",
    "LuaScriptSpec",
    "RedisScript",
    "RedisLuaError",
    "ConfigurationError",
    "ComponentLookupError",
    "ScriptArgumentError",
    "ScriptDefinitionError",
    "ScriptResultError",
    "AsyncRedisScriptExecutor",
    "RedisScriptExecutor",
    "ScriptExecutor",
    "LuaProxyFactory",
    "LuaProxyRegistry",
]
