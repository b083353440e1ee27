"""Custom exceptions for redis_lua.

Errors raised by the Redis client while a script runs are not wrapped here;
they reach the caller unchanged.
"""


class RedisLuaError(Exception):
    """Base exception for redis_lua errors."""

    pass


class ConfigurationError(RedisLuaError):
    """Raised when no script executor is available at startup.

    Proxies cannot be built without an executor, so this aborts
    initialization before any proxy is handed out.
    """

    def __init__(self, message: str | None = None):
        """Initialize with optional custom message.

        Args:
            message: Optional custom error message. If not provided, uses default.
        """
        if message is None:
            message = self._default_message()
        super().__init__(message)

    @staticmethod
    def _default_message() -> str:
        """Generate default error message with setup instructions.

        Returns:
            Formatted error message with actionable steps.
        """
        return """A script executor is required but none was provided.

Pass one explicitly:

  from redis import Redis
  from redis_lua import LuaProxyRegistry, RedisScriptExecutor

  registry = LuaProxyRegistry(RedisScriptExecutor(Redis()))

Or configure the connection through the environment and use
LuaProxyRegistry.from_env():

  export REDIS_LUA_URL=redis://localhost:6379/0"""


class ScriptDefinitionError(RedisLuaError):
    """Raised when @lua metadata is invalid (empty script, negative counts)."""

    pass


class ScriptArgumentError(RedisLuaError, TypeError):
    """Raised when call arguments do not fit the method's keys_count."""

    pass


class ScriptResultError(RedisLuaError, ValueError):
    """Raised when a script reply cannot be coerced to the declared type."""

    pass


class ComponentLookupError(RedisLuaError, LookupError):
    """Raised when a registered component name cannot be resolved to a class."""

    pass
