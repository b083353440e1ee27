import abc
from typing import Dict, Optional

from dotenv import load_dotenv
from redis import Redis

from redis_lua import LuaProxyRegistry, RedisScriptExecutor, lua, redis_lua

# Load environment variables from .env file
load_dotenv()

FIXED_WINDOW = """
local current = redis.call('INCR', KEYS[1])
if current == 1 then
    redis.call('EXPIRE', KEYS[1], ARGV[1])
end
return current
"""


@redis_lua
class RateLimiter(abc.ABC):
    """Fixed window rate limiting backed by Redis scripts."""

    @lua(FIXED_WINDOW, keys_count=1, args_count=1)
    @abc.abstractmethod
    def hit(self, key: str, window_seconds: int) -> int: ...

    @lua("return redis.call('TTL', KEYS[1])", keys_count=1)
    @abc.abstractmethod
    def retry_after(self, key: str) -> int: ...

    def allowed(self, user_id: str, limit: int = 10, window_seconds: int = 60) -> bool:
        return self.hit(f"rate:{user_id}", window_seconds) <= limit


@redis_lua
class Profiles(abc.ABC):
    @lua(
        "return redis.call('HSET', KEYS[1], ARGV[1], ARGV[2])",
        keys_count=1,
        args_count=2,
    )
    @abc.abstractmethod
    def set_field(self, key: str, field: str, value: str) -> int: ...

    @lua("return redis.call('HGETALL', KEYS[1])", keys_count=1)
    @abc.abstractmethod
    def load(self, key: str) -> Dict[str, str]: ...

    @lua("return redis.call('HGET', KEYS[1], ARGV[1])", keys_count=1, args_count=1)
    @abc.abstractmethod
    def get_field(self, key: str, field: str) -> Optional[str]: ...


if __name__ == "__main__":
    registry = LuaProxyRegistry(RedisScriptExecutor(Redis()))
    registry.register(RateLimiter)
    registry.register(Profiles)

    limiter = registry.get(RateLimiter)
    for attempt in range(12):
        if not limiter.allowed("user:42", limit=10):
            print(f"attempt {attempt}: throttled, retry in {limiter.retry_after('rate:user:42')}s")
        else:
            print(f"attempt {attempt}: allowed")

    profiles = registry.get(Profiles)
    profiles.set_field("profile:42", "name", "Ada")
    print(profiles.load("profile:42"))
    print(profiles.get_field("profile:42", "missing"))
