"""Registration of @redis_lua classes and singleton proxy factories."""

import importlib
import logging
import threading
from typing import Any, Dict, Iterable, List, Optional, Type, Union

from .config import get_settings
from .core.discovery import ComponentDiscovery
from .exceptions import ComponentLookupError, ConfigurationError
from .executor import RedisScriptExecutor
from .interceptor import LuaInterceptor
from .proxy import create_proxy_class

log = logging.getLogger(__name__)


def component_name(cls: Type) -> str:
    """Default registration name of a class: ``module.QualName``."""
    return f"{cls.__module__}.{cls.__qualname__}"


def resolve_class(name: str) -> Type:
    """Resolve a dotted ``module.QualName`` to a class.

    Raises:
        ComponentLookupError: If no module prefix imports or an attribute is missing.
    """
    parts = name.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            obj: Any = importlib.import_module(module_name)
        except ImportError:
            continue
        try:
            for attr in parts[split:]:
                obj = getattr(obj, attr)
        except AttributeError as e:
            raise ComponentLookupError(f"Cannot resolve {name}: {e}") from e
        if not isinstance(obj, type):
            raise ComponentLookupError(f"{name} is not a class")
        return obj
    raise ComponentLookupError(f"Cannot resolve {name}: no importable module")


class LuaProxyFactory:
    """Produces and then reuses the single proxy instance of one class."""

    def __init__(
        self,
        inner_class_name: str,
        interceptor: LuaInterceptor,
        inner_class: Optional[Type] = None,
    ):
        self.inner_class_name = inner_class_name
        self.interceptor = interceptor
        self._inner_class = inner_class
        self._instance = None
        self._lock = threading.Lock()

    def get_object(self) -> Any:
        """Return the proxy, creating it on first request.

        Raises:
            ComponentLookupError: If the class behind the name cannot be resolved.
        """
        # Double-checked locking so concurrent first requests build one proxy
        if self._instance is None:
            with self._lock:
                if self._instance is None:
                    cls = self._inner_class or resolve_class(self.inner_class_name)
                    self._instance = create_proxy_class(cls, self.interceptor)()
                    log.info(f"Created Redis Lua proxy for {self.inner_class_name}")
        return self._instance

    def get_object_type(self) -> Optional[Type]:
        """Return the proxied class, or None when it cannot be resolved."""
        if self._inner_class is not None:
            return self._inner_class
        if not self.inner_class_name:
            return None
        try:
            return resolve_class(self.inner_class_name)
        except ComponentLookupError as e:
            log.error(str(e))
        return None

    def is_singleton(self) -> bool:
        return True


class LuaProxyRegistry:
    """
    Registry of Redis Lua components and their proxies.

    Example:
    ```python
        registry = LuaProxyRegistry(
            RedisScriptExecutor(Redis()),
            packages=["myapp.repositories"],
        )
        counters = registry.get(Counters)
        counters.incr_by("hits", 5)
    ```
    """

    def __init__(self, executor: Any, packages: Iterable[str] = ()):
        """
        Args:
            executor: Script executor shared by every proxy.
            packages: Scan roots to register immediately.

        Raises:
            ConfigurationError: If executor is None.
        """
        if executor is None:
            raise ConfigurationError()

        self.executor = executor
        self.interceptor = LuaInterceptor(executor)
        self._factories: Dict[str, LuaProxyFactory] = {}
        self._lock = threading.Lock()

        packages = list(packages)
        if packages:
            self.scan(*packages)

    @classmethod
    def from_env(cls, **client_kwargs) -> "LuaProxyRegistry":
        """Build a registry from REDIS_LUA_URL and REDIS_LUA_SCAN_PACKAGES."""
        settings = get_settings()
        executor = RedisScriptExecutor.from_url(settings.redis_url, **client_kwargs)
        return cls(executor, settings.scan_packages)

    def scan(self, *packages: str) -> List[str]:
        """Register every @redis_lua class found under ``packages``.

        Returns:
            Names of the registered components
        """
        discovery = ComponentDiscovery(packages)
        names = [self.register(cls) for cls in discovery.discover()]
        log.info(f"Registered {len(names)} Redis Lua component(s) from {', '.join(packages)}")
        return names

    def register(self, cls: Type, name: Optional[str] = None) -> str:
        """Install a singleton factory for ``cls``.

        Registering the same class twice keeps the existing factory.
        """
        name = name or component_name(cls)
        with self._lock:
            existing = self._factories.get(name)
            if existing is not None and existing.get_object_type() is cls:
                return name
            if existing is not None:
                log.warning(f"Replacing Redis Lua component registered as {name}")
            self._factories[name] = LuaProxyFactory(name, self.interceptor, cls)
        log.debug(f"Registered Redis Lua component {name}")
        return name

    def get_factory(self, key: Union[str, Type]) -> LuaProxyFactory:
        name = key if isinstance(key, str) else component_name(key)
        try:
            return self._factories[name]
        except KeyError:
            raise ComponentLookupError(f"No Redis Lua component registered as {name}") from None

    def get(self, key: Union[str, Type]) -> Any:
        """Return the singleton proxy for a registered name or class."""
        return self.get_factory(key).get_object()

    def names(self) -> List[str]:
        return list(self._factories)

    def __contains__(self, key: Union[str, Type]) -> bool:
        name = key if isinstance(key, str) else component_name(key)
        return name in self._factories

    def __len__(self) -> int:
        return len(self._factories)
