"""Discovery of @redis_lua classes inside scan roots."""

import importlib
import logging
import pkgutil
from types import ModuleType
from typing import Dict, Iterable, List, Type

from ..decorators import is_redis_lua_component

log = logging.getLogger(__name__)


class ComponentDiscovery:
    """Finds classes marked with @redis_lua in packages and modules."""

    def __init__(self, packages: Iterable[str]):
        """Initialize component discovery.

        Args:
            packages: Dotted names of packages or modules to scan. Packages
                are walked recursively.
        """
        self.packages = list(packages)
        self._cache: Dict[str, List[Type]] = {}

    def discover(self) -> List[Type]:
        """Discover all marked classes in the configured scan roots.

        Returns:
            Marked classes in discovery order, without duplicates
        """
        components: List[Type] = []
        for package in self.packages:
            if package not in self._cache:
                self._cache[package] = self._scan_root(package)
            for cls in self._cache[package]:
                if cls not in components:
                    components.append(cls)

        log.info(f"[Discovery] Total: {len(components)} component(s) discovered")
        for cls in components:
            log.debug(f"[Discovery]   {cls.__module__}.{cls.__qualname__}")
        return components

    def _scan_root(self, package: str) -> List[Type]:
        root = self._import_module(package)
        if root is None:
            return []

        components = self._find_components(root)

        # Walk subpackages and submodules of a package
        if hasattr(root, "__path__"):
            for module_info in pkgutil.walk_packages(
                root.__path__, prefix=f"{root.__name__}.", onerror=self._on_walk_error
            ):
                module = self._import_module(module_info.name)
                if module is not None:
                    components.extend(self._find_components(module))

        log.debug(f"[Discovery] {package}: {len(components)} component(s)")
        return components

    def _import_module(self, module_name: str) -> ModuleType | None:
        """Import a module by dotted name.

        Returns:
            Imported module or None if import fails
        """
        try:
            module = importlib.import_module(module_name)
        except Exception as e:
            log.warning(f"Failed to import {module_name}: {e}")
            return None
        return module

    @staticmethod
    def _on_walk_error(module_name: str) -> None:
        log.warning(f"Failed to import package {module_name} while scanning")

    @staticmethod
    def _find_components(module: ModuleType) -> List[Type]:
        """Return marked classes defined in ``module`` itself, not re-exported ones."""
        return [
            obj
            for obj in vars(module).values()
            if is_redis_lua_component(obj) and obj.__module__ == module.__name__
        ]

    def clear_cache(self):
        """Clear discovery cache."""
        self._cache.clear()
