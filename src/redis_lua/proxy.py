import functools
import inspect
import logging
import typing
from typing import Any, Dict, Optional, Type

from .core.utils.defaults import default_value
from .decorators import get_script_spec
from .interceptor import LuaInterceptor, MethodEntry
from .models import RedisScript

log = logging.getLogger(__name__)

PROXY_TARGET_ATTR = "__redis_lua_target__"
DISPATCH_TABLE_ATTR = "__redis_lua_methods__"

# Bases whose members are never proxied (object, ABC, Protocol, Generic)
_SKIPPED_MODULES = ("builtins", "abc", "typing", "typing_extensions")


def resolve_return_type(func) -> Any:
    """Resolve the return annotation of ``func``, None when it has none."""
    try:
        hints = typing.get_type_hints(func)
    except Exception as e:
        log.debug(f"Could not resolve type hints for {func.__qualname__}: {e}")
        annotation = inspect.signature(func).return_annotation
        return None if annotation is inspect.Signature.empty else annotation
    return hints.get("return")


def _owner(cls: Type, name: str) -> Optional[Type]:
    for klass in cls.__mro__:
        if name in vars(klass):
            return klass
    return None


def _stub():
    ...


def _stub_with_doc():
    """Stub."""


async def _async_stub():
    ...


async def _async_stub_with_doc():
    """Stub."""


_STUB_BODIES = frozenset(
    stub.__code__.co_code
    for stub in (_stub, _stub_with_doc, _async_stub, _async_stub_with_doc)
)


def has_stub_body(func) -> bool:
    """Check whether ``func`` has only a docstring, ``...`` or ``pass`` as its body."""
    code = func.__code__
    if code.co_code not in _STUB_BODIES or code.co_names:
        return False
    return all(
        const is None or const is Ellipsis or const == func.__doc__
        for const in code.co_consts
    )


def _is_abstract(cls: Type, name: str, func) -> bool:
    if getattr(func, "__isabstractmethod__", False):
        return True
    # Protocol members without a body are declarations only
    owner = _owner(cls, name)
    return bool(getattr(owner, "_is_protocol", False)) and has_stub_body(func)


def build_dispatch_table(cls: Type) -> Dict[str, MethodEntry]:
    """Collect every proxiable method of ``cls`` into a dispatch table.

    Plain and async instance methods are included, dunder methods,
    static/class methods and properties are left to normal lookup.
    """
    table: Dict[str, MethodEntry] = {}
    names = {
        name
        for klass in cls.__mro__
        if klass.__module__ not in _SKIPPED_MODULES
        for name in vars(klass)
    }

    for name in sorted(names):
        if name.startswith("__") and name.endswith("__"):
            continue
        func = inspect.getattr_static(cls, name)
        if not inspect.isfunction(func):
            continue

        spec = get_script_spec(func)
        return_type = resolve_return_type(func)
        table[name] = MethodEntry(
            name=name,
            func=func,
            signature=inspect.signature(func),
            return_type=return_type,
            abstract=_is_abstract(cls, name, func),
            is_async=inspect.iscoroutinefunction(func),
            spec=spec,
            script=RedisScript(spec.script, return_type) if spec else None,
        )
    return table


def _make_method(entry: MethodEntry, interceptor: LuaInterceptor):
    if entry.is_async:

        async def method(self, *args, **kwargs):
            return await interceptor.intercept_async(entry, self, args, kwargs)

    else:

        def method(self, *args, **kwargs):
            return interceptor.intercept(entry, self, args, kwargs)

    functools.update_wrapper(method, entry.func)
    # update_wrapper copies __isabstractmethod__, which would keep ABCs uninstantiable
    method.__isabstractmethod__ = False
    return method


def _default_function(func):
    value = default_value(resolve_return_type(func))

    if inspect.iscoroutinefunction(func):

        async def default(*args, **kwargs):
            return value

    else:

        def default(*args, **kwargs):
            return value

    functools.update_wrapper(default, func)
    default.__isabstractmethod__ = False
    return default


def default_member(member: Any) -> Any:
    """Build a replacement for an abstract member that returns its zero value.

    Static methods, class methods and properties keep their kind. Any other
    abstract descriptor is replaced by None.
    """
    if isinstance(member, property):
        value = default_value(resolve_return_type(member.fget)) if member.fget else None
        return property(lambda self: value, doc=member.__doc__)
    if isinstance(member, (staticmethod, classmethod)):
        return type(member)(_default_function(member.__func__))
    if inspect.isfunction(member):
        return _default_function(member)
    return None


def create_proxy_class(cls: Type, interceptor: LuaInterceptor) -> Type:
    """
    Create a proxy subclass of ``cls`` whose methods route through ``interceptor``.

    Works for abstract base classes, Protocols and concrete classes alike:
    every abstract method is overridden, so the proxy class can always be
    instantiated.
    """
    if not inspect.isclass(cls):
        raise TypeError(f"Expected a class, got {type(cls).__name__}")

    table = build_dispatch_table(cls)
    namespace: Dict[str, Any] = {
        name: _make_method(entry, interceptor) for name, entry in table.items()
    }
    # Abstract members outside the dispatch table (static/class methods,
    # properties, dunders) still need an override to make the class instantiable
    for name in getattr(cls, "__abstractmethods__", ()):
        if name not in namespace:
            namespace[name] = default_member(inspect.getattr_static(cls, name))
            log.debug(f"Defaulting abstract member {cls.__qualname__}.{name}")
    namespace.update(
        {
            "__module__": cls.__module__,
            "__qualname__": f"{cls.__qualname__}RedisLuaProxy",
            "__doc__": cls.__doc__,
            PROXY_TARGET_ATTR: cls,
            DISPATCH_TABLE_ATTR: table,
        }
    )

    proxy_cls = type(cls)(f"{cls.__name__}RedisLuaProxy", (cls,), namespace)

    marked = sum(1 for entry in table.values() if entry.marked)
    log.debug(
        f"Created proxy class for {cls.__qualname__}: "
        f"{marked} script method(s), {len(table) - marked} pass-through"
    )
    return proxy_cls


def create_proxy(cls: Type, interceptor: LuaInterceptor, *args, **kwargs) -> Any:
    """Build the proxy class for ``cls`` and instantiate it."""
    proxy_cls = create_proxy_class(cls, interceptor)
    return proxy_cls(*args, **kwargs)
