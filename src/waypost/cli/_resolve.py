"""Import resolution — resolves ``"module:attribute"`` strings.

Used by ``waypost serve`` to locate the service mapping and the optional
forwarding application from user-supplied import strings.
"""

import importlib
from collections.abc import Callable, Mapping
from typing import Any


def _import(import_string: str, default_attr: str) -> Any:
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = default_attr

    module = importlib.import_module(module_path)
    return getattr(module, attr_name)


def resolve_services(import_string: str) -> Mapping[str, Callable[..., Any]]:
    """Resolve an import string to a mapping of service name to callable.

    Accepts ``"module:attribute"`` format. When the attribute portion is
    omitted, defaults to ``"services"``. A callable that is not a mapping
    is treated as a factory and called with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not a mapping of callables.
    """
    obj = _import(import_string, "services")

    if callable(obj) and not isinstance(obj, Mapping):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Mapping):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a mapping of services"
        raise TypeError(msg)
    for name, service in obj.items():
        if not callable(service):
            msg = f"Service {name!r} in {import_string!r} is not callable"
            raise TypeError(msg)
    return obj


def resolve_app(import_string: str) -> Callable[..., Any]:
    """Resolve an import string to an ASGI application (default attribute ``app``).

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the resolved object is not callable.
    """
    obj = _import(import_string, "app")
    if not callable(obj):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not an ASGI application"
        raise TypeError(msg)
    return obj
