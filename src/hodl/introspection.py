"""Type lookup and parameter introspection used for auto-wiring.

The container never inspects classes directly: it asks a :class:`TypeIntrospector`
to turn keys into classes and callables into ordered parameter descriptions. A
subclass can be passed to :class:`~hodl.container.Container` to change how types
are located, for example to serve a pre-built table of types.
"""

import abc
import builtins
import importlib
import inspect
import logging
from enum import Enum
from typing import Any, Callable, Iterable, Optional, Union, get_type_hints

from hodl.domain import ParameterDescriptor
from hodl.errors import ContainerError, InvalidKeyError

__all__ = ["ComponentKey", "TypeIntrospector", "is_key", "key_for"]

logger = logging.getLogger(__name__)


ComponentKey = Union[str, type]
"""Type alias for keys used to register and look up bindings.

Bindings can be addressed either by a class or by a string. A class is
converted to its dotted ``module.qualname`` for internal lookup, so both forms
refer to the same binding.

Example:
    >>> container.get(Database)              # Lookup by type
    >>> container.get("app.db.Database")     # Same binding, by name
    >>> container.get("database")            # Lookup by alias
"""


def key_for(target: Any) -> str:
    """Normalise a class or string to the string form used as a registry key.

    Args:
        target: A class or a string.

    Returns:
        ``"module.qualname"`` for a class, or the string itself.

    Raises:
        InvalidKeyError: If ``target`` is neither a class nor a non-empty string.

    Example:
        >>> key_for(collections.OrderedDict)   # Returns "collections.OrderedDict"
        >>> key_for("dummy")                   # Returns "dummy"
    """
    if not is_key(target):
        raise InvalidKeyError(f"Key [{target!r}] was invalid. Keys must be classes or class names")
    if not inspect.isclass(target):
        return target
    if target.__module__ == "builtins":
        return target.__qualname__
    return f"{target.__module__}.{target.__qualname__}"


def is_key(target: Any) -> bool:
    """Whether ``target`` is usable as a key: a class or a non-empty string."""
    return inspect.isclass(target) or (isinstance(target, str) and bool(target))


class TypeIntrospector:
    """Locates classes by key and describes the parameters of callables."""

    def __init__(self):
        self._known_types: dict[str, type] = {}

    def key_for(self, target: Any) -> str:
        """Normalise ``target`` to a key, remembering it if it is a class."""
        if inspect.isclass(target):
            self.remember(target)
        return key_for(target)

    def remember(self, cls: type) -> None:
        """Record a class so that it can later be located by its key.

        Classes that cannot be imported by dotted path, such as those defined
        inside functions, are only locatable once remembered.
        """
        self._known_types.setdefault(key_for(cls), cls)

    def locate(self, key: ComponentKey) -> Optional[type]:
        """Find the class named by ``key``.

        Args:
            key: A class, or a string naming a class by its dotted path.

        Returns:
            The class, or ``None`` if ``key`` does not name a class.
        """
        if inspect.isclass(key):
            self.remember(key)
            return key
        if not isinstance(key, str) or not key:
            return None

        if key in self._known_types:
            return self._known_types[key]

        found = _import_dotted(key) if "." in key else getattr(builtins, key, None)
        if not inspect.isclass(found):
            return None

        logger.debug(f"Located {key} by import")
        self.remember(found)
        return found

    def constructor_parameters(self, cls: type) -> list[ParameterDescriptor]:
        """Describe the constructor parameters of ``cls`` in declaration order.

        Parameters and annotations are both read from the Python-level ``__init__``
        or ``__new__`` that runs when ``cls`` is called. A class that only inherits
        a C-level constructor, such as a bare subclass of ``dict`` or ``Exception``,
        is built without arguments.

        Raises:
            ContainerError: If the constructor signature or its annotations cannot
                be read.
        """
        description = f"constructor of {cls.__qualname__}"
        constructor = _python_constructor(cls)
        if constructor is None:
            if "__init__" not in vars(cls) and "__new__" not in vars(cls):
                return []
            return _describe(_signature(cls, description).parameters.values(), {})

        # Drop the receiver, self for __init__ or cls for __new__
        parameters = list(_signature(constructor, description).parameters.values())[1:]
        if not parameters:
            return []

        return _describe(parameters, _type_hints(constructor, cls.__qualname__))

    def has_native_constructor(self, cls: type) -> bool:
        """Whether ``cls`` is built by a constructor implemented in C.

        True for value types such as ``datetime.date`` or ``decimal.Decimal`` and
        for subclasses of them that add no ``__init__`` or ``__new__`` of their own.
        Classes that simply inherit ``object``'s constructor are not native.
        """
        if _python_constructor(cls) is not None:
            return False
        return any(
            base is not object and ("__init__" in vars(base) or "__new__" in vars(base))
            for base in cls.__mro__
        )

    def callable_parameters(self, func: Callable) -> list[ParameterDescriptor]:
        """Describe the parameters of a function or bound method in declaration order.

        Raises:
            ContainerError: If the signature or its annotations cannot be read.
        """
        name = getattr(func, "__qualname__", repr(func))
        parameters = _signature(func, name).parameters
        if not parameters:
            return []

        return _describe(parameters.values(), _type_hints(getattr(func, "__func__", func), name))

    def is_interface(self, cls: Any) -> bool:
        """Whether ``cls`` is an abstract class, a direct ``ABC`` subclass or a protocol."""
        if not inspect.isclass(cls):
            return False
        return (
            inspect.isabstract(cls)
            or abc.ABC in cls.__bases__
            or bool(getattr(cls, "_is_protocol", False))
        )

    def is_constructible(self, annotation: Any) -> bool:
        """Whether an annotation names a class the container can build by auto-wiring.

        Scalars and containers from ``builtins`` (``str``, ``int``, ``list``...),
        enums and non-class hints (``Optional[X]``, ``Any``, ``Callable[...]``) are
        not constructible: parameters annotated with them are treated as untyped.
        """
        return (
            inspect.isclass(annotation)
            and annotation.__module__ != "builtins"
            and not issubclass(annotation, Enum)
            and not self.is_interface(annotation)
        )


def _import_dotted(path: str) -> Any:
    """Import the longest importable module prefix of ``path`` and walk the rest.

    Example:
        >>> _import_dotted("collections.OrderedDict")  # Returns OrderedDict
        >>> _import_dotted("os.path.join")             # Returns os.path.join
        >>> _import_dotted("no.such.thing")            # Returns None
    """
    parts = path.split(".")
    for split in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:split])
        try:
            target = importlib.import_module(module_name)
        except (ImportError, ValueError):
            continue

        for attribute in parts[split:]:
            target = getattr(target, attribute, None)
            if target is None:
                return None
        return target

    return None


def _python_constructor(cls: type) -> Optional[Callable]:
    """The Python-level ``__init__`` or ``__new__`` that runs when ``cls`` is called.

    ``__init__`` is preferred. Returns ``None`` when both are implemented in C,
    as they are for ``object``, ``dict`` or ``datetime.date``.
    """
    for name in ("__init__", "__new__"):
        member = next(vars(base)[name] for base in cls.__mro__ if name in vars(base))
        if isinstance(member, staticmethod):
            member = member.__func__
        if inspect.isfunction(member):
            return member
    return None


def _signature(target: Any, description: str) -> inspect.Signature:
    try:
        return inspect.signature(target)
    except (TypeError, ValueError) as e:
        raise ContainerError(f"Unable to introspect {description}: {e}") from e


def _type_hints(func: Any, name: str) -> dict[str, Any]:
    try:
        return get_type_hints(func)
    except Exception as e:
        raise ContainerError(f"Unable to read type annotations of {name}: {e}") from e


def _describe(parameters: Iterable[inspect.Parameter], hints: dict[str, Any]) -> list[ParameterDescriptor]:
    return [
        ParameterDescriptor(
            parameter.name,
            hints.get(parameter.name),
            parameter.default,
            parameter.kind is inspect.Parameter.KEYWORD_ONLY,
        )
        for parameter in parameters
        if parameter.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
