"""The container facade: registration, retrieval and resolution in one place.

A :class:`Container` combines a :class:`~hodl.registry.BindingRegistry`, which holds
explicit bindings, with a :class:`~hodl.resolver.Resolver`, which builds anything
else by auto-wiring constructor parameters. Explicit bindings always win: when the
resolver needs a dependency that is bound, it retrieves it through :meth:`Container.get`.

Example:
    >>> container = Container()
    >>> container.add_singleton(Engine, lambda c: Engine(horsepower=300))
    >>> car = container.resolve(Car, {"color": "red"})
    >>> car.engine is container.get(Engine)
    True
"""

import logging
from typing import Any, Mapping, Optional, Union

from hodl.domain import Producer
from hodl.errors import ContainerError, NotFoundError
from hodl.introspection import ComponentKey, TypeIntrospector, is_key
from hodl.registry import BindingRegistry
from hodl.resolver import Resolver

__all__ = ["Container"]

logger = logging.getLogger(__name__)


class Container:
    """A service container with automatic constructor resolution.

    Producers registered with :meth:`add` and :meth:`add_singleton` are called with
    the container as their first argument, followed by any extra arguments passed to
    :meth:`get_with`.

    The container is not thread-safe. Register everything before sharing it between
    threads, or guard registration and first retrieval of singletons with a lock.

    Args:
        introspector: The capability used to locate classes and read their
            parameters. Defaults to a new :class:`~hodl.introspection.TypeIntrospector`.
    """

    def __init__(self, introspector: Optional[TypeIntrospector] = None):
        self._introspector = introspector or TypeIntrospector()
        self._registry = BindingRegistry(self._introspector)
        self._resolver = Resolver(self, self._introspector)

    def add(self, key: ComponentKey, producer: Producer) -> None:
        """Add a factory: ``producer`` is called anew every time ``key`` is retrieved.

        Raises:
            InvalidKeyError: If ``key`` does not name a class.
            KeyExistsError: If ``key`` is already bound.
        """
        self._registry.register_factory(key, producer)

    def add_singleton(self, key: ComponentKey, producer: Producer) -> None:
        """Add a singleton: ``producer`` is called on first retrieval and the result kept.

        Raises:
            InvalidKeyError: If ``key`` does not name a class.
            KeyExistsError: If ``key`` is already bound.
        """
        self._registry.register_singleton(key, producer)

    def add_instance(self, key: Union[ComponentKey, object], instance: Optional[object] = None) -> None:
        """Add an already-built object.

        Args:
            key: The key to add the instance under, or the instance itself, in which
                case its class is used as the key.
            instance: The object to add when ``key`` is a key.

        Raises:
            ContainerError: If a key is given without an object.
            InvalidKeyError: If the key does not name a class.
            KeyExistsError: If the key is already bound.

        Example:
            >>> container.add_instance(Database("sqlite://"))
            >>> container.add_instance("app.db.Database", Database("sqlite://"))
        """
        if instance is not None:
            self._registry.register_instance(key, instance)
        elif key is not None and not isinstance(key, (str, type)):
            self._registry.register_instance(type(key), key)
        else:
            raise ContainerError("An object instance must be passed")

    def alias(self, key: ComponentKey, alias: ComponentKey) -> None:
        """Make ``alias`` refer to the binding of ``key``."""
        self._registry.add_alias(key, alias)

    def bind(self, key: ComponentKey, interface: ComponentKey) -> None:
        """Bind a concrete class key to an interface, so the interface resolves to it.

        Same as :meth:`alias`.
        """
        self._registry.add_alias(key, interface)

    def has(self, key: ComponentKey) -> bool:
        """Whether ``key`` is bound, as a singleton, instance or factory.

        Values that cannot be keys, such as ``None`` or ``42``, are never bound.
        """
        if not is_key(key):
            return False
        return self._registry.has_singleton(key) or self._registry.has_factory(key)

    def get(self, key: ComponentKey) -> Any:
        """Retrieve the value bound to ``key``.

        Raises:
            NotFoundError: If ``key`` is not bound.
        """
        return self._retrieve(key, ())

    def get_with(self, key: ComponentKey, *args: Any) -> Any:
        """Retrieve the value bound to ``key``, passing ``args`` on to its producer.

        A singleton that is already materialised is returned as-is and ``args`` are
        ignored.

        Raises:
            NotFoundError: If ``key`` is not bound.
        """
        return self._retrieve(key, args)

    def remove(self, key: ComponentKey) -> bool:
        """Remove a binding, its cached value and its aliases.

        Args:
            key: The key to remove. Can also be an alias or bound interface.

        Returns:
            Whether a binding was removed.
        """
        return self._registry.remove(key)

    def remove_alias(self, alias: ComponentKey) -> bool:
        """Remove just an alias or interface binding, leaving the bound key intact."""
        return self._registry.remove_alias(alias)

    def resolve(self, type_id: ComponentKey, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Build ``type_id``, injecting bound values and auto-wiring everything else.

        See :meth:`hodl.resolver.Resolver.resolve`.
        """
        return self._resolver.resolve(type_id, args)

    def resolve_method(
        self,
        target: Union[object, ComponentKey],
        method: str,
        args: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Call ``method`` on ``target`` with auto-wired arguments.

        See :meth:`hodl.resolver.Resolver.resolve_method`.
        """
        return self._resolver.resolve_method(target, method, args)

    def __getitem__(self, key: ComponentKey) -> Any:
        return self.get(key)

    def __setitem__(self, key: ComponentKey, producer: Producer) -> None:
        self.add(key, producer)

    def __contains__(self, key: ComponentKey) -> bool:
        return self.has(key)

    def __delitem__(self, key: ComponentKey) -> None:
        self.remove(key)

    def _retrieve(self, key: ComponentKey, args: tuple) -> Any:
        registry = self._registry

        if registry.has_cached_value(key):
            return registry.get_cached_value(key)

        if registry.has_singleton(key):
            # Not materialised yet
            value = registry.get_producer(key)(self, *args)
            registry.store(key, value)
            logger.debug(f"Materialised singleton: {registry.canonical(key)}")
            return value

        if registry.has_factory(key):
            return registry.get_producer(key)(self, *args)

        raise NotFoundError(f"The key [{key}] could not be found")
