"""Storage of bindings, cached singleton values and aliases."""

import logging
from typing import Any, Optional

from hodl.domain import Binding, BindingKind, Producer
from hodl.errors import InvalidKeyError, KeyExistsError
from hodl.introspection import ComponentKey, TypeIntrospector

__all__ = ["BindingRegistry"]

logger = logging.getLogger(__name__)


class BindingRegistry:
    """Registry of bindings keyed by class name, with an alias table.

    Every lookup resolves its key through the alias table, so an alias can be used
    anywhere its canonical key can. Removing a binding removes every alias that
    points to it; removing an alias leaves the binding untouched.

    Example:
        >>> registry = BindingRegistry(TypeIntrospector())
        >>> registry.register_singleton(Database, lambda container: Database())
        >>> registry.add_alias(Database, "db")
        >>> registry.has_singleton("db")
        True
    """

    def __init__(self, introspector: TypeIntrospector):
        self._introspector = introspector
        self._bindings: dict[str, Binding] = {}
        self._cache: dict[str, Any] = {}
        self._aliases: dict[str, str] = {}

    def register_singleton(self, key: ComponentKey, producer: Producer) -> None:
        """Register a producer invoked once, on first retrieval.

        Raises:
            InvalidKeyError: If ``key`` does not name a class.
            KeyExistsError: If ``key`` is already bound.
        """
        self._register(Binding(self._checked_key(key), BindingKind.SINGLETON, producer))

    def register_factory(self, key: ComponentKey, producer: Producer) -> None:
        """Register a producer invoked anew on every retrieval.

        Raises:
            InvalidKeyError: If ``key`` does not name a class.
            KeyExistsError: If ``key`` is already bound.
        """
        self._register(Binding(self._checked_key(key), BindingKind.FACTORY, producer))

    def register_instance(self, key: ComponentKey, value: Any) -> None:
        """Register an already-built value as a singleton.

        Raises:
            InvalidKeyError: If ``key`` does not name a class.
            KeyExistsError: If ``key`` is already bound.
        """
        binding = Binding(self._checked_key(key), BindingKind.INSTANCE)
        self._register(binding)
        self._cache[binding.key] = value

    def canonical(self, key: ComponentKey) -> str:
        """Return the key an alias points to, or the normalised key itself.

        A key that is bound directly wins over an alias of the same name.
        """
        normalised = self._introspector.key_for(key)
        if normalised in self._bindings:
            return normalised
        return self._aliases.get(normalised, normalised)

    def get_binding(self, key: ComponentKey) -> Optional[Binding]:
        return self._bindings.get(self.canonical(key))

    def has_singleton(self, key: ComponentKey) -> bool:
        """Whether a singleton or pre-built instance is bound to ``key``."""
        binding = self.get_binding(key)
        return binding is not None and binding.kind.is_shared

    def has_factory(self, key: ComponentKey) -> bool:
        binding = self.get_binding(key)
        return binding is not None and binding.kind is BindingKind.FACTORY

    def has_cached_value(self, key: ComponentKey) -> bool:
        """Whether a singleton value has been materialised for ``key``."""
        return self.canonical(key) in self._cache

    def get_producer(self, key: ComponentKey) -> Producer:
        """Return the producer bound to ``key``.

        Raises:
            KeyError: If no binding with a producer exists; check with
                :meth:`has_singleton` or :meth:`has_factory` first.
        """
        binding = self._bindings[self.canonical(key)]
        if binding.producer is None:
            raise KeyError(binding.key)
        return binding.producer

    def get_cached_value(self, key: ComponentKey) -> Any:
        """Return the cached value for ``key``.

        Raises:
            KeyError: If no value is cached; check with :meth:`has_cached_value` first.
        """
        return self._cache[self.canonical(key)]

    def store(self, key: ComponentKey, value: Any) -> None:
        """Cache ``value`` under the canonical key resolved from ``key``."""
        self._cache[self.canonical(key)] = value

    def remove(self, key: ComponentKey) -> bool:
        """Remove a binding, its cached value and every alias pointing to it.

        Args:
            key: The key to remove. Can also be an alias, in which case the alias
                is detached and its canonical binding removed.

        Returns:
            True if a binding was removed, False if none existed.
        """
        key = self._introspector.key_for(key)
        if key in self._aliases:
            key = self._aliases.pop(key)

        binding = self._bindings.pop(key, None)
        if binding is None:
            return False

        self._cache.pop(key, None)
        self._remove_aliases_for(key)
        logger.debug(f"Removed {binding.kind.value} binding: {key}")
        return True

    def add_alias(self, key: ComponentKey, alias: ComponentKey) -> None:
        """Point ``alias`` at ``key``, replacing any previous target of ``alias``."""
        canonical = self._introspector.key_for(key)
        alias = self._introspector.key_for(alias)
        self._aliases[alias] = canonical
        logger.debug(f"Aliased {alias} -> {canonical}")

    def remove_alias(self, alias: ComponentKey) -> bool:
        """Remove just an alias, leaving its binding intact.

        Returns:
            True if the alias existed, False otherwise.
        """
        alias = self._introspector.key_for(alias)
        if self._aliases.pop(alias, None) is None:
            return False

        logger.debug(f"Removed alias: {alias}")
        return True

    def _register(self, binding: Binding) -> None:
        self._bindings[binding.key] = binding
        logger.debug(f"Registered {binding.kind.value}: {binding.key}")

    def _remove_aliases_for(self, key: str) -> None:
        for alias in [alias for alias, target in self._aliases.items() if target == key]:
            del self._aliases[alias]
            logger.debug(f"Removed alias {alias} of {key}")

    def _checked_key(self, key: ComponentKey) -> str:
        """Validate a key for registration and return its normalised form.

        Raises:
            InvalidKeyError: If ``key`` does not name a class.
            KeyExistsError: If ``key``, or the key it is an alias of, is already bound.
        """
        if self._introspector.locate(key) is None:
            raise InvalidKeyError(
                f"Key [{key}] was invalid. All keys must be classes or class names"
            )

        normalised = self._introspector.key_for(key)
        if self.get_binding(normalised) is not None:
            raise KeyExistsError(f"Key [{normalised}] already exists within the container")

        return normalised
