"""Structural interface for code that only needs to look services up."""

from typing import Any, Protocol, runtime_checkable

from hodl.introspection import ComponentKey

__all__ = ["ServiceLocator"]


@runtime_checkable
class ServiceLocator(Protocol):
    """Anything that can check for and retrieve services by key.

    :class:`~hodl.container.Container` satisfies this protocol, so consumers can
    depend on ``ServiceLocator`` rather than on the concrete container.
    """

    def get(self, key: ComponentKey) -> Any: ...

    def has(self, key: ComponentKey) -> bool: ...
