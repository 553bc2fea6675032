"""Hodl dependency injection container.

Hodl is a small service container that keeps "how to build X" in one place and
wires the dependents of X automatically by reading constructor type hints.

Key Features:
    - Factory, singleton and pre-built instance bindings
    - Aliases and interface bindings, removed together with their binding
    - Recursive constructor and method auto-wiring from standard type hints
    - Bound values always take precedence over auto-wiring
    - Dictionary-style access as a thin layer over the same operations

Basic Usage:
    >>> from hodl import Container
    >>>
    >>> container = Container()
    >>> container.add_singleton(Database, lambda c: Database("sqlite://"))
    >>> container.bind(Database, Storage)
    >>>
    >>> service = container.resolve(UserService)   # Storage injected
    >>> service.storage is container.get(Database)
    True

The package consists of several modules:
    - container: The Container facade
    - registry: Binding, cache and alias storage
    - resolver: Recursive auto-wiring of constructors and methods
    - introspection: Class lookup and parameter description
    - domain: Core domain models (Binding, ParameterDescriptor, ResolutionStack)
    - errors: Container exceptions
"""

import logging

from hodl.container import Container
from hodl.errors import (
    ConcreteClassNotFoundError,
    ContainerError,
    InvalidKeyError,
    KeyExistsError,
    NotFoundError,
    UnresolvableParameterError,
)
from hodl.interfaces import ServiceLocator
from hodl.introspection import ComponentKey, TypeIntrospector

__all__ = [
    "Container",
    "ComponentKey",
    "ServiceLocator",
    "TypeIntrospector",
    "ContainerError",
    "InvalidKeyError",
    "KeyExistsError",
    "NotFoundError",
    "ConcreteClassNotFoundError",
    "UnresolvableParameterError",
]

logging.getLogger(__name__).addHandler(logging.NullHandler())
