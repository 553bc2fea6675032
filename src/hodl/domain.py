"""Domain models used throughout the container."""

import inspect
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Optional

__all__ = [
    "Producer",
    "BindingKind",
    "Binding",
    "ParameterDescriptor",
    "ResolutionFrame",
    "ResolutionStack",
]


Producer = Callable[..., Any]
"""A callable invoked as ``producer(container, *extra_args)`` to build a value."""


class BindingKind(Enum):
    """How a binding produces its value."""

    SINGLETON = "singleton"
    FACTORY = "factory"
    INSTANCE = "instance"

    @property
    def is_shared(self) -> bool:
        """Whether values of this kind are cached and shared between retrievals."""
        return self is not BindingKind.FACTORY


@dataclass(frozen=True)
class Binding:
    """Represents a registered construction strategy.

    Attributes:
        key: The canonical key the binding is registered under.
        kind: Whether the value is a lazily built singleton, a factory product or
            a pre-built instance.
        producer: The callable building the value. ``None`` for pre-built instances.
    """

    key: str
    kind: BindingKind
    producer: Optional[Producer] = None


@dataclass(frozen=True)
class ParameterDescriptor:
    """Describes one parameter of a constructor or method.

    Attributes:
        name: The parameter name in the callable's signature.
        declared_type: The annotated type, or ``None`` if the parameter is untyped.
        default: The default value, or ``inspect.Parameter.empty`` if there is none.
        keyword_only: Whether the parameter must be passed by keyword.
    """

    name: str
    declared_type: Optional[Any]
    default: Any = inspect.Parameter.empty
    keyword_only: bool = False

    @property
    def has_default(self) -> bool:
        return self.default is not inspect.Parameter.empty


@dataclass
class ResolutionFrame:
    """Arguments collected for one in-flight construction or invocation."""

    target: str
    arguments: list[Any] = field(default_factory=list)
    keywords: dict[str, Any] = field(default_factory=dict)

    def append(self, parameter: ParameterDescriptor, value: Any) -> None:
        if parameter.keyword_only:
            self.keywords[parameter.name] = value
        else:
            self.arguments.append(value)


class ResolutionStack:
    """Stack of frames for one outer resolution and everything it builds recursively.

    A stack is created per outer ``resolve``/``resolve_method`` call and passed down
    through the recursion, so a producer that calls back into the container while a
    resolution is in flight works on a stack of its own.

    Example:
        >>> stack = ResolutionStack()
        >>> with stack.push("Car") as frame:
        ...     with stack.push("Engine"):
        ...         stack.path
        ['Car', 'Engine']
        >>> stack.depth
        0
    """

    def __init__(self):
        self._frames: list[ResolutionFrame] = []

    @contextmanager
    def push(self, target: str) -> Iterator[ResolutionFrame]:
        """Push a fresh frame, popping exactly that frame when the block exits."""
        frame = ResolutionFrame(target)
        self._frames.append(frame)
        try:
            yield frame
        finally:
            self._frames.pop()

    @property
    def depth(self) -> int:
        return len(self._frames)

    @property
    def top(self) -> ResolutionFrame:
        return self._frames[-1]

    @property
    def path(self) -> list[str]:
        return [frame.target for frame in self._frames]

    def describe(self) -> str:
        return " -> ".join(self.path)
