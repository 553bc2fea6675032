"""Recursive auto-wiring of constructors and methods.

The resolver builds an object by reading its constructor's parameter list and
satisfying each parameter in declaration order:

1. a typed parameter whose type is bound in the container gets the bound value;
2. a typed parameter whose type is a concrete class is built recursively, unless
   the class has a C-level constructor (``date``, ``Decimal``) and the parameter
   has a default or a supplied value, in which case it is treated as in 4;
3. a typed parameter whose type is an unbound interface is an error;
4. anything else (untyped, scalar or non-class hints) is taken by name from the
   supplied arguments, falling back to the parameter's default.

The supplied arguments are one flat mapping shared by the whole recursion, so two
constructors at different depths that declare a parameter with the same name both
receive the same supplied value.

Cyclic dependency graphs are not detected and end in a ``RecursionError``.
"""

import inspect
import logging
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from hodl.domain import ParameterDescriptor, ResolutionFrame, ResolutionStack
from hodl.errors import ConcreteClassNotFoundError, ContainerError, UnresolvableParameterError
from hodl.introspection import ComponentKey, TypeIntrospector

if TYPE_CHECKING:
    from hodl.container import Container

__all__ = ["Resolver"]

logger = logging.getLogger(__name__)


class Resolver:
    """Builds objects and invokes methods by auto-wiring their parameters.

    Bindings registered in the container always take precedence over auto-wiring:
    a parameter whose type is bound receives ``container.get(type)``, so an already
    materialised singleton is injected everywhere it is needed.
    """

    def __init__(self, container: "Container", introspector: TypeIntrospector):
        self._container = container
        self._introspector = introspector

    def resolve(self, type_id: ComponentKey, args: Optional[Mapping[str, Any]] = None) -> Any:
        """Build an instance of ``type_id``, recursively resolving its dependencies.

        Args:
            type_id: The class to build, or its dotted name.
            args: Values for untyped or scalar parameters, keyed by parameter name.

        Returns:
            The new instance.

        Raises:
            ContainerError: If ``type_id`` is not a class, cannot be instantiated or
                cannot be introspected.
            ConcreteClassNotFoundError: If a dependency is an unbound interface.
            UnresolvableParameterError: If a parameter cannot be satisfied.
        """
        cls = self._introspector.locate(type_id)
        if cls is None:
            raise ContainerError(f"Class [{type_id}] does not exist so could not be resolved")

        return self._resolve(cls, args or {}, ResolutionStack())

    def resolve_method(
        self,
        target: Union[object, ComponentKey],
        method: str,
        args: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Invoke a method, resolving its parameters the way :meth:`resolve` does.

        If ``target`` is a class (or class name) and the method is an ordinary
        instance method, a receiver is built by calling the class with no arguments;
        its own constructor parameters are not injected.

        Args:
            target: An instance, a class, or the dotted name of a class.
            method: The name of the method to invoke.
            args: Values for untyped or scalar parameters, keyed by parameter name.

        Returns:
            Whatever the method returns.

        Raises:
            ContainerError: If the class or method does not exist, the method is not
                callable, or a receiver cannot be built without arguments.
        """
        cls, receiver = self._method_owner(target)
        description = f"{cls.__qualname__}.{method}()"

        owner = cls if receiver is None else receiver
        attribute = inspect.getattr_static(owner, method, None)
        if attribute is None or not callable(getattr(owner, method)):
            raise ContainerError(f"{description} does not exist or is not callable so could not be resolved")

        if receiver is None and not isinstance(attribute, (staticmethod, classmethod)):
            receiver = self._bare_instance(cls, description)

        bound = getattr(cls if receiver is None else receiver, method)
        stack = ResolutionStack()
        with stack.push(description) as frame:
            self._resolve_parameters(self._introspector.callable_parameters(bound), args or {}, stack)

        logger.debug(f"Invoking {description}")
        return bound(*frame.arguments, **frame.keywords)

    def _resolve(self, cls: type, args: Mapping[str, Any], stack: ResolutionStack) -> Any:
        if self._introspector.is_interface(cls):
            raise ContainerError(
                f"{cls.__qualname__} is abstract and cannot be instantiated"
                f"{_while(stack)}"
            )

        with stack.push(cls.__qualname__) as frame:
            parameters = self._introspector.constructor_parameters(cls)
            if parameters:
                self._resolve_parameters(parameters, args, stack)

        logger.debug(
            f"Constructing {cls.__qualname__} with "
            f"{len(frame.arguments) + len(frame.keywords)} argument(s)"
        )
        return cls(*frame.arguments, **frame.keywords)

    def _resolve_parameters(
        self, parameters: list[ParameterDescriptor], args: Mapping[str, Any], stack: ResolutionStack
    ) -> None:
        """Satisfy each parameter in declaration order, appending to the top frame."""
        for parameter in parameters:
            declared_type = parameter.declared_type

            if declared_type is None:
                self._resolve_by_name(parameter, args, stack)
                continue

            if self._resolve_from_container(parameter, stack.top):
                continue

            if self._introspector.is_constructible(declared_type) and not self._is_value(parameter, args):
                stack.top.append(parameter, self._resolve(declared_type, args, stack))
                continue

            if self._introspector.is_interface(declared_type):
                raise ConcreteClassNotFoundError(
                    f"{declared_type.__qualname__} is an interface with no bound implementation"
                    f"{_while(stack)}"
                )

            # A scalar or non-class hint is looked up by name like an untyped parameter
            self._resolve_by_name(parameter, args, stack)

    def _resolve_from_container(self, parameter: ParameterDescriptor, frame: ResolutionFrame) -> bool:
        """Append the bound value for the parameter's type, if the container has one."""
        declared_type = parameter.declared_type
        if not inspect.isclass(declared_type) or not self._container.has(declared_type):
            return False

        logger.debug(f"Injecting bound {declared_type} into {frame.target}")
        frame.append(parameter, self._container.get(declared_type))
        return True

    def _is_value(self, parameter: ParameterDescriptor, args: Mapping[str, Any]) -> bool:
        """Whether a C-implemented type such as ``date`` should come from its default or args."""
        return (parameter.has_default or parameter.name in args) and self._introspector.has_native_constructor(
            parameter.declared_type
        )

    @staticmethod
    def _resolve_by_name(parameter: ParameterDescriptor, args: Mapping[str, Any], stack: ResolutionStack) -> None:
        if parameter.name in args:
            stack.top.append(parameter, args[parameter.name])
        elif parameter.has_default:
            stack.top.append(parameter, parameter.default)
        else:
            raise UnresolvableParameterError(stack.describe(), parameter.name)

    def _method_owner(self, target: Union[object, ComponentKey]) -> tuple[type, Optional[object]]:
        """Split a method target into its class and, for instances, the receiver."""
        if isinstance(target, str) or inspect.isclass(target):
            cls = self._introspector.locate(target)
            if cls is None:
                raise ContainerError(f"Class [{target}] does not exist so its methods could not be resolved")
            return cls, None
        return type(target), target

    def _bare_instance(self, cls: type, description: str) -> Any:
        """Build a receiver for an instance method without injecting anything."""
        required = [
            parameter.name
            for parameter in self._introspector.constructor_parameters(cls)
            if not parameter.has_default
        ]
        if required:
            raise ContainerError(
                f"{description} is not static and {cls.__qualname__} cannot be built without "
                f"arguments (requires {', '.join(required)}); pass an instance instead"
            )
        return cls()


def _while(stack: ResolutionStack) -> str:
    return f" (while resolving {stack.describe()})" if stack.depth else ""
