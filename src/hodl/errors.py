"""Exceptions raised by the container."""

__all__ = [
    "ContainerError",
    "InvalidKeyError",
    "KeyExistsError",
    "NotFoundError",
    "ConcreteClassNotFoundError",
    "UnresolvableParameterError",
]


class ContainerError(Exception):
    """Raised when a target cannot be resolved, instantiated or introspected."""

    pass


class InvalidKeyError(ContainerError):
    """Raised when a registration key does not name a class."""

    pass


class KeyExistsError(ContainerError):
    """Raised when registering a key that is already bound."""

    pass


class NotFoundError(ContainerError, LookupError):
    """Raised when retrieving a key that has no binding."""

    pass


class ConcreteClassNotFoundError(ContainerError):
    """Raised when auto-wiring reaches an interface with no bound implementation."""

    pass


class UnresolvableParameterError(ContainerError, TypeError):
    """Raised when a parameter has no binding, supplied value or default."""

    def __init__(self, target: str, parameter_name: str):
        self.target = target
        self.parameter_name = parameter_name
        super().__init__(
            f"Unable to resolve parameter '{parameter_name}' of {target}: "
            "no binding, supplied argument or default value"
        )
