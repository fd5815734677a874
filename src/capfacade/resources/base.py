"""Base class for all resources.

A Resource is a facade bound to one controller. The controller may implement
any subset of the primitive methods; each resource type declares which
primitives every one of its operations needs, and callers can ask what the
bound controller supports before trying anything.

Key concepts:
- Capability tables are class metadata, built once when the class is defined
- @requires marks the method implementing an operation with its primitives
- supports()/supported() answer from the table alone, never from call history
- require_capability() is the fail-fast guard for primitives with no fallback
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping, TypeVar

from capfacade.controller import has_primitive
from capfacade.errors import CapabilityMissing, ConsoleUnavailable, UnknownOperation

logger = logging.getLogger(__name__)

_MARKER = "__resource_operations__"

F = TypeVar("F", bound=Callable[..., Any])


def _operation_name(func: Callable) -> str:
    return func.__name__.lstrip("_").removesuffix("_hook")


def requires(*primitives: str, operation: str | None = None) -> Callable[[F], F]:
    """Declare the primitives an operation needs from the controller.

    The operation name defaults to the decorated method's name with leading
    underscores and a trailing ``_hook`` removed, so ``_read_hook`` declares
    ``read``. Stack the decorator to declare several operations on one method.

    Example:
        class Clock(Resource):
            @requires("clock_now")
            def now(self):
                return self.controller.clock_now()
    """

    def decorate(func: F) -> F:
        name = operation or _operation_name(func)
        declared = list(getattr(func, _MARKER, ()))
        declared.append((name, tuple(primitives)))
        setattr(func, _MARKER, tuple(declared))
        return func

    return decorate


def capability_table(resource_type: type) -> Mapping[str, tuple[str, ...]]:
    """Return the operation -> primitives table of a resource type."""
    return resource_type.capabilities


class Resource:
    """Base class for all resources.

    Subclasses should:
    - Set `name` and `description` class attributes
    - Mark each operation with @requires, listing the primitives it calls
    - Use require_capability() for primitives that have no fallback
    - Override console() if they provide an interactive session
    """

    name: str = "resource"
    description: str = "A controller-backed resource."

    # Filled in by __init_subclass__; shared by every instance.
    capabilities: Mapping[str, tuple[str, ...]] = MappingProxyType({})

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)

        table: dict[str, tuple[str, ...]] = {}
        for base in reversed(cls.__mro__[1:]):
            table.update(getattr(base, "capabilities", {}))

        for attr in vars(cls).values():
            for operation, primitives in getattr(attr, _MARKER, ()):
                table[operation] = primitives

        cls.capabilities = MappingProxyType(table)

    def __init__(self, controller: object):
        """Bind the resource to its controller.

        Args:
            controller: The object implementing the backend primitives.
                The resource keeps a reference but does not own it.
        """
        self._controller = controller

    @property
    def controller(self) -> object:
        """The object controlling the resource."""
        return self._controller

    def supports(self, *operations: str) -> bool:
        """Check whether the controller supports all the named operations.

        Args:
            *operations: Operation names declared by this resource type.

        Returns:
            True if every primitive of every named operation is defined.

        Raises:
            UnknownOperation: If an operation is not declared by this type.

        Example:
            file.supports("read", "write")
        """
        table = type(self).capabilities
        for operation in operations:
            if operation not in table:
                raise UnknownOperation(operation, type(self).__name__)
            if not all(has_primitive(self._controller, p) for p in table[operation]):
                return False
        return True

    def supported(self) -> frozenset[str]:
        """Return the names of the operations the controller supports."""
        return frozenset(
            operation
            for operation in type(self).capabilities
            if self.supports(operation)
        )

    def require_capability(self, primitive: str) -> bool:
        """Require that the controller defines `primitive`.

        Returns:
            True if the primitive is defined.

        Raises:
            CapabilityMissing: If the controller does not define it.
        """
        if not has_primitive(self._controller, primitive):
            logger.debug(
                "capability missing resource=%s primitive=%s",
                type(self).__name__,
                primitive,
            )
            raise CapabilityMissing(primitive, type(self).__name__, self._controller)
        return True

    def console(self) -> Any:
        """Start an interactive console for the resource.

        Raises:
            ConsoleUnavailable: Resources do not provide a console by default.
        """
        raise ConsoleUnavailable(f"{type(self).__name__} does not provide a console")

    def describe(self) -> str:
        """Return a self-documenting description of this resource.

        Lists every declared operation with the primitives it needs and
        whether the bound controller supports it.
        """
        lines = [f"{self.name}: {self.description}", "", "Operations:"]

        for operation, primitives in sorted(type(self).capabilities.items()):
            mark = "+" if self.supports(operation) else "-"
            needs = ", ".join(primitives) if primitives else "(none)"
            lines.append(f"  {mark} {operation}  [{needs}]")

        return "\n".join(lines)

    def __repr__(self) -> str:
        supported = len(self.supported())
        total = len(type(self).capabilities)
        return f"<{type(self).__name__}(name='{self.name}', supports={supported}/{total})>"


__all__ = [
    "Resource",
    "requires",
    "capability_table",
]
