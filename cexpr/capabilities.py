"""
Capability descriptor for computation-expression builders.

A builder supports any subset of the fixed operations in :data:`OPERATIONS`.
:class:`Capabilities` snapshots that subset once, when composition starts, and
is the only path through which the engine calls the builder. Every operation a
tree needs is checked by :meth:`Capabilities.validate` before the first
operation runs, so a missing operation never surfaces halfway through a
composition.
"""

from __future__ import annotations

import inspect
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable

from frozendict import frozendict

from cexpr.errors import MissingOperationError, OperationArityError
from cexpr.nodes import (
    Bind,
    DoBind,
    For,
    ForRange,
    If,
    MatchBind,
    Node,
    Return,
    ReturnFrom,
    Seq,
    Tail,
    TryFinally,
    TryWith,
    Use,
    UseBind,
    While,
    Yield,
    YieldFrom,
)


@runtime_checkable
class SupportsBind(Protocol):
    def bind(self, computation: Any, continuation: Callable[[Any], Any], /) -> Any: ...


@runtime_checkable
class SupportsReturn(Protocol):
    def return_(self, value: Any, /) -> Any: ...


@runtime_checkable
class SupportsReturnFrom(Protocol):
    def return_from(self, computation: Any, /) -> Any: ...


@runtime_checkable
class SupportsYield(Protocol):
    def yield_(self, value: Any, /) -> Any: ...


@runtime_checkable
class SupportsYieldFrom(Protocol):
    def yield_from(self, computation: Any, /) -> Any: ...


@runtime_checkable
class SupportsZero(Protocol):
    def zero(self) -> Any: ...


@runtime_checkable
class SupportsCombine(Protocol):
    def combine(self, first: Any, second: Any, /) -> Any: ...


@runtime_checkable
class SupportsDelay(Protocol):
    def delay(self, thunk: Callable[[], Any], /) -> Any: ...


@runtime_checkable
class SupportsRun(Protocol):
    def run(self, computation: Any, /) -> Any: ...


@runtime_checkable
class SupportsUsing(Protocol):
    def using(self, resource: Any, continuation: Callable[[Any], Any], /) -> Any: ...


@runtime_checkable
class SupportsFor(Protocol):
    def for_(self, iterable: Any, continuation: Callable[[Any], Any], /) -> Any: ...


@runtime_checkable
class SupportsWhile(Protocol):
    def while_(self, guard: Callable[[], bool], body: Any, /) -> Any: ...


@runtime_checkable
class SupportsTryWith(Protocol):
    def try_with(self, computation: Any, handler: Callable[[Exception], Any], /) -> Any: ...


@runtime_checkable
class SupportsTryFinally(Protocol):
    def try_finally(self, computation: Any, compensation: Callable[[], Any], /) -> Any: ...


@dataclass(frozen=True)
class Operation:
    """One named builder operation."""

    name: str
    attribute: str
    arity: int
    protocol: type


OPERATIONS: tuple[Operation, ...] = (
    Operation("Bind", "bind", 2, SupportsBind),
    Operation("Return", "return_", 1, SupportsReturn),
    Operation("ReturnFrom", "return_from", 1, SupportsReturnFrom),
    Operation("Yield", "yield_", 1, SupportsYield),
    Operation("YieldFrom", "yield_from", 1, SupportsYieldFrom),
    Operation("Zero", "zero", 0, SupportsZero),
    Operation("Combine", "combine", 2, SupportsCombine),
    Operation("Delay", "delay", 1, SupportsDelay),
    Operation("Run", "run", 1, SupportsRun),
    Operation("Using", "using", 2, SupportsUsing),
    Operation("For", "for_", 2, SupportsFor),
    Operation("While", "while_", 2, SupportsWhile),
    Operation("TryWith", "try_with", 2, SupportsTryWith),
    Operation("TryFinally", "try_finally", 2, SupportsTryFinally),
)

OPERATIONS_BY_NAME: Mapping[str, Operation] = frozendict((op.name, op) for op in OPERATIONS)
_OPERATIONS_BY_ATTRIBUTE: Mapping[str, Operation] = frozendict(
    (op.attribute, op) for op in OPERATIONS
)


def operation_for_key(key: str) -> Operation:
    """Resolve a mapping key given as operation name or attribute name."""

    op = OPERATIONS_BY_NAME.get(key) or _OPERATIONS_BY_ATTRIBUTE.get(key)
    if op is None:
        raise KeyError(f"Unknown builder operation: {key!r}")
    return op


def _check_arity(op: Operation, func: Callable[..., Any]) -> None:
    try:
        signature = inspect.signature(func)
    except (TypeError, ValueError):
        return
    try:
        signature.bind(*([None] * op.arity))
    except TypeError:
        raise OperationArityError(op.name, op.arity, str(signature)) from None


def _collect_from_mapping(builder: Mapping[str, Any]) -> dict[str, Callable[..., Any]]:
    found: dict[str, Callable[..., Any]] = {}
    for key, func in builder.items():
        op = operation_for_key(key)
        if func is None:
            continue
        if not callable(func):
            raise TypeError(f"Builder operation {op.name} must be callable, got {func!r}")
        if op.name in found:
            raise ValueError(f"Builder operation {op.name} given twice")
        found[op.name] = func
    return found


def _collect_from_object(builder: Any) -> dict[str, Callable[..., Any]]:
    found: dict[str, Callable[..., Any]] = {}
    for op in OPERATIONS:
        if not isinstance(builder, op.protocol):
            continue
        func = getattr(builder, op.attribute)
        if callable(func):
            found[op.name] = func
    return found


# construct -> operations it needs, for nodes whose needs do not depend on shape
_REQUIREMENTS: Mapping[type, tuple[str, ...]] = frozendict(
    {
        Bind: ("Bind",),
        MatchBind: ("Bind",),
        Yield: ("Yield",),
        YieldFrom: ("YieldFrom",),
        Return: ("Return",),
        ReturnFrom: ("ReturnFrom",),
        Use: ("Using",),
        UseBind: ("Bind", "Using"),
        If: ("Zero",),
        For: ("For",),
        ForRange: ("For",),
        While: ("While",),
        TryWith: ("TryWith", "Delay"),
        TryFinally: ("TryFinally", "Delay"),
        Tail: ("Zero",),
    }
)


def required_operations(node: Node) -> tuple[str, ...]:
    """Operations ``node`` itself (not its children) calls on the builder."""

    if isinstance(node, DoBind):
        return ("Bind",) if node.body is not None else ("Bind", "Return")
    if isinstance(node, Seq):
        return ("Combine",) if node.combines else ()
    return _REQUIREMENTS.get(type(node), ())


def iter_nodes(root: Node) -> Iterator[Node]:
    """Pre-order walk of a tree, without recursion."""

    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children()))


@dataclass(frozen=True)
class Capabilities:
    """The fixed set of operations a builder supports.

    Attributes:
        builder: The inspected builder.
        operations: Operation name to callable, captured at inspection time.
    """

    builder: Any
    operations: Mapping[str, Callable[..., Any]]

    @classmethod
    def inspect(cls, builder: Any) -> Capabilities:
        """Snapshot the operations ``builder`` exposes.

        Objects are searched for the methods named in :data:`OPERATIONS`;
        mappings may be keyed by operation name (``"Bind"``) or attribute
        name (``"bind"``).
        """

        if isinstance(builder, Capabilities):
            return builder
        if isinstance(builder, Mapping):
            found = _collect_from_mapping(builder)
        else:
            found = _collect_from_object(builder)
        for name, func in found.items():
            _check_arity(OPERATIONS_BY_NAME[name], func)
        ordered = frozendict((op.name, found[op.name]) for op in OPERATIONS if op.name in found)
        return cls(builder=builder, operations=ordered)

    @property
    def names(self) -> frozenset[str]:
        return frozenset(self.operations)

    def supports(self, operation: str) -> bool:
        return operation in self.operations

    def requires(self, operation: str, construct: str) -> Callable[..., Any]:
        """Return the callable for ``operation`` or raise ``MissingOperationError``."""

        try:
            return self.operations[operation]
        except KeyError:
            attribute = OPERATIONS_BY_NAME[operation].attribute
            raise MissingOperationError(construct, operation, attribute) from None

    def validate(self, root: Node) -> None:
        """Fail with the first missing operation anywhere in ``root``."""

        if not isinstance(root, Node):
            raise TypeError(f"Expected a computation node, got {type(root).__name__}")
        for node in iter_nodes(root):
            for operation in required_operations(node):
                self.requires(operation, node.construct)

    def __repr__(self) -> str:
        return f"Capabilities({type(self.builder).__name__}: {', '.join(self.operations)})"


__all__ = [
    "OPERATIONS",
    "OPERATIONS_BY_NAME",
    "Capabilities",
    "Operation",
    "SupportsBind",
    "SupportsCombine",
    "SupportsDelay",
    "SupportsFor",
    "SupportsReturn",
    "SupportsReturnFrom",
    "SupportsRun",
    "SupportsTryFinally",
    "SupportsTryWith",
    "SupportsUsing",
    "SupportsWhile",
    "SupportsYield",
    "SupportsYieldFrom",
    "SupportsZero",
    "iter_nodes",
    "operation_for_key",
    "required_operations",
]
