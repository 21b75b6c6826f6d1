"""
Computation-expression syntax tree.

Each node class mirrors one construct of a computation-expression body. Nodes
are immutable and own their children; the tree is consumed by
:func:`cexpr.engine.compose`, which rewrites it into builder operation calls.

Plain expressions (conditions, sources, cleanup actions) are callables taking
the environment, see :mod:`cexpr.patterns`.

Example::

    # maybe { let! x = opt; let! y = other; return x + y }
    Bind("x", Var("opt"),
         Bind("y", Var("other"),
              Return(lambda env: env["x"] + env["y"])))
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from cexpr.patterns import Expr, Pattern
from cexpr.utils import CreationContext, capture_creation_context


@dataclass(frozen=True)
class Node:
    """Base class of all computation constructs."""

    construct: ClassVar[str] = "<computation>"

    created_at: CreationContext | None = field(
        default=None, kw_only=True, compare=False, repr=False
    )

    def __post_init__(self) -> None:
        if self.created_at is None:
            # frames: capture -> __post_init__ -> __init__ -> caller
            object.__setattr__(self, "created_at", capture_creation_context(skip_frames=3))
        self._normalize()
        for child in self.children():
            if not isinstance(child, Node):
                raise TypeError(
                    f"{type(self).__name__} expects computation nodes as sub-blocks, "
                    f"got {type(child).__name__}; wrap plain expressions in Tail(...)"
                )

    def _normalize(self) -> None:
        pass

    def children(self) -> tuple[Any, ...]:
        """Sub-blocks that are themselves rewritten."""
        return ()


@dataclass(frozen=True)
class Arm:
    """One ``| pattern -> body`` case of a match or try-with."""

    pattern: Pattern
    body: Node


def _arm_tuple(owner: Node, arms: Sequence[Arm]) -> None:
    arms = tuple(arms)
    for arm in arms:
        if not isinstance(arm, Arm):
            raise TypeError(f"{type(owner).__name__} arms must be Arm instances, got {arm!r}")
    object.__setattr__(owner, "arms", arms)


@dataclass(frozen=True)
class Let(Node):
    """``let pat = expr in body``: an ordinary, non-monadic binding."""

    construct: ClassVar[str] = "let"

    pattern: Pattern
    expr: Expr
    body: Node

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class Bind(Node):
    """``let! pat = expr in body``."""

    construct: ClassVar[str] = "let!"

    pattern: Pattern
    expr: Expr
    body: Node

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class DoBind(Node):
    """``do! expr`` followed by ``body``; a trailing ``do!`` has no body."""

    construct: ClassVar[str] = "do!"

    expr: Expr
    body: Node | None = None

    def children(self) -> tuple[Any, ...]:
        return () if self.body is None else (self.body,)


@dataclass(frozen=True)
class Yield(Node):
    construct: ClassVar[str] = "yield"

    expr: Expr


@dataclass(frozen=True)
class YieldFrom(Node):
    construct: ClassVar[str] = "yield!"

    expr: Expr


@dataclass(frozen=True)
class Return(Node):
    construct: ClassVar[str] = "return"

    expr: Expr


@dataclass(frozen=True)
class ReturnFrom(Node):
    construct: ClassVar[str] = "return!"

    expr: Expr


@dataclass(frozen=True)
class Use(Node):
    """``use pat = expr in body``: the resource is released when body exits."""

    construct: ClassVar[str] = "use"

    pattern: Pattern
    expr: Expr
    body: Node

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class UseBind(Node):
    """``use! pat = expr in body``."""

    construct: ClassVar[str] = "use!"

    pattern: Pattern
    expr: Expr
    body: Node

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class If(Node):
    """``if cond then body`` with no else branch (the else path is Zero)."""

    construct: ClassVar[str] = "if-then"

    cond: Expr
    then_branch: Node

    def children(self) -> tuple[Any, ...]:
        return (self.then_branch,)


@dataclass(frozen=True)
class IfElse(Node):
    construct: ClassVar[str] = "if-then-else"

    cond: Expr
    then_branch: Node
    else_branch: Node

    def children(self) -> tuple[Any, ...]:
        return (self.then_branch, self.else_branch)


@dataclass(frozen=True)
class Match(Node):
    """``match expr with | pat -> body ...``."""

    construct: ClassVar[str] = "match"

    expr: Expr
    arms: tuple[Arm, ...]

    def _normalize(self) -> None:
        _arm_tuple(self, self.arms)

    def children(self) -> tuple[Any, ...]:
        return tuple(arm.body for arm in self.arms)


@dataclass(frozen=True)
class MatchBind(Node):
    """``match! expr with ...``: sugar for ``let! v = expr in match v with ...``."""

    construct: ClassVar[str] = "match!"

    expr: Expr
    arms: tuple[Arm, ...]

    def _normalize(self) -> None:
        _arm_tuple(self, self.arms)

    def children(self) -> tuple[Any, ...]:
        return tuple(arm.body for arm in self.arms)


@dataclass(frozen=True)
class For(Node):
    """``for pat in iterable do body``."""

    construct: ClassVar[str] = "for"

    pattern: Pattern
    iterable: Expr
    body: Node

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class ForRange(Node):
    """``for name = lo to hi do body``; both bounds are inclusive."""

    construct: ClassVar[str] = "for"

    name: str
    lo: Expr
    hi: Expr
    body: Node

    def _normalize(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError("ForRange binds a single name")

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class While(Node):
    construct: ClassVar[str] = "while"

    cond: Expr
    body: Node

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class TryWith(Node):
    """``try body with | pat -> handler ...``; unmatched exceptions propagate."""

    construct: ClassVar[str] = "try-with"

    body: Node
    arms: tuple[Arm, ...]

    def _normalize(self) -> None:
        _arm_tuple(self, self.arms)

    def children(self) -> tuple[Any, ...]:
        return (self.body, *(arm.body for arm in self.arms))


@dataclass(frozen=True)
class TryFinally(Node):
    construct: ClassVar[str] = "try-finally"

    body: Node
    cleanup: Expr

    def children(self) -> tuple[Any, ...]:
        return (self.body,)


@dataclass(frozen=True)
class Seq(Node):
    """``first; second``.

    ``first`` is either a computation (the two are joined with Combine) or a
    plain expression evaluated for its effect.
    """

    construct: ClassVar[str] = "sequential"

    first: Node | Expr
    second: Node

    def _normalize(self) -> None:
        if not isinstance(self.first, Node) and not callable(self.first):
            raise TypeError(
                f"Seq expects a computation or an expression first, got {type(self.first).__name__}"
            )

    @property
    def combines(self) -> bool:
        """True when both sides are computations."""
        return isinstance(self.first, Node)

    def children(self) -> tuple[Any, ...]:
        if self.combines:
            return (self.first, self.second)
        return (self.second,)


@dataclass(frozen=True)
class Tail(Node):
    """A trailing plain expression, evaluated for effect; the result is Zero."""

    construct: ClassVar[str] = "expression"

    expr: Expr


def block(*items: Node | Expr) -> Node:
    """Sequence ``items`` like the lines of a computation-expression body.

    A trailing plain expression becomes :class:`Tail`.
    """

    if not items:
        raise ValueError("block() requires at least one item")
    *leading, last = items
    node = last if isinstance(last, Node) else Tail(last)
    for item in reversed(leading):
        node = Seq(item, node)
    return node


__all__ = [
    "Arm",
    "Bind",
    "DoBind",
    "For",
    "ForRange",
    "If",
    "IfElse",
    "Let",
    "Match",
    "MatchBind",
    "Node",
    "Return",
    "ReturnFrom",
    "Seq",
    "Tail",
    "TryFinally",
    "TryWith",
    "Use",
    "UseBind",
    "While",
    "Yield",
    "YieldFrom",
    "block",
]
