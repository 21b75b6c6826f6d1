"""
Immutable stacks and the ``stack`` builder.

``Stack`` is a cons list: ``EMPTY`` or ``Cons(top, rest)``. The builder
collects yielded values in order and iterates with For::

    squares = stack(For("x", Const([1, 2, 3]), Yield(lambda env: env["x"] ** 2)))
    to_list(squares)    # [1, 4, 9]

Stacks are built eagerly; Delay simply runs the body.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass
from typing import Any, Final, Generic, TypeVar

from cexpr.builders.base import Builder

T = TypeVar("T")
U = TypeVar("U")
A = TypeVar("A")


class Stack(Generic[T]):
    """Base of ``Cons`` and ``Empty``; iterates from the top down."""

    __slots__ = ()

    def __iter__(self) -> Iterator[T]:
        node: Stack[T] = self
        while isinstance(node, Cons):
            yield node.top
            node = node.rest

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Stack):
            return NotImplemented
        return list(self) == list(other)

    def __hash__(self) -> int:
        return hash(tuple(self))

    def __repr__(self) -> str:
        if isinstance(self, Empty):
            return "Empty()"
        return f"Stack({list(self)!r})"


@dataclass(frozen=True, eq=False, repr=False)
class Cons(Stack[T], Generic[T]):
    top: T
    rest: Stack[T]


class Empty(Stack[Any]):
    """Singleton empty stack."""

    __slots__ = ()
    _instance: Empty | None = None

    def __new__(cls) -> Empty:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance


EMPTY: Final[Stack[Any]] = Empty()


def push(value: T, stack: Stack[T]) -> Stack[T]:
    """Pushes a new value on top of the stack."""

    return Cons(value, stack)


def pop(stack: Stack[T]) -> tuple[T, Stack[T]]:
    """Pops the top value off the stack, returning it and the remaining stack."""

    if isinstance(stack, Cons):
        return stack.top, stack.rest
    raise IndexError("Nothing to pop!")


def singleton(value: T) -> Stack[T]:
    return Cons(value, EMPTY)


def from_iterable(values: Iterable[T]) -> Stack[T]:
    """Stack whose top is the first item of ``values``."""

    result: Stack[T] = EMPTY
    for value in reversed(list(values)):
        result = Cons(value, result)
    return result


def foldl(func: Callable[[A, T], A], initial: A, stack: Stack[T]) -> A:
    """Left fold: ``func(func(func(initial, s0), s1), s2)``."""

    acc = initial
    for value in stack:
        acc = func(acc, value)
    return acc


def foldr(func: Callable[[T, A], A], initial: A, stack: Stack[T]) -> A:
    """Right fold: ``func(s0, func(s1, func(s2, initial)))``."""

    acc = initial
    for value in reversed(list(stack)):
        acc = func(value, acc)
    return acc


def map_stack(func: Callable[[T], U], stack: Stack[T]) -> Stack[U]:
    return from_iterable(func(value) for value in stack)


def append(first: Stack[T], second: Stack[T]) -> Stack[T]:
    """``first`` on top of ``second``, like list concatenation."""

    return foldr(push, second, first)


def collect(func: Callable[[T], Stack[U]], values: Iterable[T]) -> Stack[U]:
    """Applies ``func`` to each element and concatenates the resulting stacks."""

    items: list[U] = []
    for value in values:
        produced = func(value)
        if not isinstance(produced, Stack):
            raise TypeError(f"collect expects a Stack from each step, got {type(produced).__name__}")
        items.extend(produced)
    return from_iterable(items)


def to_list(stack: Stack[T]) -> list[T]:
    return list(stack)


def total(stack: Stack[Any]) -> Any:
    """Sum of the stack's elements."""

    return foldr(lambda value, acc: value + acc, 0, stack)


class StackBuilder(Builder):
    def yield_(self, value: Any) -> Stack[Any]:
        return singleton(value)

    def yield_from(self, computation: Stack[Any]) -> Stack[Any]:
        if not isinstance(computation, Stack):
            raise TypeError(f"yield! expects a Stack, got {type(computation).__name__}")
        return computation

    def combine(self, first: Stack[Any], second: Stack[Any]) -> Stack[Any]:
        return append(first, second)

    def for_(self, iterable: Iterable[Any], continuation: Callable[[Any], Stack[Any]]) -> Stack[Any]:
        return collect(continuation, iterable)

    def delay(self, thunk: Callable[[], Stack[Any]]) -> Stack[Any]:
        return thunk()

    def zero(self) -> Stack[Any]:
        return EMPTY


stack = StackBuilder()


__all__ = [
    "EMPTY",
    "Cons",
    "Empty",
    "Stack",
    "StackBuilder",
    "append",
    "collect",
    "foldl",
    "foldr",
    "from_iterable",
    "map_stack",
    "pop",
    "push",
    "singleton",
    "stack",
    "to_list",
    "total",
]
