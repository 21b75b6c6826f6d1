"""
Delayed computations and the ``delayed`` builder.

A ``Delayed`` wraps a thunk; nothing runs until :func:`run_delayed` forces
it. Because the work happens long after the computation was written, a plain
traceback from a failing delayed computation shows mostly combinator frames.
Each ``Delayed`` therefore remembers where it was created, and
:func:`run_delayed` notes that site on an escaping exception.
:func:`checkpoint` logs the live stack at the moment a computation is forced.

The builder supports every operation except Run::

    program = delayed(
        TryFinally(
            Bind("x", Const(delayed_value(6)),
                 Return(lambda env: env["x"] + 7)),
            lambda env: print("done"),
        )
    )
    run_delayed(program)    # prints "done", returns 13
"""

from __future__ import annotations

import traceback
from collections.abc import Callable, Iterable
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

from loguru import logger

from cexpr.builders.base import Builder
from cexpr.utils import CreationContext, acquire, add_note_once, capture_creation_context

T = TypeVar("T")
U = TypeVar("U")

_checkpoint_logger = logger.bind(component="cexpr.checkpoint")


@dataclass(frozen=True)
class Delayed(Generic[T]):
    """A computation that runs ``thunk`` each time it is forced."""

    thunk: Callable[[], T]
    created_at: CreationContext | None = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.created_at is None:
            object.__setattr__(self, "created_at", capture_creation_context(skip_frames=3))

    def force(self) -> T:
        return self.thunk()


def delayed_value(value: T) -> Delayed[T]:
    return Delayed(lambda: value)


def bind_delayed(computation: Delayed[T], continuation: Callable[[T], Delayed[U]]) -> Delayed[U]:
    return Delayed(lambda: continuation(computation.force()).force())


def add(first: Delayed[Any], second: Delayed[Any]) -> Delayed[Any]:
    """Sum of two delayed numbers."""

    return bind_delayed(
        first, lambda v1: bind_delayed(second, lambda v2: delayed_value(v1 + v2))
    )


def run_delayed(computation: Delayed[T]) -> T:
    """Force ``computation``; failures are noted with its creation site."""

    try:
        return computation.force()
    except Exception as exc:
        if computation.created_at is not None:
            add_note_once(
                exc,
                f"delayed computation created at {computation.created_at.format_user_location()}",
            )
        raise


def checkpoint(label: str, computation: Delayed[T]) -> Delayed[T]:
    """Log the stack when ``computation`` is forced, then force it."""

    def run() -> T:
        _checkpoint_logger.debug(
            "----{}-----\n{}----------", label, "".join(traceback.format_stack())
        )
        return computation.force()

    return Delayed(run, created_at=computation.created_at)


class DelayedBuilder(Builder):
    def return_(self, value: Any) -> Delayed[Any]:
        return delayed_value(value)

    def return_from(self, computation: Delayed[Any]) -> Delayed[Any]:
        return computation

    def bind(
        self, computation: Delayed[Any], continuation: Callable[[Any], Delayed[Any]]
    ) -> Delayed[Any]:
        return bind_delayed(computation, continuation)

    def zero(self) -> Delayed[Any]:
        return delayed_value(None)

    def combine(self, first: Delayed[Any], second: Delayed[Any]) -> Delayed[Any]:
        """Force ``first`` for its effects, then produce ``second``."""

        def run() -> Any:
            first.force()
            return second.force()

        return Delayed(run)

    def delay(self, thunk: Callable[[], Delayed[Any]]) -> Delayed[Any]:
        return bind_delayed(delayed_value(None), lambda _: thunk())

    def for_(
        self, iterable: Iterable[Any], continuation: Callable[[Any], Delayed[Any]]
    ) -> Delayed[Any]:
        def run() -> None:
            for item in iterable:
                continuation(item).force()

        return Delayed(run)

    def while_(self, guard: Callable[[], bool], body: Delayed[Any]) -> Delayed[Any]:
        def run() -> None:
            while guard():
                body.force()

        return Delayed(run)

    def try_with(
        self, computation: Delayed[Any], handler: Callable[[Exception], Delayed[Any]]
    ) -> Delayed[Any]:
        def run() -> Any:
            try:
                return computation.force()
            except Exception as exc:
                return handler(exc).force()

        return Delayed(run)

    def try_finally(
        self, computation: Delayed[Any], compensation: Callable[[], Any]
    ) -> Delayed[Any]:
        def run() -> Any:
            try:
                return computation.force()
            finally:
                compensation()

        return Delayed(run)

    def using(self, resource: Any, continuation: Callable[[Any], Delayed[Any]]) -> Delayed[Any]:
        """Acquire ``resource`` when forced; release it once the body finishes."""

        def run() -> Any:
            with ExitStack() as resources:
                return continuation(acquire(resources, resource)).force()

        return Delayed(run)


delayed = DelayedBuilder()


__all__ = [
    "Delayed",
    "DelayedBuilder",
    "add",
    "bind_delayed",
    "checkpoint",
    "delayed",
    "delayed_value",
    "run_delayed",
]
