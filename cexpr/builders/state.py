"""
State-passing computations and the ``state`` builder.

A ``State`` is a function from a state to a ``(value, new_state)`` pair. The
builder lets a body be written once and fed its state at the end::

    reverse = state(
        Bind("s", Const(get_state),
             Return(lambda env: env["s"][::-1]))
    )
    eval_state(reverse, "Hello")    # "olleH"
    exec_state(reverse, "Hello")    # "Hello"
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeAlias

from cexpr.builders.base import Builder

State: TypeAlias = Callable[[Any], tuple[Any, Any]]


def result(value: Any) -> State:
    """A computation producing ``value`` and leaving the state unchanged."""

    return lambda s: (value, s)


def bind(computation: State, continuation: Callable[[Any], State]) -> State:
    def run(s: Any) -> tuple[Any, Any]:
        value, next_state = computation(s)
        return continuation(value)(next_state)

    return run


def combine(first: State, second: State) -> State:
    """Run ``first`` then ``second``, adding their values.

    ``None`` (the value of Zero) is the identity, so ``if`` without ``else``
    can be mixed with productions.
    """

    def run(s: Any) -> tuple[Any, Any]:
        v1, s1 = first(s)
        v2, s2 = second(s1)
        if v1 is None:
            return v2, s2
        if v2 is None:
            return v1, s2
        return v1 + v2, s2

    return run


def eval_state(computation: State, initial: Any) -> Any:
    """Evaluates the computation, returning the result value."""

    return computation(initial)[0]


def exec_state(computation: State, initial: Any) -> Any:
    """Executes the computation, returning the final state."""

    return computation(initial)[1]


def get_state(s: Any) -> tuple[Any, Any]:
    """Returns the state as the value."""

    return s, s


def set_state(new_state: Any) -> State:
    """Ignores the incoming state in favour of ``new_state``."""

    return lambda _s: (None, new_state)


def modify_state(update: Callable[[Any], Any]) -> State:
    return lambda s: (None, update(s))


class StateBuilder(Builder):
    def return_(self, value: Any) -> State:
        return result(value)

    def return_from(self, computation: State) -> State:
        return computation

    def bind(self, computation: State, continuation: Callable[[Any], State]) -> State:
        return bind(computation, continuation)

    def zero(self) -> State:
        return result(None)

    def combine(self, first: State, second: State) -> State:
        return combine(first, second)

    def delay(self, thunk: Callable[[], State]) -> State:
        # building the body waits until a state is supplied
        return bind(result(None), lambda _: thunk())


state = StateBuilder()


__all__ = [
    "State",
    "StateBuilder",
    "bind",
    "combine",
    "eval_state",
    "exec_state",
    "get_state",
    "modify_state",
    "result",
    "set_state",
    "state",
]
