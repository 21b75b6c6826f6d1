"""
The ``maybe`` builder over optional values.

Example::

    maybe(
        Bind("x", Const(Some(1)),
             Return(lambda env: env["x"] + 1))
    )                                   # Some(2)

A body without ``return`` ends in ``Zero``, which is ``NOTHING``.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cexpr.builders.base import Builder
from cexpr.maybe import NOTHING, Maybe, Some


def _require_maybe(value: Any, operation: str) -> Maybe[Any]:
    if not isinstance(value, Maybe):
        raise TypeError(f"{operation} expects a Maybe value, got {type(value).__name__}")
    return value


class OptionBuilder(Builder):
    """Return, ReturnFrom, Bind and Zero for ``Maybe``."""

    def return_(self, value: Any) -> Maybe[Any]:
        return Some(value)

    def return_from(self, computation: Maybe[Any]) -> Maybe[Any]:
        return _require_maybe(computation, "return!")

    def bind(
        self, computation: Maybe[Any], continuation: Callable[[Any], Maybe[Any]]
    ) -> Maybe[Any]:
        return _require_maybe(computation, "let!").flat_map(continuation)

    def zero(self) -> Maybe[Any]:
        return NOTHING


maybe = OptionBuilder()


__all__ = ["OptionBuilder", "maybe"]
