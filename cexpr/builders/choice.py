"""
The ``choose`` builder: the first present value wins.

Sequenced productions are alternatives::

    choose(block(ReturnFrom(Const(NOTHING)), ReturnFrom(Const(Some(2)))))  # Some(2)

Delay hands back the thunk itself and Combine only forces the second branch
when the first one produced ``NOTHING``; Run forces the outermost thunk.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from cexpr.builders.option import OptionBuilder, _require_maybe
from cexpr.maybe import Maybe


class ChoiceBuilder(OptionBuilder):
    def delay(self, thunk: Callable[[], Maybe[Any]]) -> Callable[[], Maybe[Any]]:
        return thunk

    def run(self, thunk: Callable[[], Maybe[Any]]) -> Maybe[Any]:
        return thunk()

    def combine(self, first: Maybe[Any], second: Callable[[], Maybe[Any]]) -> Maybe[Any]:
        if _require_maybe(first, "combine").is_some():
            return first
        return second()


choose = ChoiceBuilder()


__all__ = ["ChoiceBuilder", "choose"]
