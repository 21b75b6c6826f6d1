"""Builders bundled with cexpr."""

from cexpr.builders.base import Builder, MappingBuilder
from cexpr.builders.choice import ChoiceBuilder, choose
from cexpr.builders.delayed import (
    Delayed,
    DelayedBuilder,
    checkpoint,
    delayed,
    delayed_value,
    run_delayed,
)
from cexpr.builders.option import OptionBuilder, maybe
from cexpr.builders.stack import EMPTY, Cons, Stack, StackBuilder, stack
from cexpr.builders.state import StateBuilder, eval_state, exec_state, state
from cexpr.builders.tracing import TraceEvent, traced

__all__ = [
    "EMPTY",
    "Builder",
    "ChoiceBuilder",
    "Cons",
    "Delayed",
    "DelayedBuilder",
    "MappingBuilder",
    "OptionBuilder",
    "Stack",
    "StackBuilder",
    "StateBuilder",
    "TraceEvent",
    "checkpoint",
    "choose",
    "delayed",
    "delayed_value",
    "eval_state",
    "exec_state",
    "maybe",
    "run_delayed",
    "stack",
    "state",
    "traced",
]
