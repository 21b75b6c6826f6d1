"""
cexpr - Computation expressions for Python.

Build a computation-expression body as a tree of nodes, hand it to a builder
that implements some of Bind/Return/Yield/Combine/Delay/Run/..., and get the
composed value back. The builder decides what the value means (an optional
value, a state transition, a stack, a delayed thunk, ...).

Example:
    >>> from cexpr import Bind, Const, Return, Some, maybe
    >>>
    >>> maybe(
    ...     Bind("x", Const(Some(1)),
    ...          Return(lambda env: env["x"] + 1))
    ... )
    Some(value=2)
"""

from cexpr.builders import (
    EMPTY,
    Builder,
    ChoiceBuilder,
    Cons,
    Delayed,
    DelayedBuilder,
    MappingBuilder,
    OptionBuilder,
    Stack,
    StackBuilder,
    StateBuilder,
    TraceEvent,
    checkpoint,
    choose,
    delayed,
    delayed_value,
    eval_state,
    exec_state,
    maybe,
    run_delayed,
    stack,
    state,
    traced,
)
from cexpr.capabilities import OPERATIONS, Capabilities, Operation
from cexpr.engine import Desugarer, compose
from cexpr.errors import (
    ComputationExpressionError,
    MatchFailureError,
    MissingOperation,
    MissingOperationError,
    OperationArityError,
    UnboundNameError,
)
from cexpr.maybe import NOTHING, Maybe, Nothing, Some
from cexpr.nodes import (
    Arm,
    Bind,
    DoBind,
    For,
    ForRange,
    If,
    IfElse,
    Let,
    Match,
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
    block,
)
from cexpr.patterns import Apply, As, Const, Ctor, Lit, Var, When

__all__ = [
    # Engine
    "compose",
    "Desugarer",
    "Capabilities",
    "Operation",
    "OPERATIONS",
    # Nodes
    "Node",
    "Arm",
    "Let",
    "Bind",
    "DoBind",
    "Yield",
    "YieldFrom",
    "Return",
    "ReturnFrom",
    "Use",
    "UseBind",
    "If",
    "IfElse",
    "Match",
    "MatchBind",
    "For",
    "ForRange",
    "While",
    "TryWith",
    "TryFinally",
    "Seq",
    "Tail",
    "block",
    # Expressions and patterns
    "Var",
    "Const",
    "Apply",
    "Lit",
    "Ctor",
    "As",
    "When",
    # Errors
    "ComputationExpressionError",
    "MissingOperation",
    "MissingOperationError",
    "OperationArityError",
    "MatchFailureError",
    "UnboundNameError",
    # Optional values
    "Maybe",
    "Some",
    "Nothing",
    "NOTHING",
    # Builders
    "Builder",
    "MappingBuilder",
    "OptionBuilder",
    "maybe",
    "ChoiceBuilder",
    "choose",
    "StateBuilder",
    "state",
    "eval_state",
    "exec_state",
    "Stack",
    "Cons",
    "EMPTY",
    "StackBuilder",
    "stack",
    "Delayed",
    "DelayedBuilder",
    "delayed",
    "delayed_value",
    "run_delayed",
    "checkpoint",
    "TraceEvent",
    "traced",
]
