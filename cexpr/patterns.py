"""
Expressions, environments and patterns for computation-expression trees.

An expression is any callable taking the current environment (an immutable
``frozendict`` of bound names) and returning a value. Patterns decide how a
value is bound into a new environment:

- ``"name"`` binds the value, ``"_"`` ignores it
- a tuple of patterns destructures a sequence of the same length
- ``Lit(value)`` matches by equality
- ``Ctor(cls, *fields)`` matches instances of ``cls`` and their positional
  ``__match_args__`` fields
- ``As(pattern, name)`` additionally binds the whole value
- ``When(pattern, guard)`` only matches if ``guard`` holds under the bindings
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, TypeAlias, Union

from frozendict import frozendict

from cexpr.errors import MatchFailureError, UnboundNameError

Env: TypeAlias = Mapping[str, Any]
Expr: TypeAlias = Callable[[Any], Any]

EMPTY_ENV: Env = frozendict()

WILDCARD = "_"


def make_env(values: Mapping[str, Any] | None = None) -> Env:
    """Create an environment from an optional mapping of initial names."""

    if values is None:
        return EMPTY_ENV
    if isinstance(values, frozendict):
        return values
    return frozendict(values)


def extend(env: Env, bindings: Mapping[str, Any]) -> Env:
    """Return ``env`` with ``bindings`` layered on top."""

    if not bindings:
        return env
    return frozendict({**env, **bindings})


@dataclass(frozen=True)
class Var:
    """Expression reading a bound name."""

    name: str

    def __call__(self, env: Env) -> Any:
        try:
            return env[self.name]
        except KeyError:
            raise UnboundNameError(self.name, tuple(env)) from None


@dataclass(frozen=True)
class Const:
    """Expression producing a fixed value."""

    value: Any

    def __call__(self, env: Env) -> Any:
        return self.value


class Apply:
    """Expression calling ``func`` with the values of argument expressions.

    Example::

        Apply(operator.add, Var("x"), Const(1))   # x + 1
    """

    __slots__ = ("func", "args")

    def __init__(self, func: Callable[..., Any], *args: Expr) -> None:
        if not callable(func):
            raise TypeError("Apply expects a callable")
        self.func = func
        self.args = args

    def __call__(self, env: Env) -> Any:
        return self.func(*(arg(env) for arg in self.args))

    def __repr__(self) -> str:
        name = getattr(self.func, "__name__", repr(self.func))
        return f"Apply({name}, {', '.join(map(repr, self.args))})"


def evaluate(expr: Expr, env: Env) -> Any:
    """Evaluate an expression in ``env``."""

    if not callable(expr):
        raise TypeError(
            f"Expression must be callable with the environment, got {type(expr).__name__}; "
            "wrap plain values in Const(...)"
        )
    return expr(env)


class PatternBase:
    """Base class for structured patterns."""

    __slots__ = ()

    def match(self, value: Any, env: Env) -> dict[str, Any] | None:
        raise NotImplementedError


@dataclass(frozen=True)
class Lit(PatternBase):
    value: Any

    def match(self, value: Any, env: Env) -> dict[str, Any] | None:
        return {} if value == self.value else None


@dataclass(frozen=True, init=False)
class Ctor(PatternBase):
    """Matches ``isinstance(value, cls)`` and then its positional fields."""

    cls: type
    fields: tuple[Pattern, ...]

    def __init__(self, cls: type, *fields: Pattern) -> None:
        object.__setattr__(self, "cls", cls)
        object.__setattr__(self, "fields", fields)

    def match(self, value: Any, env: Env) -> dict[str, Any] | None:
        if not isinstance(value, self.cls):
            return None
        if not self.fields:
            return {}
        names = getattr(self.cls, "__match_args__", ())
        if len(self.fields) > len(names):
            raise TypeError(
                f"{self.cls.__name__}() accepts {len(names)} positional sub-pattern(s) "
                f"({len(self.fields)} given)"
            )
        bindings: dict[str, Any] = {}
        for name, pattern in zip(names, self.fields):
            found = match_pattern(pattern, getattr(value, name), env)
            if found is None:
                return None
            bindings.update(found)
        return bindings


@dataclass(frozen=True)
class As(PatternBase):
    pattern: Pattern
    name: str

    def match(self, value: Any, env: Env) -> dict[str, Any] | None:
        found = match_pattern(self.pattern, value, env)
        if found is None:
            return None
        return {**found, self.name: value}


@dataclass(frozen=True)
class When(PatternBase):
    """Guarded pattern; ``guard`` sees the pattern's bindings."""

    pattern: Pattern
    guard: Expr

    def match(self, value: Any, env: Env) -> dict[str, Any] | None:
        found = match_pattern(self.pattern, value, env)
        if found is None:
            return None
        if not evaluate(self.guard, extend(env, found)):
            return None
        return found


Pattern: TypeAlias = Union[str, tuple, PatternBase]


def match_pattern(pattern: Pattern, value: Any, env: Env) -> dict[str, Any] | None:
    """Match ``value`` against ``pattern``.

    Returns the new bindings, or ``None`` when the pattern does not match.
    """

    if isinstance(pattern, str):
        if pattern == WILDCARD:
            return {}
        return {pattern: value}
    if isinstance(pattern, tuple):
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            return None
        if len(value) != len(pattern):
            return None
        bindings: dict[str, Any] = {}
        for sub_pattern, item in zip(pattern, value):
            found = match_pattern(sub_pattern, item, env)
            if found is None:
                return None
            bindings.update(found)
        return bindings
    if isinstance(pattern, PatternBase):
        return pattern.match(value, env)
    raise TypeError(f"Unsupported pattern: {pattern!r}")


def bind_pattern(pattern: Pattern, value: Any, env: Env, construct: str) -> Env:
    """Bind an irrefutable use of ``pattern`` or raise ``MatchFailureError``."""

    found = match_pattern(pattern, value, env)
    if found is None:
        raise MatchFailureError(construct, value)
    return extend(env, found)


__all__ = [
    "EMPTY_ENV",
    "WILDCARD",
    "Apply",
    "As",
    "Const",
    "Ctor",
    "Env",
    "Expr",
    "Lit",
    "Pattern",
    "PatternBase",
    "Var",
    "When",
    "bind_pattern",
    "evaluate",
    "extend",
    "make_env",
    "match_pattern",
]
