"""
Desugaring engine for computation expressions.

:func:`compose` rewrites a :class:`~cexpr.nodes.Node` tree into nested calls
on a builder's operations and returns the composed value, which the engine
never inspects. The rewrite is the usual translation of computation
expressions:

    let! p = e in ce     ->  Bind(e, fun p -> {| ce |})
    do! e in ce          ->  Bind(e, fun () -> {| ce |})
    use p = e in ce      ->  Using(e, fun p -> {| ce |})
    use! p = e in ce     ->  Bind(e, fun v -> Using(v, fun p -> {| ce |}))
    if c then ce         ->  if c then {| ce |} else Zero()
    for p in e do ce     ->  For(e, fun p -> {| ce |})
    while c do ce        ->  While(fun () -> c, Delay(fun () -> {| ce |}))
    try ce with arms     ->  TryWith(Delay(fun () -> {| ce |}), fun exn -> arms)
    try ce finally e     ->  TryFinally(Delay(fun () -> {| ce |}), fun () -> e)
    ce1; ce2             ->  Combine({| ce1 |}, Delay(fun () -> {| ce2 |}))
    e; ce                ->  e; {| ce |}
    e                    ->  e; Zero()

Delay is only inserted where the builder defines it. The whole body is wrapped
as ``Run(Delay(fun () -> {| body |}))``, dropping whichever of Run and Delay
the builder lacks.

Rewriting is ordinary recursion executed as the builder calls back into the
continuations it was handed. With Delay the work happens when the builder
forces the thunk; without it, composition is eager. Sequencing is walked in a
loop where it can be: plain-expression steps never nest, and without Delay a
whole chain of `ce1; ce2; ...` is rewritten front to back and then combined
from the end, so long blocks do not grow the Python stack. Delay thunks call
the node's rewrite method directly unless debug notes or debug logging are on.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from functools import partial
from typing import Any

from cexpr import utils
from cexpr.capabilities import Capabilities
from cexpr.errors import MatchFailureError
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
)
from cexpr.patterns import Env, bind_pattern, evaluate, extend, make_env, match_pattern

logger = logging.getLogger(__name__)


def _note_creation_site(exc: BaseException, node: Node) -> None:
    """Attach the innermost failing construct's creation site to ``exc``."""

    where = node.created_at.format_location() if node.created_at is not None else "<unknown>"
    utils.add_note_once(exc, f"raised in {node.construct!r} created at {where}")


class Desugarer:
    """Rewrites computation nodes into calls on one builder's operations."""

    def __init__(self, capabilities: Capabilities, *, debug: bool = False) -> None:
        self.capabilities = capabilities
        self.debug = debug
        self._operations = capabilities.operations
        self._delay = capabilities.operations.get("Delay")
        # Thunks skip the logging and note wrapper unless one of them is live.
        self._traced = debug or logger.isEnabledFor(logging.DEBUG)
        self._rewriters: dict[type, Callable[[Any, Env], Any]] = {
            Let: self._let,
            Bind: self._bind,
            DoBind: self._do_bind,
            Yield: self._yield,
            YieldFrom: self._yield_from,
            Return: self._return,
            ReturnFrom: self._return_from,
            Use: self._use,
            UseBind: self._use_bind,
            If: self._if,
            IfElse: self._if_else,
            Match: self._match,
            MatchBind: self._match_bind,
            For: self._for,
            ForRange: self._for_range,
            While: self._while,
            TryWith: self._try_with,
            TryFinally: self._try_finally,
            Seq: self._seq,
            Tail: self._tail,
        }

    def _op(self, operation: str, node: Node) -> Callable[..., Any]:
        func = self._operations.get(operation)
        if func is None:
            return self.capabilities.requires(operation, node.construct)
        return func

    def _rewriter(self, node: Node) -> Callable[[Any, Env], Any]:
        rewriter = self._rewriters.get(type(node))
        if rewriter is not None:
            return rewriter
        for cls in type(node).__mro__[1:]:
            rewriter = self._rewriters.get(cls)
            if rewriter is not None:
                self._rewriters[type(node)] = rewriter
                return rewriter
        raise TypeError(f"Unsupported computation node: {type(node).__name__}")

    def _thunk(self, node: Node, env: Env) -> Callable[[], Any]:
        if self._traced:
            return partial(self.rewrite, node, env)
        return partial(self._rewriter(node), node, env)

    def delayed(self, node: Node, env: Env) -> Any:
        """``Delay(fun () -> {| node |})``, or ``{| node |}`` when Delay is absent."""

        if self._delay is not None:
            return self._delay(self._thunk(node, env))
        return self.rewrite(node, env)

    def rewrite(self, node: Node, env: Env) -> Any:
        """Rewrite one node (and, through continuations, its subtree)."""

        rewriter = self._rewriter(node)
        if not self._traced:
            return rewriter(node, env)
        logger.debug("rewrite: %s", node.construct)
        if not self.debug:
            return rewriter(node, env)
        try:
            return rewriter(node, env)
        except Exception as exc:
            _note_creation_site(exc, node)
            raise

    # --- bindings ---------------------------------------------------------

    def _let(self, node: Let, env: Env) -> Any:
        value = evaluate(node.expr, env)
        return self.rewrite(node.body, bind_pattern(node.pattern, value, env, node.construct))

    def _bind(self, node: Bind, env: Env) -> Any:
        bind = self._op("Bind", node)
        source = evaluate(node.expr, env)

        def continuation(value: Any) -> Any:
            return self.rewrite(node.body, bind_pattern(node.pattern, value, env, node.construct))

        return bind(source, continuation)

    def _do_bind(self, node: DoBind, env: Env) -> Any:
        bind = self._op("Bind", node)
        source = evaluate(node.expr, env)
        body = node.body
        if body is None:
            return_ = self._op("Return", node)
            return bind(source, lambda _unit: return_(None))
        return bind(source, lambda _unit: self.rewrite(body, env))

    def _use(self, node: Use, env: Env) -> Any:
        using = self._op("Using", node)
        resource = evaluate(node.expr, env)
        return using(
            resource,
            lambda value: self.rewrite(
                node.body, bind_pattern(node.pattern, value, env, node.construct)
            ),
        )

    def _use_bind(self, node: UseBind, env: Env) -> Any:
        bind = self._op("Bind", node)
        using = self._op("Using", node)
        source = evaluate(node.expr, env)

        def continuation(value: Any) -> Any:
            return using(
                value,
                lambda resource: self.rewrite(
                    node.body, bind_pattern(node.pattern, resource, env, node.construct)
                ),
            )

        return bind(source, continuation)

    # --- productions ------------------------------------------------------

    def _yield(self, node: Yield, env: Env) -> Any:
        return self._op("Yield", node)(evaluate(node.expr, env))

    def _yield_from(self, node: YieldFrom, env: Env) -> Any:
        return self._op("YieldFrom", node)(evaluate(node.expr, env))

    def _return(self, node: Return, env: Env) -> Any:
        return self._op("Return", node)(evaluate(node.expr, env))

    def _return_from(self, node: ReturnFrom, env: Env) -> Any:
        return self._op("ReturnFrom", node)(evaluate(node.expr, env))

    # --- control flow -----------------------------------------------------

    def _if(self, node: If, env: Env) -> Any:
        if evaluate(node.cond, env):
            return self.rewrite(node.then_branch, env)
        return self._op("Zero", node)()

    def _if_else(self, node: IfElse, env: Env) -> Any:
        if evaluate(node.cond, env):
            return self.rewrite(node.then_branch, env)
        return self.rewrite(node.else_branch, env)

    def _dispatch(self, node: Node, arms: tuple[Arm, ...], value: Any, env: Env) -> Any:
        for arm in arms:
            found = match_pattern(arm.pattern, value, env)
            if found is not None:
                return self.rewrite(arm.body, extend(env, found))
        raise MatchFailureError(node.construct, value)

    def _match(self, node: Match, env: Env) -> Any:
        return self._dispatch(node, node.arms, evaluate(node.expr, env), env)

    def _match_bind(self, node: MatchBind, env: Env) -> Any:
        bind = self._op("Bind", node)
        source = evaluate(node.expr, env)
        return bind(source, lambda value: self._dispatch(node, node.arms, value, env))

    def _for(self, node: For, env: Env) -> Any:
        for_ = self._op("For", node)
        iterable = evaluate(node.iterable, env)
        return for_(
            iterable,
            lambda item: self.rewrite(
                node.body, bind_pattern(node.pattern, item, env, node.construct)
            ),
        )

    def _for_range(self, node: ForRange, env: Env) -> Any:
        for_ = self._op("For", node)
        lo = evaluate(node.lo, env)
        hi = evaluate(node.hi, env)
        return for_(
            range(lo, hi + 1),
            lambda index: self.rewrite(node.body, extend(env, {node.name: index})),
        )

    def _while(self, node: While, env: Env) -> Any:
        while_ = self._op("While", node)
        return while_(lambda: bool(evaluate(node.cond, env)), self.delayed(node.body, env))

    def _try_with(self, node: TryWith, env: Env) -> Any:
        try_with = self._op("TryWith", node)

        def handler(exc: Exception) -> Any:
            for arm in node.arms:
                found = match_pattern(arm.pattern, exc, env)
                if found is not None:
                    return self.rewrite(arm.body, extend(env, found))
            raise exc

        return try_with(self.delayed(node.body, env), handler)

    def _try_finally(self, node: TryFinally, env: Env) -> Any:
        try_finally = self._op("TryFinally", node)
        return try_finally(self.delayed(node.body, env), lambda: evaluate(node.cleanup, env))

    def _seq(self, node: Seq, env: Env) -> Any:
        pending: list[tuple[Seq, Any]] = []
        current: Node = node
        while isinstance(current, Seq):
            if not current.combines:
                evaluate(current.first, env)
                current = current.second
                continue
            first = self.rewrite(current.first, env)
            if self._delay is not None:
                combine = self._op("Combine", current)
                return combine(first, self._delay(self._thunk(current.second, env)))
            pending.append((current, first))
            current = current.second

        result = self.rewrite(current, env)
        for seq, first in reversed(pending):
            result = self._op("Combine", seq)(first, result)
        return result

    def _tail(self, node: Tail, env: Env) -> Any:
        evaluate(node.expr, env)
        return self._op("Zero", node)()


def compose(
    builder: Any,
    body: Node,
    env: Mapping[str, Any] | None = None,
    *,
    debug: bool | None = None,
) -> Any:
    """Compose ``body`` with ``builder`` and return the composed value.

    Every operation the tree needs is checked first, so a
    ``MissingOperationError`` is raised before any builder operation runs.

    Args:
        builder: Object (or mapping) implementing builder operations.
        body: Root of the computation-expression tree.
        env: Names visible to the expressions of ``body``.
        debug: Note the failing construct's creation site on exceptions.
            Defaults to the ``CEXPR_DEBUG`` environment setting.

    Returns:
        ``Run(Delay(...))``, ``Run(...)``, ``Delay(...)`` or the raw composed
        value, depending on which of Run and Delay the builder defines.
    """

    capabilities = Capabilities.inspect(builder)
    capabilities.validate(body)
    desugarer = Desugarer(
        capabilities, debug=utils.DEBUG_EXPRESSIONS if debug is None else debug
    )
    initial = make_env(env)
    logger.debug("compose: %s with %r", body.construct, capabilities)

    composed = desugarer.delayed(body, initial)
    if capabilities.supports("Run"):
        return capabilities.operations["Run"](composed)
    return composed


__all__ = ["Desugarer", "compose"]
