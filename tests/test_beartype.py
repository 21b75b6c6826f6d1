"""Regression tests ensuring the public entry points play nicely with beartype."""

from __future__ import annotations

from beartype import beartype

from cexpr import Bind, Capabilities, Const, Return, Some, compose, maybe


def test_compose_is_beartype_decoratable() -> None:
    """Applying ``@beartype`` to ``compose`` should succeed and keep it working."""

    checked_compose = beartype(compose)

    result = checked_compose(maybe, Bind("x", Const(Some(1)), Return(lambda env: env["x"] + 1)))

    assert result == Some(2)


def test_capabilities_inspect_is_beartype_decoratable() -> None:
    checked_inspect = beartype(Capabilities.inspect.__func__)

    capabilities = checked_inspect(Capabilities, maybe)

    assert capabilities.supports("Bind")
