"""The ``maybe`` builder: Return, ReturnFrom, Bind and Zero over Maybe."""

import pytest

from cexpr import (
    NOTHING,
    Apply,
    Bind,
    Const,
    If,
    IfElse,
    Let,
    MissingOperation,
    Return,
    ReturnFrom,
    Some,
    Tail,
    Var,
    block,
    maybe,
)


def sum4(w, x, y, z):
    return w + x + y + z


def test_returns_value():
    assert maybe(Return(Const(1))) == Some(1)


def test_bind_maps_value():
    body = Bind("x", Const(Some(1)), Return(lambda env: env["x"] + 1))

    assert maybe(body) == Some(2)


def test_binds_several_option_values():
    body = Bind(
        "w",
        Var("opt1"),
        Bind(
            "x",
            Var("opt2"),
            Bind(
                "y",
                Var("opt3"),
                Bind(
                    "z",
                    Var("opt4"),
                    Let(
                        "result",
                        Apply(sum4, Var("w"), Var("x"), Var("y"), Var("z")),
                        Return(Var("result")),
                    ),
                ),
            ),
        ),
    )
    env = {"opt1": Some(1), "opt2": Some(2), "opt3": Some(3), "opt4": Some(4)}

    assert maybe(body, env) == Some(10)
    assert maybe(body, {**env, "opt3": NOTHING}) is NOTHING


def test_nothing_short_circuits_the_continuation():
    calls = []
    body = Bind("x", Const(NOTHING), Return(lambda env: calls.append(env["x"])))

    assert maybe(body) is NOTHING
    assert calls == []


def test_body_without_return_ends_in_zero():
    written = []
    body = Bind(
        "path",
        Const(Some("~/test.txt")),
        Bind(
            "full_path",
            lambda env: NOTHING,
            Tail(lambda env: written.append(env["full_path"])),
        ),
    )

    assert maybe(body) is NOTHING
    assert written == []


def test_trailing_expression_after_successful_binds_is_zero():
    written = []
    body = Bind("path", Const(Some("out.txt")), Tail(lambda env: written.append(env["path"])))

    assert maybe(body) is NOTHING
    assert written == ["out.txt"]


def test_if_then_without_else():
    body = Bind(
        "path",
        Const(Some("~/test.txt")),
        If(Var("missing_dir"), Return(Const("Select a valid path."))),
    )

    assert maybe(body, {"missing_dir": True}) == Some("Select a valid path.")
    assert maybe(body, {"missing_dir": False}) is NOTHING


def test_return_from_escapes_early():
    evaluated = []
    body = IfElse(
        Const(True),
        ReturnFrom(Const(NOTHING)),
        Bind("w", Const(Some(1)), Return(lambda env: evaluated.append(env["w"]))),
    )

    assert maybe(body) is NOTHING
    assert evaluated == []


def test_bind_rejects_non_maybe_values():
    with pytest.raises(TypeError, match="let! expects a Maybe value"):
        maybe(Bind("x", Const(1), Return(Var("x"))))


def test_sequencing_is_not_supported():
    with pytest.raises(MissingOperation) as info:
        maybe(block(Return(Const(1)), Return(Const(2))))

    assert info.value.operation == "Combine"
    assert "'combine' method" in str(info.value)


def test_capabilities():
    assert maybe.capabilities().names == {"Bind", "Return", "ReturnFrom", "Zero"}
