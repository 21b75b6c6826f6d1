"""Construction rules of computation nodes."""

import dataclasses

import pytest

from cexpr import (
    Arm,
    Bind,
    Const,
    ForRange,
    If,
    Match,
    Return,
    Seq,
    Tail,
    TryWith,
    Var,
    Yield,
    block,
)


def test_nodes_are_immutable():
    node = Return(Const(1))

    with pytest.raises(dataclasses.FrozenInstanceError):
        node.expr = Const(2)  # type: ignore[misc]


def test_nodes_remember_where_they_were_created():
    node = Return(Const(1))

    assert node.created_at is not None
    assert node.created_at.filename.endswith("test_nodes.py")
    assert node.created_at.function == "test_nodes_remember_where_they_were_created"
    assert "Return(Const(1))" in (node.created_at.code or "")


def test_creation_site_does_not_affect_equality():
    assert Return(Const(1)) == Return(Const(1))


def test_construct_labels():
    assert Bind.construct == "let!"
    assert If.construct == "if-then"
    assert TryWith.construct == "try-with"
    assert Seq.construct == "sequential"
    assert ForRange.construct == "for"


def test_sub_blocks_must_be_nodes():
    with pytest.raises(TypeError, match="wrap plain expressions in Tail"):
        If(Const(True), lambda env: 1)  # type: ignore[arg-type]


def test_seq_accepts_expression_first():
    effect = Seq(lambda env: None, Return(Const(1)))
    combined = Seq(Return(Const(1)), Return(Const(2)))

    assert not effect.combines
    assert combined.combines
    assert len(effect.children()) == 1
    assert len(combined.children()) == 2

    with pytest.raises(TypeError, match="Seq expects a computation or an expression"):
        Seq(1, Return(Const(1)))  # type: ignore[arg-type]


def test_arms_are_normalized_to_tuple():
    node = Match(Var("x"), [Arm("_", Return(Const(1)))])

    assert isinstance(node.arms, tuple)
    with pytest.raises(TypeError, match="arms must be Arm instances"):
        Match(Var("x"), [("_", Return(Const(1)))])  # type: ignore[list-item]


def test_for_range_binds_a_single_name():
    with pytest.raises(TypeError, match="single name"):
        ForRange(("a", "b"), Const(0), Const(1), Yield(Const(0)))  # type: ignore[arg-type]


def test_block_chains_items_to_the_right():
    node = block(Return(Const(1)), lambda env: None, Return(Const(2)))

    assert isinstance(node, Seq)
    assert node.combines
    assert isinstance(node.second, Seq)
    assert not node.second.combines


def test_block_wraps_trailing_expression():
    node = block(Return(Const(1)), lambda env: None)

    assert isinstance(node.second, Tail)
    assert isinstance(block(lambda env: None), Tail)

    with pytest.raises(ValueError, match="at least one item"):
        block()
