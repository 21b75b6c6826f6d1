"""Immutable stacks and the ``stack`` builder."""

import pytest

from cexpr import EMPTY, Cons, Const, For, If, Var, Yield, YieldFrom, block, stack
from cexpr.builders.stack import (
    append,
    collect,
    foldl,
    foldr,
    from_iterable,
    map_stack,
    pop,
    push,
    singleton,
    to_list,
    total,
)


def test_to_list_generates_a_matching_list():
    assert to_list(Cons(1, Cons(2, Cons(3, EMPTY)))) == [1, 2, 3]


def test_map_stack_generates_correct_result():
    squares = map_stack(lambda x: x * x, Cons(1, Cons(2, Cons(3, EMPTY))))

    assert to_list(squares) == [1, 4, 9]


def test_push_and_pop():
    s = push(1, singleton(2))

    assert pop(s) == (1, singleton(2))
    with pytest.raises(IndexError, match="Nothing to pop!"):
        pop(EMPTY)


def test_folds_and_total():
    s = from_iterable(["a", "b", "c"])

    assert foldl(lambda acc, v: acc + v, "", s) == "abc"
    assert foldr(lambda v, acc: acc + v, "", s) == "cba"
    assert total(from_iterable(range(1, 5))) == 10
    assert total(EMPTY) == 0


def test_append_keeps_order():
    joined = append(from_iterable([1, 2]), from_iterable([3]))

    assert list(joined) == [1, 2, 3]
    assert append(EMPTY, joined) == joined


def test_collect_requires_stacks():
    with pytest.raises(TypeError, match="collect expects a Stack"):
        collect(lambda x: [x], [1])


def test_equality_and_repr():
    assert from_iterable([1, 2]) == Cons(1, Cons(2, EMPTY))
    assert hash(from_iterable([1, 2])) == hash(Cons(1, Cons(2, EMPTY)))
    assert from_iterable([1]) != EMPTY
    assert repr(Cons(1, Cons(2, EMPTY))) == "Stack([1, 2])"
    assert repr(EMPTY) == "Empty()"


def test_stack_can_return_one_item():
    assert to_list(stack(Yield(Const(1)))) == [1]


def test_stack_can_yield_an_empty_stack():
    assert stack(YieldFrom(Const(EMPTY))) == EMPTY


def test_stack_can_return_multiple_items():
    log = []
    body = block(
        lambda env: log.append("before yield 1"),
        Yield(Const(1)),
        lambda env: log.append("before yield 2"),
        Yield(Const(2)),
        lambda env: log.append("before yield 3"),
        Yield(Const(3)),
    )

    assert to_list(stack(body)) == [1, 2, 3]
    assert log == ["before yield 1", "before yield 2", "before yield 3"]


def test_stack_can_iterate_and_yield():
    expected = stack(block(Yield(Const(1)), Yield(Const(2)), Yield(Const(3))))

    assert stack(For("x", Const(expected), Yield(Var("x")))) == expected


def test_for_yields_squares():
    squares = stack(For("x", Const([1, 2, 3]), Yield(lambda env: env["x"] * env["x"])))

    assert to_list(squares) == [1, 4, 9]


def test_zero_is_the_empty_stack():
    assert stack(If(Const(False), Yield(Const(1)))) is EMPTY
    assert to_list(stack(block(If(Const(False), Yield(Const(1))), Yield(Const(2))))) == [2]


def test_yield_from_rejects_other_values():
    with pytest.raises(TypeError, match="yield! expects a Stack"):
        stack(YieldFrom(Const([1, 2])))


def test_long_blocks_of_yields():
    body = block(*[Yield(Const(i)) for i in range(300)])

    assert to_list(stack(body)) == list(range(300))
