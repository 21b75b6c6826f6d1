"""The ``choose`` builder: the first present value wins."""

from cexpr import (
    NOTHING,
    Bind,
    Const,
    If,
    Return,
    ReturnFrom,
    Some,
    TraceEvent,
    block,
    choose,
    maybe,
    traced,
)


def test_returns_first_value_if_it_is_some():
    effects = []
    body = block(
        ReturnFrom(Const(Some(1))),
        lambda env: effects.append("returning second value"),
        ReturnFrom(Const(Some(2))),
    )

    assert choose(body) == Some(1)
    assert effects == []


def test_returns_second_value_if_first_is_nothing():
    effects = []
    body = block(
        ReturnFrom(Const(NOTHING)),
        lambda env: effects.append("returning second value"),
        ReturnFrom(Const(Some(2))),
    )

    assert choose(body) == Some(2)
    assert effects == ["returning second value"]


def test_returns_nothing_if_all_values_are_nothing():
    assert choose(block(ReturnFrom(Const(NOTHING)), ReturnFrom(Const(NOTHING)))) is NOTHING


def test_returns_last_value_if_all_previous_are_nothing():
    body = block(*[ReturnFrom(Const(NOTHING)) for _ in range(6)], ReturnFrom(Const(Some(7))))

    assert choose(body) == Some(7)


def test_falls_back_after_a_failed_computation():
    write_file = maybe(Bind("path", Const(NOTHING), Return(Const("written"))))
    body = block(ReturnFrom(Const(write_file)), Return(Const("fallback")))

    assert choose(body) == Some("fallback")


def test_if_without_else_yields_to_the_next_alternative():
    body = block(If(Const(False), Return(Const("skipped"))), Return(Const("taken")))

    assert choose(body) == Some("taken")


def test_operation_order_shows_delay_and_run():
    events: list[TraceEvent] = []
    builder = traced(choose, "choose", events)

    result = builder(block(ReturnFrom(Const(Some(1))), ReturnFrom(Const(Some(2)))))

    assert result == Some(1)
    assert [event.operation for event in events] == [
        "Delay",
        "Run",
        "ReturnFrom",
        "Delay",
        "Combine",
    ]
    assert events[2].format() == "choose.ReturnFrom(Some(value=1))"
