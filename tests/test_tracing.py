"""Operation tracing wrappers."""

from cexpr import (
    NOTHING,
    Bind,
    Const,
    For,
    MappingBuilder,
    Return,
    Some,
    TraceEvent,
    Var,
    Yield,
    maybe,
    stack,
    traced,
)


def test_traced_builder_keeps_capabilities():
    builder = traced(maybe)

    assert isinstance(builder, MappingBuilder)
    assert builder.capabilities().names == maybe.capabilities().names


def test_events_record_operations_in_call_order():
    events: list[TraceEvent] = []

    result = traced(maybe, "maybe", events)(Bind("x", Const(Some(1)), Return(Var("x"))))

    assert result == Some(1)
    assert [event.operation for event in events] == ["Bind", "Return"]
    assert events[0].builder == "maybe"
    assert events[0].format().startswith("maybe.Bind(Some(value=1), <fun:")
    assert events[1].format() == "maybe.Return(1)"


def test_short_circuit_skips_continuation_operations():
    events: list[TraceEvent] = []

    assert traced(maybe, "maybe", events)(Bind("x", Const(NOTHING), Return(Var("x")))) is NOTHING
    assert [event.operation for event in events] == ["Bind"]


def test_default_label_is_builder_class_name():
    events: list[TraceEvent] = []

    traced(stack, events=events)(For("x", Const([1]), Yield(Var("x"))))

    assert {event.builder for event in events} == {"StackBuilder"}
    assert [event.operation for event in events] == ["Delay", "For", "Yield"]


def test_calls_are_logged(loguru_messages):
    traced(maybe, "maybe")(Return(Const("v")))

    assert loguru_messages == ["maybe.Return('v')"]
