"""
Operation tracing for any builder.

``traced(builder)`` returns a builder with the same capability set whose
every operation call is logged (``maybe.Bind(Some(1), <fun:continuation>)``)
before it is forwarded. The log shows exactly which operations a body
desugars into, and in which order::

    events: list[TraceEvent] = []
    traced(choose, "choose", events)(body)
    [event.format() for event in events]
    # ['choose.Delay(<fun:...>)', 'choose.Run(<fun:...>)', ...]
"""

from __future__ import annotations

from collections.abc import Callable, MutableSequence
from dataclasses import dataclass
from typing import Any

from loguru import logger

from cexpr.builders.base import MappingBuilder
from cexpr.capabilities import Capabilities

_trace_logger = logger.bind(component="cexpr.trace")


def _describe(value: Any) -> str:
    if callable(value) and hasattr(value, "__code__"):
        return f"<fun:{value.__name__}>"
    return repr(value)


@dataclass(frozen=True)
class TraceEvent:
    """One recorded operation call."""

    builder: str
    operation: str
    args: tuple[Any, ...]

    def format(self) -> str:
        return f"{self.builder}.{self.operation}({', '.join(map(_describe, self.args))})"


def traced(
    builder: Any,
    name: str | None = None,
    events: MutableSequence[TraceEvent] | None = None,
) -> MappingBuilder:
    """Wrap ``builder`` so each operation call is logged and recorded.

    Args:
        builder: Builder (object or mapping) to wrap.
        name: Label used in the log, defaults to the builder's class name.
        events: Optional list receiving a ``TraceEvent`` per call.
    """

    capabilities = Capabilities.inspect(builder)
    label = name or type(builder).__name__

    def wrap(operation: str, func: Callable[..., Any]) -> Callable[..., Any]:
        def call(*args: Any) -> Any:
            event = TraceEvent(label, operation, args)
            _trace_logger.debug("{}", event.format())
            if events is not None:
                events.append(event)
            return func(*args)

        call.__name__ = f"{label}.{operation}"
        return call

    return MappingBuilder(
        {operation: wrap(operation, func) for operation, func in capabilities.operations.items()}
    )


__all__ = ["TraceEvent", "traced"]
