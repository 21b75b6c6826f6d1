"""
Fakes shared across the tests.

``ListOperations`` implements every builder operation over plain Python lists
(the list monad) and records the name of each operation as it runs.
``ListOperations.builder`` exposes any subset of them, so the same tests can
check how the engine behaves when Delay, Run or other operations are missing.
"""

from collections.abc import Callable, Iterator
from contextlib import ExitStack, contextmanager
from typing import Any

from cexpr import MappingBuilder
from cexpr.capabilities import OPERATIONS
from cexpr.utils import acquire

ALL_OPERATIONS = tuple(op.name for op in OPERATIONS)


def force(computation: Any) -> list[Any]:
    """Delay hands out thunks; everything else is already a list."""
    if callable(computation):
        return computation()
    return computation


class ListOperations:
    """List-monad operations that record each call in ``calls``."""

    def __init__(self) -> None:
        self.calls: list[str] = []

    def _record(self, name: str, func: Callable[..., Any]) -> Callable[..., Any]:
        def call(*args: Any) -> Any:
            self.calls.append(name)
            return func(*args)

        return call

    def operations(self) -> dict[str, Callable[..., Any]]:
        def bind(m: list[Any], f: Callable[[Any], Any]) -> list[Any]:
            out: list[Any] = []
            for item in m:
                out.extend(force(f(item)))
            return out

        def while_(guard: Callable[[], bool], body: Any) -> list[Any]:
            out: list[Any] = []
            while guard():
                out.extend(force(body))
            return out

        def using(resource: Any, f: Callable[[Any], Any]) -> list[Any]:
            with ExitStack() as resources:
                return force(f(acquire(resources, resource)))

        def try_with(m: Any, handler: Callable[[Exception], Any]) -> list[Any]:
            try:
                return force(m)
            except Exception as exc:
                return force(handler(exc))

        def try_finally(m: Any, compensation: Callable[[], Any]) -> list[Any]:
            try:
                return force(m)
            finally:
                compensation()

        return {
            "Bind": bind,
            "Return": lambda value: [value],
            "ReturnFrom": lambda m: m,
            "Yield": lambda value: [value],
            "YieldFrom": lambda m: list(m),
            "Zero": lambda: [],
            "Combine": lambda first, second: force(first) + force(second),
            "Delay": lambda thunk: thunk,
            "Run": force,
            "Using": using,
            "For": bind,
            "While": while_,
            "TryWith": try_with,
            "TryFinally": try_finally,
        }

    def builder(
        self, *names: str, without: tuple[str, ...] = (), record: bool = True
    ) -> MappingBuilder:
        selected = names or ALL_OPERATIONS
        operations = self.operations()
        return MappingBuilder(
            {
                name: self._record(name, operations[name]) if record else operations[name]
                for name in selected
                if name not in without
            }
        )


class Resource:
    """Disposable test resource counting its releases."""

    def __init__(self, name: str = "resource") -> None:
        self.name = name
        self.released = 0

    def close(self) -> None:
        self.released += 1

    def __repr__(self) -> str:
        return f"Resource({self.name!r})"


@contextmanager
def opened(log: list[str], value: str = "handle") -> Iterator[str]:
    """Generator context manager logging its enter, error and exit."""
    log.append("enter")
    try:
        yield value
    except Exception as exc:
        log.append(f"error: {exc}")
        raise
    finally:
        log.append("exit")
