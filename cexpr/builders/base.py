"""Base classes shared by the bundled builders."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Mapping
from typing import Any

from frozendict import frozendict

from cexpr.capabilities import Capabilities, operation_for_key
from cexpr.engine import compose
from cexpr.nodes import Node


class Builder:
    """Base class for builders.

    Calling a builder composes a computation, so ``maybe(body)`` reads like
    ``maybe { body }``. Subclasses define any of the operation methods listed
    in :data:`cexpr.capabilities.OPERATIONS`.
    """

    def __call__(
        self,
        body: Node,
        env: Mapping[str, Any] | None = None,
        *,
        debug: bool | None = None,
    ) -> Any:
        return compose(self, body, env, debug=debug)

    def capabilities(self) -> Capabilities:
        return Capabilities.inspect(self)


class MappingBuilder(Mapping[str, Callable[..., Any]], Builder):
    """Builder assembled from a mapping of operation name to callable.

    Example::

        counter = MappingBuilder({"Return": lambda v: [v], "Zero": lambda: []})
        counter(Return(Const(1)))   # [1]
    """

    def __init__(self, operations: Mapping[str, Callable[..., Any]]) -> None:
        normalized: dict[str, Callable[..., Any]] = {}
        for key, func in operations.items():
            normalized[operation_for_key(key).name] = func
        self._operations = frozendict(normalized)

    def __getitem__(self, key: str) -> Callable[..., Any]:
        return self._operations[operation_for_key(key).name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._operations)

    def __len__(self) -> int:
        return len(self._operations)

    def __repr__(self) -> str:
        return f"MappingBuilder({', '.join(self._operations)})"


__all__ = ["Builder", "MappingBuilder"]
