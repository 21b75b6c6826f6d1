from __future__ import annotations

from typing import Any


class ComputationExpressionError(Exception):
    """Base class for errors raised while composing a computation expression."""


class MissingOperationError(ComputationExpressionError):
    """Raised when a construct needs an operation the builder does not define."""

    def __init__(self, construct: str, operation: str, attribute: str | None = None) -> None:
        self.construct = construct
        self.operation = operation
        self.attribute = attribute
        message = f"{construct} requires {operation}"
        if attribute is not None:
            message += (
                f"\nHint: This control construct may only be used if the builder "
                f"defines a '{attribute}' method (or a '{operation}' mapping entry)"
            )
        super().__init__(message)

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self.construct, self.operation, self.attribute))


MissingOperation = MissingOperationError


class OperationArityError(ComputationExpressionError, TypeError):
    """Raised when a builder operation cannot accept its fixed number of arguments."""

    def __init__(self, operation: str, arity: int, signature: str) -> None:
        self.operation = operation
        self.arity = arity
        super().__init__(
            f"Builder operation {operation} must accept exactly {arity} "
            f"positional argument(s), got signature {signature}"
        )


class MatchFailureError(ComputationExpressionError, ValueError):
    """Raised when no pattern matches a value (incomplete match)."""

    def __init__(self, construct: str, value: Any) -> None:
        self.construct = construct
        self.value = value
        super().__init__(f"The match cases in {construct} were incomplete for value {value!r}")


class UnboundNameError(KeyError):
    """Raised when an expression reads a name that no pattern has bound."""

    def __init__(self, name: str, bound: tuple[str, ...] = ()) -> None:
        self.name = name
        hint = ", ".join(bound) if bound else "<none>"
        super().__init__(
            f"Name not bound in this computation: {name!r}\n"
            f"Hint: Bind it with Let/Bind/For first, or pass env={{'{name}': value}} to compose(). "
            f"Bound names: {hint}"
        )


__all__ = [
    "ComputationExpressionError",
    "MatchFailureError",
    "MissingOperation",
    "MissingOperationError",
    "OperationArityError",
    "UnboundNameError",
]
