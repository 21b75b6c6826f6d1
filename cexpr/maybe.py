"""
Optional values used by the option and choice builders.

A ``Maybe`` is either ``Some(value)`` or the ``NOTHING`` singleton. In a
``maybe`` body, ``let!`` on ``NOTHING`` short-circuits the rest of the body
and ``if`` without ``else`` produces ``NOTHING``. In a ``choose`` body the
first branch that yields ``Some`` wins, which ``|`` mirrors for plain values::

    NOTHING | Some(2) | Some(3)    # Some(2)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Final, Generic, NoReturn, TypeVar

T = TypeVar("T")
T_co = TypeVar("T_co", covariant=True)
U = TypeVar("U")


class Maybe(Generic[T_co]):
    """Result of a computation that may have produced no value.

    The two variants override each operation, so none of them inspects the
    other variant.
    """

    __slots__ = ()

    @classmethod
    def from_optional(cls, value: T_co | None) -> Maybe[T_co]:
        """``None`` becomes ``NOTHING``; anything else is wrapped in ``Some``."""

        return NOTHING if value is None else Some(value)

    def is_some(self) -> bool:
        return False

    def is_none(self) -> bool:
        return not self.is_some()

    def expect(self, message: str) -> T_co:
        raise RuntimeError(message or "expected a value, got NOTHING")

    def unwrap(self) -> T_co:
        raise RuntimeError("unwrap called on NOTHING")

    def unwrap_or(self, default: U) -> T_co | U:
        return default

    def to_optional(self) -> T_co | None:
        return None

    def map(self, func: Callable[[T_co], U]) -> Maybe[U]:
        return NOTHING

    def flat_map(self, func: Callable[[T_co], Maybe[U]]) -> Maybe[U]:
        """The option builder's Bind: ``func`` only runs on a present value."""

        return NOTHING

    def filter(self, predicate: Callable[[T_co], bool]) -> Maybe[T_co]:
        return NOTHING

    def __or__(self, other: Maybe[U]) -> Maybe[T_co] | Maybe[U]:
        """First present value of ``self`` and ``other``."""

        return other

    def __bool__(self) -> bool:
        return self.is_some()


@dataclass(frozen=True)
class Some(Maybe[T], Generic[T]):
    value: T

    def is_some(self) -> bool:
        return True

    def expect(self, message: str) -> T:
        return self.value

    def unwrap(self) -> T:
        return self.value

    def unwrap_or(self, default: U) -> T:
        return self.value

    def to_optional(self) -> T:
        return self.value

    def map(self, func: Callable[[T], U]) -> Maybe[U]:
        return Some(func(self.value))

    def flat_map(self, func: Callable[[T], Maybe[U]]) -> Maybe[U]:
        result = func(self.value)
        if not isinstance(result, Maybe):
            raise TypeError(
                f"flat_map continuation must return a Maybe, got {type(result).__name__}"
            )
        return result

    def filter(self, predicate: Callable[[T], bool]) -> Maybe[T]:
        return self if predicate(self.value) else NOTHING

    def __or__(self, other: Maybe[U]) -> Maybe[T]:
        return self


class Nothing(Maybe[NoReturn]):
    """The absent value; ``Nothing()`` always returns ``NOTHING``."""

    __slots__ = ()
    _instance: Nothing | None = None

    def __new__(cls) -> Nothing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Nothing()"


NOTHING: Final[Maybe[NoReturn]] = Nothing()


__all__ = [
    "NOTHING",
    "Maybe",
    "Nothing",
    "Some",
]
