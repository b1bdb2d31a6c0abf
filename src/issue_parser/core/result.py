"""
Result type - Explicit success/failure values for recoverable errors.

Parsers in this package never raise for expected failure modes. They return
either ``Ok(value)`` or ``Err(error)`` and callers decide what to do with the
error, typically handing it to the recovery engine.

Example:
    >>> def parse_int(s: str) -> Result[int, str]:
    ...     try:
    ...         return Ok(int(s))
    ...     except ValueError:
    ...         return Err(f"invalid integer: {s}")
    >>> parse_int("21").map(lambda n: n * 2).unwrap()
    42

Both variants support structural pattern matching::

    match result:
        case Ok(value): ...
        case Err(error): ...
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Generic, NoReturn, TypeVar


T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")


class ResultError(Exception):
    """Raised when a Result is unwrapped as the wrong variant."""


class Result(ABC, Generic[T, E]):
    """
    Base class for ``Ok`` and ``Err``.

    Never instantiated directly. Also hosts the class-level helpers for
    combining and creating results.
    """

    __slots__ = ()

    @abstractmethod
    def is_ok(self) -> bool:
        """Return True for ``Ok``."""

    def is_err(self) -> bool:
        """Return True for ``Err``."""
        return not self.is_ok()

    @abstractmethod
    def ok(self) -> T | None:
        """Return the success value, or None."""

    @abstractmethod
    def err(self) -> E | None:
        """Return the error value, or None."""

    @abstractmethod
    def unwrap(self) -> T:
        """Return the success value or raise ResultError."""

    @abstractmethod
    def unwrap_err(self) -> E:
        """Return the error value or raise ResultError."""

    @abstractmethod
    def unwrap_or(self, default: T) -> T:
        """Return the success value or ``default``."""

    @abstractmethod
    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        """Return the success value or compute one from the error."""

    @abstractmethod
    def expect(self, message: str) -> T:
        """Return the success value or raise ResultError with ``message``."""

    @abstractmethod
    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        """Transform the success value."""

    @abstractmethod
    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        """Transform the error value."""

    @abstractmethod
    def and_then(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Chain a fallible operation on the success value."""

    @abstractmethod
    def or_else(self, fn: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Recover from an error with a fallible operation."""

    def inspect(self, fn: Callable[[T], Any]) -> Result[T, E]:
        """Call ``fn`` with the success value, returning self unchanged."""
        if self.is_ok():
            fn(self.unwrap())
        return self

    def inspect_err(self, fn: Callable[[E], Any]) -> Result[T, E]:
        """Call ``fn`` with the error value, returning self unchanged."""
        if self.is_err():
            fn(self.unwrap_err())
        return self

    def to_optional(self) -> T | None:
        """Convert to an Optional, discarding the error."""
        return self.ok()

    def to_exception(self, factory: Callable[[E], Exception] | None = None) -> T:
        """
        Return the success value or raise.

        Args:
            factory: Builds the exception from the error. Defaults to ResultError.
        """
        if self.is_ok():
            return self.unwrap()
        error = self.unwrap_err()
        if factory is not None:
            raise factory(error)
        raise ResultError(str(error))

    def __bool__(self) -> bool:
        return self.is_ok()

    # -------------------------------------------------------------------------
    # Class helpers
    # -------------------------------------------------------------------------

    @staticmethod
    def collect(results: Iterable[Result[T, E]]) -> Result[list[T], E]:
        """Combine results, stopping at the first error."""
        values: list[T] = []
        for result in results:
            if result.is_err():
                return Err(result.unwrap_err())
            values.append(result.unwrap())
        return Ok(values)

    @staticmethod
    def collect_all(results: Iterable[Result[T, E]]) -> Result[list[T], list[E]]:
        """Combine results, gathering every error."""
        values: list[T] = []
        errors: list[E] = []
        for result in results:
            if result.is_ok():
                values.append(result.unwrap())
            else:
                errors.append(result.unwrap_err())
        if errors:
            return Err(errors)
        return Ok(values)

    @staticmethod
    def from_optional(value: T | None, error: E) -> Result[T, E]:
        """``Ok(value)`` unless value is None, then ``Err(error)``."""
        if value is None:
            return Err(error)
        return Ok(value)

    @staticmethod
    def try_call(
        fn: Callable[[], T],
        error_factory: Callable[[Exception], E] | None = None,
    ) -> Result[T, Any]:
        """
        Run ``fn`` and capture any exception as ``Err``.

        Args:
            fn: Zero-argument callable.
            error_factory: Converts the exception into the error value.
                Defaults to keeping the exception itself.
        """
        try:
            return Ok(fn())
        except Exception as e:
            if error_factory is not None:
                return Err(error_factory(e))
            return Err(e)


@dataclass(frozen=True, slots=True)
class Ok(Result[T, E]):
    """Successful result."""

    value: T

    def is_ok(self) -> bool:
        return True

    def ok(self) -> T | None:
        return self.value

    def err(self) -> E | None:
        return None

    def unwrap(self) -> T:
        return self.value

    def unwrap_err(self) -> NoReturn:
        raise ResultError(f"Called unwrap_err on Ok: {self.value!r}")

    def unwrap_or(self, default: T) -> T:
        return self.value

    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        return self.value

    def expect(self, message: str) -> T:
        return self.value

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Ok(fn(self.value))

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        return Ok(self.value)

    def and_then(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return fn(self.value)

    def or_else(self, fn: Callable[[E], Result[T, F]]) -> Result[T, F]:
        return Ok(self.value)

    def __repr__(self) -> str:
        return f"Ok({self.value!r})"


@dataclass(frozen=True, slots=True)
class Err(Result[T, E]):
    """Failed result."""

    error: E

    def is_ok(self) -> bool:
        return False

    def ok(self) -> T | None:
        return None

    def err(self) -> E | None:
        return self.error

    def unwrap(self) -> NoReturn:
        raise ResultError(f"Called unwrap on Err: {self.error!r}")

    def unwrap_err(self) -> E:
        return self.error

    def unwrap_or(self, default: T) -> T:
        return default

    def unwrap_or_else(self, fn: Callable[[E], T]) -> T:
        return fn(self.error)

    def expect(self, message: str) -> NoReturn:
        raise ResultError(f"{message}: {self.error!r}")

    def map(self, fn: Callable[[T], U]) -> Result[U, E]:
        return Err(self.error)

    def map_err(self, fn: Callable[[E], F]) -> Result[T, F]:
        return Err(fn(self.error))

    def and_then(self, fn: Callable[[T], Result[U, E]]) -> Result[U, E]:
        return Err(self.error)

    def or_else(self, fn: Callable[[E], Result[T, F]]) -> Result[T, F]:
        return fn(self.error)

    def __repr__(self) -> str:
        return f"Err({self.error!r})"


__all__ = ["Err", "Ok", "Result", "ResultError"]
