from __future__ import annotations
from typing import Any, Callable

from .errors import Synthesis


class Value:
    """
    A witness value that is either known or unknown.

    Values are unknown while keys are generated (only the shape of the
    circuit matters there) and known while a proof is created. Operations on
    an unknown value produce an unknown value.
    """

    __slots__ = ("_inner",)

    def __init__(self, inner: Any = None):
        self._inner = inner

    @classmethod
    def known(cls, value) -> Value:
        if value is None:
            raise ValueError("known value cannot be None")
        return cls(value)

    @classmethod
    def unknown(cls) -> Value:
        return cls(None)

    def is_known(self) -> bool:
        return self._inner is not None

    def inner(self):
        """Return the wrapped value, or `None` when unknown"""
        return self._inner

    def assign(self):
        """Return the wrapped value, raising `Synthesis` when unknown"""
        if self._inner is None:
            raise Synthesis("witness value is unknown")
        return self._inner

    def map(self, func: Callable[[Any], Any]) -> Value:
        if self._inner is None:
            return Value.unknown()
        return Value(func(self._inner))

    def zip(self, other: Value) -> Value:
        if self._inner is None or other._inner is None:
            return Value.unknown()
        return Value((self._inner, other._inner))

    def _binary(self, other, op):
        if isinstance(other, Value):
            return self.zip(other).map(lambda pair: op(pair[0], pair[1]))
        return self.map(lambda x: op(x, other))

    def __add__(self, other):
        return self._binary(other, lambda a, b: a + b)

    def __radd__(self, other):
        return self.__add__(other)

    def __sub__(self, other):
        return self._binary(other, lambda a, b: a - b)

    def __rsub__(self, other):
        return self.map(lambda x: other - x)

    def __mul__(self, other):
        return self._binary(other, lambda a, b: a * b)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __neg__(self):
        return self.map(lambda x: -x)

    def __eq__(self, other):
        if not isinstance(other, Value):
            return NotImplemented
        return self._inner == other._inner

    def __hash__(self):
        return hash(self._inner)

    def __repr__(self):
        if self._inner is None:
            return "Value(unknown)"
        return f"Value({self._inner!r})"
