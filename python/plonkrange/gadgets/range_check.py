"""
Range check gadget.

Checks that the value witnessed in a cell lies in a given range. Small ranges
use a range-check expression, large ranges use a lookup into a table.

        value     |    q_range_check    |   q_lookup  |  table_value  |
       ----------------------------------------------------------------
          v_0     |         1           |      0      |       0       |
          v_1     |         0           |      1      |       1       |
"""

from __future__ import annotations

from ..arithmetization.circuit import AssignedCell, Circuit, Layouter
from ..arithmetization.constraint_system import Column, ConstraintSystem, Constraints
from ..arithmetization.expression import Constant, Rotation
from ..errors import ConfigurationError
from ..value import Value
from .table import RangeTableConfig


class RangeConstrained:
    """
    Assigned cell that has been constrained to `[0, RANGE)`.

    The bound is part of the type: `RangeConstrained[16]` and
    `RangeConstrained[8]` are distinct classes, and a value only moves to
    another bound through `widen`.
    """

    RANGE = None
    _bounded = {}

    def __init__(self, assigned: AssignedCell):
        if self.RANGE is None:
            raise TypeError("RangeConstrained needs a bound, use RangeConstrained[N]")
        self.assigned = assigned

    def __class_getitem__(cls, bound: int):
        if not isinstance(bound, int) or bound <= 0:
            raise TypeError(f"range bound must be a positive integer, got {bound!r}")
        bounded = RangeConstrained._bounded.get(bound)
        if bounded is None:
            bounded = type(f"RangeConstrained[{bound}]", (RangeConstrained,), {"RANGE": bound})
            RangeConstrained._bounded[bound] = bounded
        return bounded

    @property
    def bound(self) -> int:
        return self.RANGE

    @property
    def value(self) -> Value:
        return self.assigned.value

    @property
    def cell(self):
        return self.assigned.cell

    def widen(self, bound: int) -> RangeConstrained:
        """A value in `[0, N)` is also in `[0, M)` for every `M >= N`"""
        if bound < self.RANGE:
            raise ValueError(f"cannot narrow a value in [0, {self.RANGE}) to [0, {bound})")
        return RangeConstrained[bound](self.assigned)

    def __repr__(self):
        return f"{type(self).__name__}({self.assigned})"


def range_check_expression(range_: int, value):
    """
    Given a range R and a value v, returns the expression
    (v) * (1 - v) * (2 - v) * ... * (R - 1 - v)
    """
    assert range_ > 0
    expr = value
    for i in range(1, range_):
        expr = expr * (Constant(i) - value)
    return expr


class RangeCheckConfig:

    def __init__(
        self,
        q_range_check,
        q_lookup,
        value: Column,
        table: RangeTableConfig,
        instance: Column,
        range_: int,
        lookup_range: int,
    ):
        self.q_range_check = q_range_check
        self.q_lookup = q_lookup
        self.value = value
        self.table = table
        self.instance = instance
        self.range = range_
        self.lookup_range = lookup_range

    @classmethod
    def configure(cls, meta: ConstraintSystem, value: Column, range_: int, lookup_range: int):
        if range_ <= 0:
            raise ConfigurationError(f"range must be positive, got {range_}")
        if lookup_range <= 0:
            raise ConfigurationError(f"lookup range must be positive, got {lookup_range}")

        q_range_check = meta.selector()
        q_lookup = meta.complex_selector()
        table = RangeTableConfig.configure(meta, lookup_range)
        instance = meta.instance_column()

        meta.enable_equality(instance)

        def range_check_gate(meta):
            #        value     |    q_range_check
            #       ------------------------------
            #          v       |         1
            q = meta.query_selector(q_range_check)
            v = meta.query_advice(value, Rotation.cur())

            return Constraints.with_selector(q, [("range check", range_check_expression(range_, v))])

        meta.create_gate("range check", range_check_gate)

        def range_check_lookup(meta):
            q = meta.query_selector(q_lookup)
            v = meta.query_advice(value, Rotation.cur())

            return [(q * v, table.value)]

        meta.lookup("range check lookup", range_check_lookup)

        return cls(q_range_check, q_lookup, value, table, instance, range_, lookup_range)

    def assign_simple(self, layouter: Layouter, value: Value) -> RangeConstrained:

        def assign(region):
            offset = 0

            self.q_range_check.enable(region, offset)

            cell = region.assign_advice("value", self.value, offset, value)
            return RangeConstrained[self.range](cell)

        return layouter.assign_region("Assign value for simple range check", assign)

    def assign_lookup(self, layouter: Layouter, value: Value) -> RangeConstrained:

        def assign(region):
            offset = 0

            self.q_lookup.enable(region, offset)

            cell = region.assign_advice("value", self.value, offset, value)
            return RangeConstrained[self.lookup_range](cell)

        return layouter.assign_region("Assign value for lookup range check", assign)


class RangeCheckCircuit(Circuit):
    """
    Circuit range checking one witness with the expression gate.

    The lookup witness is only assigned when `assign_lookup` is set (it
    defaults to the class constant `ASSIGN_LOOKUP`), see
    `with_lookup`. Bounds are class parameters:

    ```
    circuit = RangeCheckCircuit[16, 8](value=Value.known(7))
    ```
    """

    RANGE = None
    LOOKUP_RANGE = None
    ASSIGN_LOOKUP = False
    _parameterized = {}

    def __init__(self, value: Value = None, lookup_value: Value = None):
        if self.RANGE is None or self.LOOKUP_RANGE is None:
            raise TypeError("use RangeCheckCircuit[RANGE, LOOKUP_RANGE]")
        self.value = value if value is not None else Value.unknown()
        self.lookup_value = lookup_value if lookup_value is not None else Value.unknown()
        self.assign_lookup = self.ASSIGN_LOOKUP

    def __class_getitem__(cls, params):
        range_, lookup_range = params
        key = (cls, range_, lookup_range)
        parameterized = RangeCheckCircuit._parameterized.get(key)
        if parameterized is None:
            parameterized = type(
                f"{cls.__name__}[{range_}, {lookup_range}]",
                (cls,),
                {"RANGE": range_, "LOOKUP_RANGE": lookup_range},
            )
            RangeCheckCircuit._parameterized[key] = parameterized
        return parameterized

    @classmethod
    def with_lookup(cls, value: Value = None, lookup_value: Value = None):
        """Build a circuit that also assigns `lookup_value` through the lookup"""
        circuit = cls(value, lookup_value)
        circuit.assign_lookup = True
        return circuit

    def without_witnesses(self):
        circuit = type(self)()
        circuit.assign_lookup = self.assign_lookup
        return circuit

    @classmethod
    def configure(cls, meta: ConstraintSystem) -> RangeCheckConfig:
        value = meta.advice_column()
        return RangeCheckConfig.configure(meta, value, cls.RANGE, cls.LOOKUP_RANGE)

    def synthesize(self, config: RangeCheckConfig, layouter: Layouter):
        config.table.load(layouter)

        config.assign_simple(layouter.namespace("Assign simple value"), self.value)
        if self.assign_lookup:
            config.assign_lookup(layouter.namespace("Assign lookup value"), self.lookup_value)
