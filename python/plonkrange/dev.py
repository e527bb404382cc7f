"""
Debug-time constraint checker.

`MockProver` synthesizes a circuit with its witness and checks every gate,
lookup and equality constraint row by row, without any cryptography. It
reports what failed and where, which a real proof cannot do.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .arithmetization.circuit import Assignment, Circuit
from .arithmetization.constraint_system import Advice, Column, ConstraintSystem, Fixed, Selector
from .constant import BN254_SCALAR_FIELD
from .errors import AssignmentError, InvalidParameters, NotEnoughRowsAvailable
from .value import Value

logger = logging.getLogger(__name__)


def format_value(value: int, p: int) -> str:
    if value == 0:
        return "0"
    if value == 1:
        return "1"
    if value == p - 1:
        return "-1"
    return hex(value)


class FailureLocation:
    """Where a failure happened, relative to a region when possible"""

    @staticmethod
    def in_region(region: tuple, offset: int) -> InRegion:
        return InRegion(region=tuple(region), offset=offset)

    @staticmethod
    def outside_region(row: int) -> OutsideRegion:
        return OutsideRegion(row=row)

    @staticmethod
    def find(regions: list, row: int, columns: set) -> FailureLocation:
        for index, region in enumerate(regions):
            if region.rows is None:
                continue
            start, end = region.rows
            if start <= row <= end and not region.columns.isdisjoint(columns):
                return FailureLocation.in_region((index, region.name), row - start)
        return FailureLocation.outside_region(row)


@dataclass(frozen=True)
class InRegion(FailureLocation):
    region: tuple
    offset: int

    def __str__(self):
        return f"in region {self.region} at offset {self.offset}"


@dataclass(frozen=True)
class OutsideRegion(FailureLocation):
    row: int

    def __str__(self):
        return f"outside any region, on row {self.row}"


@dataclass(frozen=True)
class Constraint:
    gate: tuple
    index: int
    name: str

    def __str__(self):
        return f"constraint {self.index} ('{self.name}') in gate {self.gate[0]} ('{self.gate[1]}')"


class VerifyFailure:
    """Base class of the failures reported by `MockProver.verify`"""


@dataclass(frozen=True)
class CellNotAssigned(VerifyFailure):
    gate: tuple
    region: tuple
    gate_offset: int
    column: Column
    offset: int

    def __str__(self):
        return (
            f"region {self.region} uses gate {self.gate} at offset {self.gate_offset}, "
            f"which requires cell in column {self.column} at offset {self.offset} to be assigned"
        )


@dataclass(frozen=True)
class ConstraintNotSatisfied(VerifyFailure):
    constraint: Constraint
    location: FailureLocation
    cell_values: tuple

    def __str__(self):
        values = ", ".join(f"{column}@{rotation} = {v}" for (column, rotation), v in self.cell_values)
        return f"{self.constraint} is not satisfied {self.location} ({values})"


@dataclass(frozen=True)
class Lookup(VerifyFailure):
    name: str
    lookup_index: int
    location: FailureLocation

    def __str__(self):
        return f"lookup {self.lookup_index} ('{self.name}') is not satisfied {self.location}"


@dataclass(frozen=True)
class Permutation(VerifyFailure):
    column: Column
    location: FailureLocation

    def __str__(self):
        return f"equality constraint not satisfied by cell ({self.column}, {self.location})"


class _RegionRecord:

    def __init__(self, name: str):
        self.name = name
        self.columns = set()
        self.rows = None
        self.enabled_selectors = {}
        self.cells = {}

    def update_extent(self, column, row: int):
        if column is not None:
            self.columns.add(column)
        if self.rows is None:
            self.rows = (row, row)
        else:
            start, end = self.rows
            self.rows = (min(start, row), max(end, row))

    def track_cell(self, column: Column, row: int):
        self.update_extent(column, row)
        self.cells[(column, row)] = self.cells.get((column, row), 0) + 1


class MockProver(Assignment):
    """
    Example:
    ```
    prover = MockProver.run(9, circuit, [[]])
    assert prover.verify() == []
    ```
    """

    def __init__(self, k: int, cs: ConstraintSystem, instances: list):
        super().__init__(k)
        self.cs = cs
        self.p = cs.modulus

        if len(instances) != cs.num_instance_columns:
            raise InvalidParameters(
                f"expected {cs.num_instance_columns} instance columns, got {len(instances)}"
            )
        self.instance = []
        for values in instances:
            if len(values) > self.usable_rows:
                raise InvalidParameters("instance column is larger than the circuit")
            column = [v % self.p for v in values]
            self.instance.append(column + [0] * (self.n - len(column)))

        self.advice = [[None] * self.n for _ in range(cs.num_advice_columns)]
        self.fixed = [[None] * self.n for _ in range(cs.num_fixed_columns)]
        self.selectors = [[False] * self.n for _ in range(cs.num_selectors)]
        self.permutation = []

        self.regions = []
        self.current_region = None

    @classmethod
    def run(cls, k: int, circuit: Circuit, instances: list, modulus: int = BN254_SCALAR_FIELD):
        """Synthesize `circuit` with its witness over `2^k` rows"""
        cs = ConstraintSystem(modulus)
        config = circuit.configure(cs)

        if (1 << k) < cs.minimum_rows():
            raise NotEnoughRowsAvailable(k)

        prover = cls(k, cs, instances)
        circuit.FLOOR_PLANNER.synthesize(prover, circuit, config)
        logger.debug("Synthesized %d regions over %d rows", len(prover.regions), prover.n)
        return prover

    def enter_region(self, name: str):
        assert self.current_region is None, "already in a region"
        self.current_region = _RegionRecord(name)

    def exit_region(self):
        assert self.current_region is not None, "not in a region"
        self.regions.append(self.current_region)
        self.current_region = None

    def enable_selector(self, name: str, selector: Selector, row: int):
        self.check_row(row)
        if self.current_region is not None:
            self.current_region.update_extent(None, row)
            self.current_region.enabled_selectors.setdefault(selector, []).append(row)
        self.selectors[selector.index][row] = True

    def query_instance(self, column: Column, row: int) -> Value:
        self.check_row(row)
        return Value.known(self.instance[column.index][row])

    def assign_advice(self, name: str, column: Column, row: int, to: Value):
        self.check_row(row)
        if self.current_region is not None:
            self.current_region.track_cell(column, row)
        self.advice[column.index][row] = to.assign() % self.p

    def assign_fixed(self, name: str, column: Column, row: int, to: Value):
        self.check_row(row)
        if self.current_region is not None:
            self.current_region.track_cell(column, row)
        self.fixed[column.index][row] = to.assign() % self.p

    def copy(self, left_column: Column, left_row: int, right_column: Column, right_row: int):
        for column in (left_column, right_column):
            if column not in self.cs.permutation_columns:
                raise AssignmentError(f"{column} is not enabled for equality")
        self.check_row(left_row)
        self.check_row(right_row)
        self.permutation.append((left_column, left_row, right_column, right_row))

    def fill_from_row(self, column: Column, from_row: int, to: Value):
        assert column.column_type == Fixed
        for row in range(from_row, self.usable_rows):
            self.assign_fixed("", column, row, to)

    def cell_value(self, column: Column, row: int) -> int:
        row %= self.n
        if column.column_type == Advice:
            value = self.advice[column.index][row]
        elif column.column_type == Fixed:
            value = self.fixed[column.index][row]
        else:
            value = self.instance[column.index][row]
        # unassigned cells evaluate to zero
        return 0 if value is None else value

    def evaluate(self, expression, row: int) -> int:
        p = self.p
        return expression.evaluate(
            constant=lambda c: c % p,
            selector_column=lambda s: 1 if self.selectors[s.index][row] else 0,
            fixed_column=lambda q: self.cell_value(q.column, row + q.rotation),
            advice_column=lambda q: self.cell_value(q.column, row + q.rotation),
            instance_column=lambda q: self.cell_value(q.column, row + q.rotation),
            negated=lambda a: -a % p,
            sum_=lambda a, b: (a + b) % p,
            product=lambda a, b: a * b % p,
            scaled=lambda a, f: a * f % p,
        )

    def _location(self, row: int, expressions: list) -> FailureLocation:
        columns = set()
        for expression in expressions:
            columns.update(q.column for q in expression.queried_cells())
        return FailureLocation.find(self.regions, row, columns)

    def _verify_cells(self) -> list:
        failures = []
        for region_index, region in enumerate(self.regions):
            if region.rows is None:
                continue
            start = region.rows[0]
            for selector, rows in region.enabled_selectors.items():
                for gate_index, gate in enumerate(self.cs.gates):
                    if selector not in gate.queried_selectors:
                        continue
                    for row in rows:
                        for query in gate.queried_cells:
                            if query.column.column_type != Advice:
                                continue
                            cell_row = row + query.rotation
                            if (query.column, cell_row) not in region.cells:
                                failures.append(
                                    CellNotAssigned(
                                        gate=(gate_index, gate.name),
                                        region=(region_index, region.name),
                                        gate_offset=row - start,
                                        column=query.column,
                                        offset=cell_row - start,
                                    )
                                )
        return failures

    def _verify_gates(self) -> list:
        failures = []
        for gate_index, gate in enumerate(self.cs.gates):
            for row in range(self.usable_rows):
                for poly_index, poly in enumerate(gate.polys):
                    if self.evaluate(poly, row) == 0:
                        continue
                    cell_values = tuple(
                        (
                            (q.column, int(q.rotation)),
                            format_value(self.cell_value(q.column, row + q.rotation), self.p),
                        )
                        for q in poly.queried_cells()
                    )
                    failures.append(
                        ConstraintNotSatisfied(
                            constraint=Constraint(
                                (gate_index, gate.name),
                                poly_index,
                                gate.constraint_name(poly_index),
                            ),
                            location=self._location(row, [poly]),
                            cell_values=cell_values,
                        )
                    )
        return failures

    def _verify_lookups(self) -> list:
        failures = []
        for lookup_index, lookup in enumerate(self.cs.lookups):
            table = set()
            for row in range(self.usable_rows):
                table.add(tuple(self.evaluate(e, row) for e in lookup.table_expressions))

            for row in range(self.usable_rows):
                inputs = tuple(self.evaluate(e, row) for e in lookup.input_expressions)
                if inputs not in table:
                    failures.append(
                        Lookup(
                            name=lookup.name,
                            lookup_index=lookup_index,
                            location=self._location(row, lookup.input_expressions),
                        )
                    )
        return failures

    def _verify_permutation(self) -> list:
        failures = []
        for left_column, left_row, right_column, right_row in self.permutation:
            if self.cell_value(left_column, left_row) != self.cell_value(right_column, right_row):
                failures.append(
                    Permutation(
                        column=left_column,
                        location=FailureLocation.find(self.regions, left_row, {left_column}),
                    )
                )
        return failures

    def verify(self) -> list:
        """Return every failure found, an empty list when the circuit is satisfied"""
        failures = (
            self._verify_cells()
            + self._verify_gates()
            + self._verify_lookups()
            + self._verify_permutation()
        )
        logger.debug("Mock prover found %d failures", len(failures))
        return failures

    def assert_satisfied(self):
        failures = self.verify()
        if failures:
            raise AssertionError(
                "circuit is not satisfied:\n" + "\n".join(f"  {f}" for f in failures)
            )
