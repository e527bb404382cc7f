"""
Circuit definition and cell placement.

A `Circuit` declares its columns and constraints in `configure` and places
its witness in `synthesize`, through a `Layouter`. The layouter maps named
regions to absolute rows and forwards every write to an `Assignment`, the
backend-side sink: the mock prover, the key generator and the prover each
implement one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ..errors import AssignmentError, NotEnoughRowsAvailable
from ..value import Value
from .constraint_system import Advice, Column, ConstraintSystem, Selector, TableColumn


def _resolve(to) -> Value:
    value = to() if callable(to) else to
    if not isinstance(value, Value):
        value = Value.known(value)
    return value


class Cell:
    """Position of an assigned cell, relative to the start of its region"""

    def __init__(self, region_index: int, row_offset: int, column: Column):
        self.region_index = region_index
        self.row_offset = row_offset
        self.column = column

    def __eq__(self, other):
        if not isinstance(other, Cell):
            return NotImplemented
        return (
            self.region_index == other.region_index
            and self.row_offset == other.row_offset
            and self.column == other.column
        )

    def __hash__(self):
        return hash((self.region_index, self.row_offset, self.column))

    def __repr__(self):
        return f"Cell(region={self.region_index}, offset={self.row_offset}, {self.column})"


class AssignedCell:

    def __init__(self, value: Value, cell: Cell):
        self.value = value
        self.cell = cell

    def __repr__(self):
        return f"AssignedCell({self.value}, {self.cell})"


class Assignment(ABC):
    """Sink receiving the absolute-row writes of a synthesis pass"""

    def __init__(self, k: int):
        self.k = k
        self.n = 1 << k
        self.usable_rows = self.n

    def check_row(self, row: int):
        if row < 0 or row >= self.usable_rows:
            raise NotEnoughRowsAvailable(self.k, row)

    @abstractmethod
    def enter_region(self, name: str):
        raise NotImplementedError()

    @abstractmethod
    def exit_region(self):
        raise NotImplementedError()

    @abstractmethod
    def enable_selector(self, name: str, selector: Selector, row: int):
        raise NotImplementedError()

    @abstractmethod
    def query_instance(self, column: Column, row: int) -> Value:
        raise NotImplementedError()

    @abstractmethod
    def assign_advice(self, name: str, column: Column, row: int, to: Value):
        raise NotImplementedError()

    @abstractmethod
    def assign_fixed(self, name: str, column: Column, row: int, to: Value):
        raise NotImplementedError()

    @abstractmethod
    def copy(self, left_column: Column, left_row: int, right_column: Column, right_row: int):
        raise NotImplementedError()

    @abstractmethod
    def fill_from_row(self, column: Column, from_row: int, to: Value):
        raise NotImplementedError()

    def push_namespace(self, name: str):
        pass

    def pop_namespace(self, name: str = None):
        pass


class RegionShape:
    """Dry run of a region, recording the columns it touches and its height"""

    def __init__(self, region_index: int):
        self.region_index = region_index
        self.columns = set()
        self.row_count = 0

    def _use(self, column, offset: int):
        self.columns.add(column)
        self.row_count = max(self.row_count, offset + 1)

    def enable_selector(self, name, selector, offset):
        self._use(selector, offset)

    def assign_advice(self, name, column, offset, to):
        self._use(column, offset)
        return Cell(self.region_index, offset, column), Value.unknown()

    def assign_advice_from_instance(self, name, instance, row, advice, offset):
        self._use(advice, offset)
        return Cell(self.region_index, offset, advice), Value.unknown()

    def assign_fixed(self, name, column, offset, to):
        self._use(column, offset)
        return Cell(self.region_index, offset, column), Value.unknown()

    def constrain_equal(self, left, right):
        pass


class SingleChipRegion:

    def __init__(self, layouter: SingleChipLayouter, region_index: int):
        self.layouter = layouter
        self.region_index = region_index
        self.start = layouter.regions[region_index]

    @property
    def assignment(self) -> Assignment:
        return self.layouter.assignment

    def enable_selector(self, name, selector, offset):
        self.assignment.enable_selector(name, selector, self.start + offset)

    def assign_advice(self, name, column, offset, to):
        value = _resolve(to)
        self.assignment.assign_advice(name, column, self.start + offset, value)
        return Cell(self.region_index, offset, column), value

    def assign_advice_from_instance(self, name, instance, row, advice, offset):
        value = self.assignment.query_instance(instance, row)
        cell, value = self.assign_advice(name, advice, offset, value)
        self.assignment.copy(advice, self.start + offset, instance, row)
        return cell, value

    def assign_fixed(self, name, column, offset, to):
        value = _resolve(to)
        self.assignment.assign_fixed(name, column, self.start + offset, value)
        return Cell(self.region_index, offset, column), value

    def constrain_equal(self, left: Cell, right: Cell):
        self.assignment.copy(
            left.column,
            self.layouter.absolute_row(left),
            right.column,
            self.layouter.absolute_row(right),
        )


class Region:
    """Named group of cells placed together by the floor planner"""

    def __init__(self, region):
        self.region = region

    @property
    def region_index(self) -> int:
        return self.region.region_index

    def enable_selector(self, name: str, selector: Selector, offset: int):
        self.region.enable_selector(name, selector, offset)

    def assign_advice(self, name: str, column: Column, offset: int, to) -> AssignedCell:
        """
        Assign `to` (a `Value`, a plain field element or a callable returning
        either) to the advice `column` at `offset` rows into the region
        """
        assert column.column_type == Advice
        cell, value = self.region.assign_advice(name, column, offset, to)
        return AssignedCell(value, cell)

    def assign_advice_from_instance(
        self, name: str, instance: Column, row: int, advice: Column, offset: int
    ) -> AssignedCell:
        """Copy the public input at absolute `row` of `instance` into the region"""
        cell, value = self.region.assign_advice_from_instance(
            name, instance, row, advice, offset
        )
        return AssignedCell(value, cell)

    def assign_fixed(self, name: str, column: Column, offset: int, to) -> AssignedCell:
        cell, value = self.region.assign_fixed(name, column, offset, to)
        return AssignedCell(value, cell)

    def constrain_equal(self, left: Cell, right: Cell):
        self.region.constrain_equal(left, right)


class Table:
    """
    Filler of lookup table columns.

    Every column starts at row 0. Once the table is assigned, the rest of
    each column is padded with its value at offset 0.
    """

    def __init__(self, assignment: Assignment, used_columns: set):
        self.assignment = assignment
        self.used_columns = used_columns
        self.default_and_assigned = {}

    def assign_cell(self, name: str, column: TableColumn, offset: int, to):
        if column in self.used_columns:
            raise AssignmentError(f"{column} has already been used by another table")

        value = _resolve(to)
        self.assignment.assign_fixed(name, column.inner, offset, value)

        default, assigned = self.default_and_assigned.setdefault(column, [None, set()])
        if offset == 0:
            self.default_and_assigned[column][0] = value
        assigned.add(offset)

    def finish(self):
        lengths = set()
        for column, (default, assigned) in self.default_and_assigned.items():
            if default is None:
                raise AssignmentError(f"{column} has no value at offset 0")
            length = max(assigned) + 1
            if len(assigned) != length:
                raise AssignmentError(f"{column} has unassigned rows")
            lengths.add(length)

        if len(lengths) > 1:
            raise AssignmentError("table columns have uneven lengths")

        for column, (default, assigned) in self.default_and_assigned.items():
            self.assignment.fill_from_row(column.inner, len(assigned), default)
            self.used_columns.add(column)


class Layouter(ABC):

    @abstractmethod
    def assign_region(self, name: str, assignment):
        raise NotImplementedError()

    @abstractmethod
    def assign_table(self, name: str, assignment):
        raise NotImplementedError()

    @abstractmethod
    def constrain_instance(self, cell: Cell, column: Column, row: int):
        raise NotImplementedError()

    def namespace(self, name: str) -> Layouter:
        return NamespacedLayouter(self, name)


class SingleChipLayouter(Layouter):
    """
    Layouter placing each region after the last row used by any of its
    columns, in the order the regions are requested
    """

    def __init__(self, assignment: Assignment):
        self.assignment = assignment
        self.regions = []
        self.columns = {}
        self.table_columns = set()

    def absolute_row(self, cell: Cell) -> int:
        return self.regions[cell.region_index] + cell.row_offset

    def assign_region(self, name: str, assignment):
        region_index = len(self.regions)

        # shape pass
        shape = RegionShape(region_index)
        assignment(Region(shape))

        start = 0
        for column in shape.columns:
            start = max(start, self.columns.get(column, 0))
        self.regions.append(start)
        for column in shape.columns:
            self.columns[column] = start + shape.row_count

        # assignment pass
        self.assignment.enter_region(name)
        result = assignment(Region(SingleChipRegion(self, region_index)))
        self.assignment.exit_region()

        return result

    def assign_table(self, name: str, assignment):
        # tables live on their own fixed columns, starting at row 0
        self.regions.append(0)

        self.assignment.enter_region(name)
        table = Table(self.assignment, self.table_columns)
        result = assignment(table)
        table.finish()
        self.assignment.exit_region()

        return result

    def constrain_instance(self, cell: Cell, column: Column, row: int):
        self.assignment.copy(cell.column, self.absolute_row(cell), column, row)


class NamespacedLayouter(Layouter):

    def __init__(self, parent: Layouter, name: str):
        self.parent = parent
        self.name = name

    def _root(self) -> SingleChipLayouter:
        layouter = self.parent
        while isinstance(layouter, NamespacedLayouter):
            layouter = layouter.parent
        return layouter

    def _scoped(self, method, *args):
        root = self._root()
        root.assignment.push_namespace(self.name)
        try:
            return method(*args)
        finally:
            root.assignment.pop_namespace(self.name)

    def assign_region(self, name: str, assignment):
        return self._scoped(self.parent.assign_region, name, assignment)

    def assign_table(self, name: str, assignment):
        return self._scoped(self.parent.assign_table, name, assignment)

    def constrain_instance(self, cell: Cell, column: Column, row: int):
        return self._scoped(self.parent.constrain_instance, cell, column, row)


class SimpleFloorPlanner:
    """Floor planner laying out regions one after another on a single chip"""

    @staticmethod
    def synthesize(assignment: Assignment, circuit: Circuit, config):
        layouter = SingleChipLayouter(assignment)
        circuit.synthesize(config, layouter)


class Circuit(ABC):
    """
    Base class of a circuit.

    `configure` builds the constraint system once per circuit type and
    returns the configuration handed to `synthesize`. `synthesize` is run
    without witnesses while keys are generated and with witnesses while a
    proof is created.
    """

    FLOOR_PLANNER = SimpleFloorPlanner

    @abstractmethod
    def without_witnesses(self) -> Circuit:
        raise NotImplementedError()

    @classmethod
    @abstractmethod
    def configure(cls, meta: ConstraintSystem):
        raise NotImplementedError()

    @abstractmethod
    def synthesize(self, config, layouter: Layouter):
        raise NotImplementedError()
