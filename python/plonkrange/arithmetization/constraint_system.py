from __future__ import annotations

import hashlib
from enum import Enum

from ..constant import BN254_SCALAR_FIELD
from ..errors import ConfigurationError
from .expression import (
    AdviceQuery,
    Expression,
    FixedQuery,
    InstanceQuery,
    Rotation,
    SelectorExpression,
)


class ColumnType(Enum):
    ADVICE = "advice"
    FIXED = "fixed"
    INSTANCE = "instance"


Advice = ColumnType.ADVICE
Fixed = ColumnType.FIXED
Instance = ColumnType.INSTANCE


class Column:

    def __init__(self, index: int, column_type: ColumnType):
        self.index = index
        self.column_type = column_type

    def __eq__(self, other):
        if not isinstance(other, Column):
            return NotImplemented
        return self.index == other.index and self.column_type == other.column_type

    def __hash__(self):
        return hash((self.index, self.column_type))

    def __lt__(self, other):
        order = [Advice, Fixed, Instance]
        return (order.index(self.column_type), self.index) < (
            order.index(other.column_type),
            other.index,
        )

    def __str__(self):
        return f"{self.column_type.value}[{self.index}]"

    def __repr__(self):
        return f"Column({self.index}, {self.column_type.name})"


class TableColumn:
    """Fixed column that may only be filled through `Layouter.assign_table`"""

    def __init__(self, inner: Column):
        assert inner.column_type == Fixed
        self.inner = inner

    def __eq__(self, other):
        if not isinstance(other, TableColumn):
            return NotImplemented
        return self.inner == other.inner

    def __hash__(self):
        return hash(("table", self.inner))

    def __repr__(self):
        return f"TableColumn({self.inner.index})"


class Selector:
    """
    Per-row boolean flag. Simple selectors may only multiply gate
    constraints, complex selectors may also appear in lookup inputs.
    """

    def __init__(self, index: int, simple: bool):
        self.index = index
        self.simple = simple

    def enable(self, region, offset: int):
        region.enable_selector("", self, offset)

    def __eq__(self, other):
        if not isinstance(other, Selector):
            return NotImplemented
        return self.index == other.index

    def __hash__(self):
        return hash(("selector", self.index))

    def __repr__(self):
        kind = "simple" if self.simple else "complex"
        return f"Selector({self.index}, {kind})"


class VirtualCells:
    """Query interface handed to gate and lookup definitions"""

    def __init__(self, meta: ConstraintSystem):
        self.meta = meta
        self.queried_selectors = []
        self.queried_cells = []

    def query_selector(self, selector: Selector) -> Expression:
        self.queried_selectors.append(selector)
        return SelectorExpression(selector)

    def query_fixed(self, column: Column, rotation: int = Rotation.cur()) -> Expression:
        assert column.column_type == Fixed
        self.meta.query_fixed_index(column, rotation)
        query = FixedQuery(column, rotation)
        self.queried_cells.append(query)
        return query

    def query_advice(self, column: Column, rotation: int = Rotation.cur()) -> Expression:
        assert column.column_type == Advice
        self.meta.query_advice_index(column, rotation)
        query = AdviceQuery(column, rotation)
        self.queried_cells.append(query)
        return query

    def query_instance(self, column: Column, rotation: int = Rotation.cur()) -> Expression:
        assert column.column_type == Instance
        self.meta.query_instance_index(column, rotation)
        query = InstanceQuery(column, rotation)
        self.queried_cells.append(query)
        return query

    def query_any(self, column: Column, rotation: int = Rotation.cur()) -> Expression:
        if column.column_type == Advice:
            return self.query_advice(column, rotation)
        if column.column_type == Fixed:
            return self.query_fixed(column, rotation)
        return self.query_instance(column, rotation)


class Constraints:
    """Constraints sharing one selector"""

    @staticmethod
    def with_selector(selector: Expression, constraints) -> list:
        result = []
        for constraint in constraints:
            if isinstance(constraint, tuple):
                name, poly = constraint
            else:
                name, poly = "", constraint
            result.append((name, selector * poly))
        return result


class Gate:

    def __init__(self, name: str, constraint_names: list, polys: list, queried_selectors, queried_cells):
        self.name = name
        self.constraint_names = constraint_names
        self.polys = polys
        self.queried_selectors = queried_selectors
        self.queried_cells = queried_cells

    def constraint_name(self, index: int) -> str:
        return self.constraint_names[index]

    def degree(self) -> int:
        return max(poly.degree() for poly in self.polys)

    def __repr__(self):
        return f"Gate({self.name!r}, {self.polys})"


class Lookup:
    """
    Argument that every row of `(input_expressions)` appears as a row of
    `(table_expressions)`
    """

    def __init__(self, name: str, input_expressions: list, table_expressions: list):
        self.name = name
        self.input_expressions = input_expressions
        self.table_expressions = table_expressions

    def degree(self) -> int:
        input_degree = max(e.degree() for e in self.input_expressions)
        table_degree = max(e.degree() for e in self.table_expressions)
        # Z(X) (A(X) + beta) (S(X) + gamma) and (1 - l0) (A' - S') (A' - A'(w^-1 X))
        return max(3, 1 + input_degree + table_degree)

    def __repr__(self):
        return f"Lookup({self.name!r}, {self.input_expressions} -> {self.table_expressions})"


class ConstraintSystem:
    """
    Shape of a circuit: columns, selectors, gates, lookups and the columns
    taking part in the equality permutation.

    It is filled once by `Circuit.configure` and read-only afterwards.
    """

    def __init__(self, modulus: int = BN254_SCALAR_FIELD):
        self.modulus = modulus
        self.num_advice_columns = 0
        self.num_fixed_columns = 0
        self.num_instance_columns = 0
        self.num_selectors = 0
        self.selectors = []
        self.gates = []
        self.lookups = []
        self.advice_queries = []
        self.fixed_queries = []
        self.instance_queries = []
        self.permutation_columns = []
        self.table_columns = []
        self.selector_map = None

    def advice_column(self) -> Column:
        column = Column(self.num_advice_columns, Advice)
        self.num_advice_columns += 1
        return column

    def fixed_column(self) -> Column:
        column = Column(self.num_fixed_columns, Fixed)
        self.num_fixed_columns += 1
        return column

    def instance_column(self) -> Column:
        column = Column(self.num_instance_columns, Instance)
        self.num_instance_columns += 1
        return column

    def lookup_table_column(self) -> TableColumn:
        table = TableColumn(self.fixed_column())
        self.table_columns.append(table)
        return table

    def selector(self) -> Selector:
        selector = Selector(self.num_selectors, True)
        self.num_selectors += 1
        self.selectors.append(selector)
        return selector

    def complex_selector(self) -> Selector:
        selector = Selector(self.num_selectors, False)
        self.num_selectors += 1
        self.selectors.append(selector)
        return selector

    def enable_equality(self, column: Column):
        if column not in self.permutation_columns:
            # equality constraints are checked on the current row
            self._query_any_index(column, Rotation.cur())
            self.permutation_columns.append(column)

    def _register(self, queries: list, column: Column, rotation: int) -> int:
        key = (column, int(rotation))
        if key not in queries:
            queries.append(key)
        return queries.index(key)

    def query_advice_index(self, column: Column, rotation: int) -> int:
        return self._register(self.advice_queries, column, rotation)

    def query_fixed_index(self, column: Column, rotation: int) -> int:
        return self._register(self.fixed_queries, column, rotation)

    def query_instance_index(self, column: Column, rotation: int) -> int:
        return self._register(self.instance_queries, column, rotation)

    def _query_any_index(self, column: Column, rotation: int) -> int:
        if column.column_type == Advice:
            return self.query_advice_index(column, rotation)
        if column.column_type == Fixed:
            return self.query_fixed_index(column, rotation)
        return self.query_instance_index(column, rotation)

    def create_gate(self, name: str, constraints):
        """
        Register a custom gate.

        `constraints(meta)` receives a `VirtualCells` and returns a list of
        expressions or `(name, expression)` pairs, all of which must
        evaluate to zero on every row.
        """
        cells = VirtualCells(self)
        result = constraints(cells)

        names = []
        polys = []
        for constraint in result:
            if isinstance(constraint, tuple):
                constraint_name, poly = constraint
            else:
                constraint_name, poly = "", constraint
            if not isinstance(poly, Expression):
                raise ConfigurationError(
                    f"constraint {constraint_name!r} of gate {name!r} is not an expression"
                )
            names.append(constraint_name)
            polys.append(poly)

        if not polys:
            raise ConfigurationError(f"gate {name!r} must contain at least one constraint")

        self.gates.append(
            Gate(name, names, polys, cells.queried_selectors, cells.queried_cells)
        )

    def lookup(self, name: str, table_map) -> int:
        """
        Register a lookup argument.

        `table_map(meta)` returns `(input_expression, table_column)` pairs.
        Returns the index of the lookup.
        """
        cells = VirtualCells(self)
        pairs = table_map(cells)
        if not pairs:
            raise ConfigurationError(f"lookup {name!r} must contain at least one input")

        inputs = []
        tables = []
        for input_expression, table in pairs:
            if input_expression.contains_simple_selector():
                raise ConfigurationError(
                    f"simple selector cannot be used in lookup {name!r}"
                )
            if not isinstance(table, TableColumn):
                raise ConfigurationError(
                    f"lookup {name!r} must target a lookup table column"
                )
            inputs.append(input_expression)
            tables.append(cells.query_fixed(table.inner, Rotation.cur()))

        self.lookups.append(Lookup(name, inputs, tables))
        return len(self.lookups) - 1

    def degree(self) -> int:
        """Maximum degree over every constraint of the circuit"""
        # l0 * (1 - Z) and Z(wX) * (w + beta * s + gamma) for each column
        degree = max(2, len(self.permutation_columns) + 1)
        for lookup in self.lookups:
            degree = max(degree, lookup.degree())
        for gate in self.gates:
            degree = max(degree, gate.degree())
        return degree

    def minimum_rows(self) -> int:
        """Rows needed so that no two queries of one column alias"""
        rotations = [r for _, r in self.advice_queries + self.fixed_queries + self.instance_queries]
        if not rotations:
            return 1
        return max(rotations) - min(min(rotations), 0) + 1

    def directly_convert_selectors_to_fixed(self, selectors: list) -> list:
        """
        Turn every selector into a fixed column.

        `selectors[i]` is the list of booleans assigned to selector `i`.
        Gates and lookups are rewritten to query the new fixed columns, and
        the values of those columns are returned.
        """
        assert self.selector_map is None, "selectors are already converted"
        assert len(selectors) == self.num_selectors

        mapping = {}
        fixed_values = []
        for index, assignment in enumerate(selectors):
            column = self.fixed_column()
            self.query_fixed_index(column, Rotation.cur())
            mapping[index] = FixedQuery(column, Rotation.cur())
            fixed_values.append([1 if enabled else 0 for enabled in assignment])

        for gate in self.gates:
            gate.polys = [poly.replace_selectors(mapping) for poly in gate.polys]
        for lookup in self.lookups:
            lookup.input_expressions = [
                e.replace_selectors(mapping) for e in lookup.input_expressions
            ]

        self.selector_map = [mapping[i].column for i in range(self.num_selectors)]
        return fixed_values

    def pinned(self) -> bytes:
        """Canonical description of the circuit shape"""
        description = [
            f"modulus={self.modulus}",
            f"advice={self.num_advice_columns}",
            f"fixed={self.num_fixed_columns}",
            f"instance={self.num_instance_columns}",
            f"selectors={[s.simple for s in self.selectors]}",
            f"advice_queries={[(str(c), r) for c, r in self.advice_queries]}",
            f"fixed_queries={[(str(c), r) for c, r in self.fixed_queries]}",
            f"instance_queries={[(str(c), r) for c, r in self.instance_queries]}",
            f"permutation={[str(c) for c in self.permutation_columns]}",
        ]
        for gate in self.gates:
            description.append(f"gate={gate.name}:{[str(p) for p in gate.polys]}")
        for lookup in self.lookups:
            description.append(
                f"lookup={lookup.name}:{[str(e) for e in lookup.input_expressions]}"
                f"->{[str(e) for e in lookup.table_expressions]}"
            )
        return "\n".join(description).encode()

    def digest(self) -> bytes:
        return hashlib.blake2b(self.pinned(), digest_size=32).digest()
