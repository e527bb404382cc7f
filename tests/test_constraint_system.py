import pytest

from plonkrange.arithmetization import (
    Advice,
    Column,
    ConstraintSystem,
    Constraints,
    Fixed,
    Instance,
    Rotation,
)
from plonkrange.errors import ConfigurationError
from plonkrange.gadgets import RangeCheckConfig


def _evaluate(expression, advice):
    return expression.evaluate(
        constant=lambda c: c,
        selector_column=lambda s: 1,
        fixed_column=lambda q: 0,
        advice_column=lambda q: advice,
        instance_column=lambda q: 0,
        negated=lambda a: -a,
        sum_=lambda a, b: a + b,
        product=lambda a, b: a * b,
        scaled=lambda a, f: a * f,
    )


def test_expression():

    cs = ConstraintSystem()
    column = cs.advice_column()

    captured = []

    def gate(meta):
        v = meta.query_advice(column, Rotation.cur())
        captured.append(v)
        return [(v + 3) * 2, v * (1 - v) * (2 - v)]

    cs.create_gate("test", gate)

    first, second = cs.gates[0].polys
    assert _evaluate(first, 5) == 16
    assert _evaluate(second, 2) == 0
    assert _evaluate(second, 3) == 3 * -2 * -1

    assert first.degree() == 1
    assert second.degree() == 3
    assert second.queried_cells() == captured
    assert cs.advice_queries == [(column, 0)]

    with pytest.raises(SyntaxError):
        captured[0] ** 2


def test_columns():

    cs = ConstraintSystem()

    assert cs.advice_column() == Column(0, Advice)
    assert cs.advice_column() == Column(1, Advice)
    assert cs.fixed_column() == Column(0, Fixed)
    assert cs.instance_column() == Column(0, Instance)
    assert cs.lookup_table_column().inner == Column(1, Fixed)

    assert str(Column(1, Advice)) == "advice[1]"
    assert sorted([Column(0, Instance), Column(2, Fixed), Column(1, Advice)]) == [
        Column(1, Advice),
        Column(2, Fixed),
        Column(0, Instance),
    ]


def test_simple_selector_rejected_in_lookup():

    cs = ConstraintSystem()
    q = cs.selector()
    value = cs.advice_column()
    table = cs.lookup_table_column()

    with pytest.raises(ConfigurationError):
        cs.lookup("bad", lambda meta: [(meta.query_selector(q) * meta.query_advice(value), table)])

    assert cs.lookups == []


def test_lookup_must_target_table_column():

    cs = ConstraintSystem()
    q = cs.complex_selector()
    value = cs.advice_column()
    fixed = cs.fixed_column()

    with pytest.raises(ConfigurationError):
        cs.lookup("bad", lambda meta: [(meta.query_selector(q) * meta.query_advice(value), fixed)])


def test_complex_selector_in_lookup():

    cs = ConstraintSystem()
    q = cs.complex_selector()
    value = cs.advice_column()
    table = cs.lookup_table_column()

    index = cs.lookup("ok", lambda meta: [(meta.query_selector(q) * meta.query_advice(value), table)])

    assert index == 0
    assert cs.lookups[0].degree() == 4
    assert (table.inner, 0) in cs.fixed_queries


def test_empty_gate():

    cs = ConstraintSystem()

    with pytest.raises(ConfigurationError):
        cs.create_gate("empty", lambda meta: [])

    with pytest.raises(ConfigurationError):
        cs.create_gate("not an expression", lambda meta: [("c", 1)])

    assert cs.gates == []


def test_constraints_with_selector():

    cs = ConstraintSystem()
    q = cs.selector()
    value = cs.advice_column()

    def gate(meta):
        s = meta.query_selector(q)
        v = meta.query_advice(value, Rotation.cur())
        return Constraints.with_selector(s, [("bool", v * (1 - v)), v])

    cs.create_gate("boolean", gate)

    assert cs.gates[0].constraint_names == ["bool", ""]
    assert cs.gates[0].queried_selectors == [q]
    assert cs.gates[0].degree() == 3


@pytest.mark.parametrize("range_", [1, 4, 16])
def test_range_check_degree(range_):

    cs = ConstraintSystem()
    RangeCheckConfig.configure(cs, cs.advice_column(), range_, 8)

    # selector * v * (1 - v) * ... * (R - 1 - v)
    assert cs.gates[0].degree() == range_ + 1
    assert cs.lookups[0].degree() == 4
    assert cs.degree() == max(range_ + 1, 4)


def test_configuration_is_validated_before_registration():

    cs = ConstraintSystem()

    with pytest.raises(ConfigurationError):
        RangeCheckConfig.configure(cs, cs.advice_column(), 0, 8)

    with pytest.raises(ConfigurationError):
        RangeCheckConfig.configure(cs, cs.advice_column(), 16, 0)

    assert cs.gates == []
    assert cs.lookups == []
    assert cs.num_selectors == 0


def test_directly_convert_selectors_to_fixed():

    cs = ConstraintSystem()
    config = RangeCheckConfig.configure(cs, cs.advice_column(), 4, 8)

    assert cs.num_fixed_columns == 1
    assert cs.num_selectors == 2

    fixed = cs.directly_convert_selectors_to_fixed([[True, False], [False, True]])

    assert fixed == [[1, 0], [0, 1]]
    assert cs.num_fixed_columns == 3
    assert cs.selector_map == [Column(1, Fixed), Column(2, Fixed)]
    assert (Column(1, Fixed), 0) in cs.fixed_queries
    assert (Column(2, Fixed), 0) in cs.fixed_queries

    for gate in cs.gates:
        for poly in gate.polys:
            assert poly.queried_selectors() == []
            assert Column(1, Fixed) in [q.column for q in poly.queried_cells()]
    for lookup in cs.lookups:
        for expression in lookup.input_expressions:
            assert expression.queried_selectors() == []

    assert config.q_range_check.simple
    assert not config.q_lookup.simple


def test_enable_equality():

    cs = ConstraintSystem()
    config = RangeCheckConfig.configure(cs, cs.advice_column(), 4, 8)

    assert cs.permutation_columns == [config.instance]
    assert cs.instance_queries == [(config.instance, 0)]

    cs.enable_equality(config.value)
    cs.enable_equality(config.value)

    assert cs.permutation_columns == [config.instance, config.value]
    assert cs.degree() == 5


def test_pinned():

    first = ConstraintSystem()
    RangeCheckConfig.configure(first, first.advice_column(), 16, 8)
    second = ConstraintSystem()
    RangeCheckConfig.configure(second, second.advice_column(), 16, 8)
    other = ConstraintSystem()
    RangeCheckConfig.configure(other, other.advice_column(), 8, 8)

    assert first.digest() == second.digest()
    assert first.digest() != other.digest()
    assert len(first.digest()) == 32
    assert first.minimum_rows() == 1


def test_query_any():

    cs = ConstraintSystem()
    advice = cs.advice_column()
    fixed = cs.fixed_column()
    instance = cs.instance_column()

    captured = []

    def gate(meta):
        a = meta.query_any(advice, Rotation.prev())
        f = meta.query_any(fixed, Rotation.cur())
        i = meta.query_any(instance, Rotation.next())
        captured.extend([a, f, i])
        return [a * f - i]

    cs.create_gate("shifted", gate)

    assert [q.op for q in captured] == ["ADVICE", "FIXED", "INSTANCE"]
    assert cs.advice_queries == [(advice, -1)]
    assert cs.fixed_queries == [(fixed, 0)]
    assert cs.instance_queries == [(instance, 1)]
    assert cs.gates[0].degree() == 2

    # rows -1, 0 and 1 must not alias
    assert cs.minimum_rows() == 3
