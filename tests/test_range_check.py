import pytest

from plonkrange.arithmetization import ConstraintSystem, SingleChipLayouter
from plonkrange.dev import MockProver
from plonkrange.errors import ConfigurationError, NotEnoughRowsAvailable, Synthesis
from plonkrange.gadgets import RangeCheckCircuit, RangeConstrained, RangeTableConfig
from plonkrange.value import Value


@pytest.fixture
def assigned():
    cs = ConstraintSystem()
    config = RangeCheckCircuit[16, 8].configure(cs)

    prover = MockProver(5, cs, [[]])
    layouter = SingleChipLayouter(prover)
    config.table.load(layouter)

    simple = config.assign_simple(layouter, Value.known(3))
    lookup = config.assign_lookup(layouter, Value.known(5))

    return prover, simple, lookup


def test_range_constrained_types():

    assert RangeConstrained[16] is RangeConstrained[16]
    assert RangeConstrained[16] is not RangeConstrained[8]
    assert issubclass(RangeConstrained[16], RangeConstrained)
    assert RangeConstrained[16].RANGE == 16
    assert RangeConstrained[16].__name__ == "RangeConstrained[16]"

    with pytest.raises(TypeError):
        RangeConstrained[0]

    with pytest.raises(TypeError):
        RangeConstrained["16"]


def test_assigned_values(assigned):

    prover, simple, lookup = assigned

    assert type(simple) is RangeConstrained[16]
    assert type(lookup) is RangeConstrained[8]
    assert simple.bound == 16
    assert lookup.bound == 8
    assert simple.value == Value.known(3)
    assert lookup.value == Value.known(5)

    # the table takes region 0
    assert simple.cell.region_index == 1
    assert lookup.cell.region_index == 2
    assert prover.advice[0][:2] == [3, 5]

    prover.assert_satisfied()


def test_widen(assigned):

    _, simple, lookup = assigned

    widened = lookup.widen(16)
    assert type(widened) is RangeConstrained[16]
    assert widened.cell == lookup.cell
    assert widened.value == lookup.value

    assert type(simple.widen(16)) is RangeConstrained[16]

    with pytest.raises(ValueError):
        simple.widen(8)


def test_unbounded_range_constrained(assigned):

    _, simple, _ = assigned

    with pytest.raises(TypeError):
        RangeConstrained(simple.assigned)


@pytest.mark.parametrize("range_, lookup_range", [(0, 8), (16, 0), (-1, 8)])
def test_invalid_ranges(range_, lookup_range):

    circuit = RangeCheckCircuit[range_, lookup_range](value=Value.known(0))

    with pytest.raises(ConfigurationError):
        MockProver.run(5, circuit, [[]])


def test_table_configuration():

    cs = ConstraintSystem()

    with pytest.raises(ConfigurationError):
        RangeTableConfig.configure(cs, 0)

    table = RangeTableConfig.configure(cs, 4)
    assert table.lookup_range == 4
    assert cs.table_columns == [table.value]


def test_table_larger_than_circuit():

    circuit = RangeCheckCircuit[4, 64](value=Value.known(0))

    with pytest.raises(NotEnoughRowsAvailable):
        MockProver.run(5, circuit, [[]])


def test_table_fills_every_row():

    circuit = RangeCheckCircuit[4, 32](value=Value.known(3))
    MockProver.run(5, circuit, [[]]).assert_satisfied()


def test_unknown_witness():

    circuit = RangeCheckCircuit[16, 8]()

    with pytest.raises(Synthesis):
        MockProver.run(5, circuit, [[]])


def test_without_witnesses():

    circuit = RangeCheckCircuit[16, 8](value=Value.known(7), lookup_value=Value.known(1))
    empty = circuit.without_witnesses()

    assert type(empty) is type(circuit)
    assert not empty.value.is_known()
    assert not empty.lookup_value.is_known()
    assert not empty.assign_lookup

    with_lookup = RangeCheckCircuit[16, 8].with_lookup(Value.known(7), Value.known(1))
    assert with_lookup.assign_lookup
    assert with_lookup.without_witnesses().assign_lookup
    assert not RangeCheckCircuit[16, 8].ASSIGN_LOOKUP
    assert not RangeCheckCircuit[16, 8].with_lookup().without_witnesses().ASSIGN_LOOKUP


def test_circuit_parameters():

    assert RangeCheckCircuit[16, 8] is RangeCheckCircuit[16, 8]
    assert RangeCheckCircuit[16, 8] is not RangeCheckCircuit[8, 16]
    assert RangeCheckCircuit[16, 8].RANGE == 16
    assert RangeCheckCircuit[16, 8].LOOKUP_RANGE == 8

    with pytest.raises(TypeError):
        RangeCheckCircuit()
