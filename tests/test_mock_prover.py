import pytest

from plonkrange import dev
from plonkrange.arithmetization import Advice, Column
from plonkrange.constant import BLS12_381_SCALAR_FIELD, BN254_SCALAR_FIELD
from plonkrange.dev import (
    CellNotAssigned,
    Constraint,
    ConstraintNotSatisfied,
    FailureLocation,
    MockProver,
    Permutation,
    format_value,
)
from plonkrange.errors import AssignmentError, InvalidParameters
from plonkrange.gadgets import RangeCheckCircuit
from plonkrange.value import Value

K = 9
RANGE = 16
LOOKUP_RANGE = 8


class PublicRangeCheck(RangeCheckCircuit[RANGE, LOOKUP_RANGE]):
    """Range checks a value and exposes it as the first public input"""

    @classmethod
    def configure(cls, meta):
        config = super().configure(meta)
        meta.enable_equality(config.value)
        return config

    def synthesize(self, config, layouter):
        config.table.load(layouter)
        checked = config.assign_simple(layouter.namespace("Assign simple value"), self.value)
        layouter.constrain_instance(checked.cell, config.instance, 0)


class UnassignedRangeCheck(RangeCheckCircuit[4, LOOKUP_RANGE]):
    """Enables the range check gate without witnessing its value"""

    def synthesize(self, config, layouter):
        config.table.load(layouter)
        layouter.assign_region("enable only", lambda region: config.q_range_check.enable(region, 0))


def test_format_value():

    p = BN254_SCALAR_FIELD
    assert format_value(0, p) == "0"
    assert format_value(1, p) == "1"
    assert format_value(p - 1, p) == "-1"
    assert format_value(16, p) == "0x10"


def test_simple_range_check():

    for v in range(RANGE):
        circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](value=Value.known(v))
        prover = MockProver.run(K, circuit, [[]])
        assert prover.verify() == []


def test_simple_range_check_out_of_range():

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](value=Value.known(RANGE))
    prover = MockProver.run(K, circuit, [[]])

    assert prover.verify() == [
        ConstraintNotSatisfied(
            constraint=Constraint((0, "range check"), 0, "range check"),
            location=FailureLocation.in_region((1, "Assign value for simple range check"), 0),
            cell_values=(((Column(0, Advice), 0), "0x10"),),
        )
    ]

    with pytest.raises(AssertionError):
        prover.assert_satisfied()


@pytest.mark.parametrize("v", [RANGE + 1, 1 << 20, BN254_SCALAR_FIELD - 1])
def test_simple_range_check_rejects(v):

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](value=Value.known(v))
    failures = MockProver.run(K, circuit, [[]]).verify()

    assert len(failures) == 1
    assert isinstance(failures[0], ConstraintNotSatisfied)
    assert failures[0].cell_values[0][1] == format_value(v % BN254_SCALAR_FIELD, BN254_SCALAR_FIELD)


def test_lookup_range_check():

    for v in range(LOOKUP_RANGE):
        circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE].with_lookup(
            value=Value.known(7), lookup_value=Value.known(v)
        )
        prover = MockProver.run(K, circuit, [[]])
        assert prover.verify() == []


def test_lookup_range_check_out_of_range():

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE].with_lookup(
        value=Value.known(7), lookup_value=Value.known(9)
    )
    prover = MockProver.run(K, circuit, [[]])

    assert prover.verify() == [
        dev.Lookup(
            name="range check lookup",
            lookup_index=0,
            location=FailureLocation.in_region((2, "Assign value for lookup range check"), 0),
        )
    ]


def test_lookup_value_ignored_by_default():

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](
        value=Value.known(7), lookup_value=Value.known(100)
    )
    prover = MockProver.run(K, circuit, [[]])

    assert prover.verify() == []
    assert len(prover.regions) == 2


def test_table_contents():

    for lookup_range in (1, LOOKUP_RANGE, 32):
        circuit = RangeCheckCircuit[RANGE, lookup_range](value=Value.known(3))
        prover = MockProver.run(5, circuit, [[]])

        column = prover.cs.table_columns[0].inner
        values = prover.fixed[column.index]

        assert values[:lookup_range] == list(range(lookup_range))
        assert values[lookup_range:] == [0] * (32 - lookup_range)
        assert prover.regions[0].name == "load range-check table"


def test_cell_not_assigned():

    prover = MockProver.run(K, UnassignedRangeCheck(), [[]])

    assert prover.verify() == [
        CellNotAssigned(
            gate=(0, "range check"),
            region=(1, "enable only"),
            gate_offset=0,
            column=Column(0, Advice),
            offset=0,
        )
    ]


def test_public_input():

    prover = MockProver.run(K, PublicRangeCheck(value=Value.known(7)), [[7]])
    assert prover.verify() == []

    prover = MockProver.run(K, PublicRangeCheck(value=Value.known(7)), [[5]])
    assert prover.verify() == [
        Permutation(
            column=Column(0, Advice),
            location=FailureLocation.in_region((1, "Assign value for simple range check"), 0),
        )
    ]


def test_copy_requires_equality():

    class NoEquality(RangeCheckCircuit[RANGE, LOOKUP_RANGE]):
        synthesize = PublicRangeCheck.synthesize

    with pytest.raises(AssignmentError):
        MockProver.run(K, NoEquality(value=Value.known(7)), [[7]])


def test_wrong_number_of_instance_columns():

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](value=Value.known(7))

    with pytest.raises(InvalidParameters):
        MockProver.run(K, circuit, [])


def test_bls12_381_field():

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](value=Value.known(BLS12_381_SCALAR_FIELD - 1))
    prover = MockProver.run(5, circuit, [[]], modulus=BLS12_381_SCALAR_FIELD)

    failures = prover.verify()
    assert len(failures) == 1
    assert failures[0].cell_values[0][1] == "-1"

    circuit = RangeCheckCircuit[RANGE, LOOKUP_RANGE](value=Value.known(15))
    assert MockProver.run(5, circuit, [[]], modulus=BLS12_381_SCALAR_FIELD).verify() == []
