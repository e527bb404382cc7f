import logging

from ..arithmetization.circuit import Assignment, Circuit
from ..arithmetization.constraint_system import ConstraintSystem
from ..errors import InvalidParameters, NotEnoughRowsAvailable
from ..polynomial import EvaluationDomain
from ..utils import Timer
from ..value import Value
from .permutation import PermutationAssembly
from .prover import ProvingKey
from .setup import Params
from .verifier import VerifyingKey

logger = logging.getLogger(__name__)


class Assembly(Assignment):
    """
    Assignment recording the fixed part of a circuit: fixed columns,
    selectors and equality constraints. Advice values are ignored.
    """

    def __init__(self, k: int, cs: ConstraintSystem):
        super().__init__(k)
        self.p = cs.modulus
        self.fixed = [[0] * self.n for _ in range(cs.num_fixed_columns)]
        self.selectors = [[False] * self.n for _ in range(cs.num_selectors)]
        self.permutation = PermutationAssembly(self.n, cs.permutation_columns)

    def enter_region(self, name):
        pass

    def exit_region(self):
        pass

    def enable_selector(self, name, selector, row):
        self.check_row(row)
        self.selectors[selector.index][row] = True

    def query_instance(self, column, row) -> Value:
        self.check_row(row)
        return Value.unknown()

    def assign_advice(self, name, column, row, to):
        self.check_row(row)

    def assign_fixed(self, name, column, row, to: Value):
        self.check_row(row)
        self.fixed[column.index][row] = to.assign() % self.p

    def copy(self, left_column, left_row, right_column, right_row):
        self.check_row(left_row)
        self.check_row(right_row)
        self.permutation.copy(left_column, left_row, right_column, right_row)

    def fill_from_row(self, column, from_row, to: Value):
        value = to.assign() % self.p
        for row in range(from_row, self.usable_rows):
            self.fixed[column.index][row] = value


def _assemble(params: Params, circuit: Circuit):
    cs = ConstraintSystem(params.order)
    config = circuit.configure(cs)

    if params.n < cs.minimum_rows():
        raise NotEnoughRowsAvailable(params.k)

    assembly = Assembly(params.k, cs)
    circuit.FLOOR_PLANNER.synthesize(assembly, circuit.without_witnesses(), config)

    fixed_values = assembly.fixed + cs.directly_convert_selectors_to_fixed(assembly.selectors)
    return cs, fixed_values, assembly.permutation


def keygen_vk(params: Params, circuit: Circuit) -> VerifyingKey:
    """
    Generate the verifying key of `circuit`. Only the shape of the circuit
    is used: it is synthesized without witnesses.
    """
    logger.info("Generating verification key")

    with Timer("keygen_vk"):
        cs, fixed_values, permutation = _assemble(params, circuit)
        domain = EvaluationDomain(params.k, params.order)
        kzg = params.kzg()

        fixed_commitments = [
            kzg.commit(domain.interpolate(values)) for values in fixed_values
        ]
        permutation_commitments = [
            kzg.commit(domain.interpolate(values))
            for values in permutation.build_sigma(domain)
        ]

    return VerifyingKey(
        params.k, cs, fixed_commitments, permutation_commitments, params.curve
    )


def keygen_pk(params: Params, vk: VerifyingKey, circuit: Circuit) -> ProvingKey:
    """Generate the proving key of `circuit` from its verifying key"""
    logger.info("Generating proving key from verification key")

    if params.curve != vk.curve or params.k != vk.k:
        raise InvalidParameters("parameters do not match the verifying key")

    with Timer("keygen_pk"):
        cs, fixed_values, permutation = _assemble(params, circuit)
        if cs.digest() != vk.cs.digest():
            raise InvalidParameters("circuit does not match the verifying key")

        domain = vk.domain
        fixed_polys = [domain.interpolate(values) for values in fixed_values]
        permutation_values = permutation.build_sigma(domain)
        permutation_polys = [domain.interpolate(values) for values in permutation_values]

    return ProvingKey(vk, fixed_values, fixed_polys, permutation_values, permutation_polys)
