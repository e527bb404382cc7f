import logging

from ..arithmetization.circuit import Assignment, Circuit
from ..arithmetization.constraint_system import ConstraintSystem
from ..commitment import MultiOpeningQuery
from ..errors import ConstraintSystemFailure, InvalidParameters, NotEnoughRowsAvailable
from ..polynomial import Polynomial
from ..transcript import Blake2bWrite
from ..utils import Timer, get_random_int
from ..value import Value
from .lookup import LookupArgument, compress, lookup_product, permute_expression_pair
from .permutation import PermutationArgument, permutation_product
from .setup import Params
from .vanishing import combine, constraint_terms, unconverted_selector
from .verifier import VerifyingKey, check_instances

logger = logging.getLogger(__name__)


class ProvingKey:
    def __init__(
        self,
        vk: VerifyingKey,
        fixed_values: list,
        fixed_polys: list,
        permutation_values: list,
        permutation_polys: list,
    ):
        self.vk = vk
        self.fixed_values = fixed_values
        self.fixed_polys = fixed_polys
        self.permutation_values = permutation_values
        self.permutation_polys = permutation_polys

        l0 = [1] + [0] * (vk.n - 1)
        self.l0 = vk.domain.interpolate(l0)

    def get_vk(self) -> VerifyingKey:
        return self.vk


class WitnessCollection(Assignment):
    """Assignment recording the advice values of a proving pass"""

    def __init__(self, k: int, num_advice_columns: int, instances: list, p: int):
        super().__init__(k)
        self.p = p
        self.advice = [[0] * self.n for _ in range(num_advice_columns)]
        self.instances = instances

    def enter_region(self, name):
        pass

    def exit_region(self):
        pass

    def enable_selector(self, name, selector, row):
        self.check_row(row)

    def query_instance(self, column, row) -> Value:
        self.check_row(row)
        return Value.known(self.instances[column.index][row])

    def assign_advice(self, name, column, row, to: Value):
        self.check_row(row)
        self.advice[column.index][row] = to.assign() % self.p

    def assign_fixed(self, name, column, row, to):
        self.check_row(row)

    def copy(self, left_column, left_row, right_column, right_row):
        pass

    def fill_from_row(self, column, from_row, to):
        pass


class Prover:
    def __init__(self, params: Params, pk: ProvingKey, rng=None):
        self.params = params
        self.pk = pk
        self.vk = pk.vk
        self.cs = pk.vk.cs
        self.domain = pk.vk.domain
        self.n = pk.vk.n
        self.order = pk.vk.order
        self.kzg = params.kzg()
        self.rng = rng

    def blind(self, poly: Polynomial, count: int) -> Polynomial:
        """Add a random multiple of `X^n - 1`, leaving the values over H unchanged"""
        blinding = Polynomial(
            [get_random_int(self.order - 1, self.rng) for _ in range(count)], self.order
        )
        return poly + blinding.multiply_by_vanishing_poly(self.n)

    def synthesize(self, circuit: Circuit, instance_values: list) -> list:
        meta = ConstraintSystem(self.order)
        config = circuit.configure(meta)
        if meta.num_advice_columns != self.cs.num_advice_columns:
            raise InvalidParameters("circuit does not match the proving key")

        witness = WitnessCollection(
            self.vk.k, meta.num_advice_columns, instance_values, self.order
        )
        circuit.FLOOR_PLANNER.synthesize(witness, circuit, config)
        return witness.advice

    def polynomial_evaluator(self, advice_polys, fixed_polys, instance_polys):
        p = self.order
        rotated = {}

        def query(polys, q):
            key = (q.column, int(q.rotation))
            if key not in rotated:
                factor = self.domain.rotate(1, q.rotation)
                rotated[key] = polys[q.column.index].scale(factor)
            return rotated[key]

        def evaluate(expression):
            return expression.evaluate(
                constant=lambda c: Polynomial([c], p),
                selector_column=unconverted_selector,
                fixed_column=lambda q: query(fixed_polys, q),
                advice_column=lambda q: query(advice_polys, q),
                instance_column=lambda q: query(instance_polys, q),
                negated=lambda a: -a,
                sum_=lambda a, b: a + b,
                product=lambda a, b: a * b,
                scaled=lambda a, f: a * f,
            )

        return evaluate

    def prove(self, circuit: Circuit, instances: list, transcript: Blake2bWrite):

        cs = self.cs
        domain = self.domain
        p = self.order
        n = self.n

        instance_values = check_instances(cs, instances, n)
        instance_polys = [domain.interpolate(values) for values in instance_values]

        self.vk.hash_into(transcript)
        for column in instance_values:
            for value in column:
                transcript.common_scalar(value)

        #########################################################################################
        # ROUND 1: advice columns
        #########################################################################################

        with Timer("prover: advice"):
            advice_values = self.synthesize(circuit, instance_values)

            advice_polys = [self.blind(domain.interpolate(v), 2) for v in advice_values]
            advice_commitments = []
            for poly in advice_polys:
                commitment = self.kzg.commit(poly)
                transcript.write_point(commitment)
                advice_commitments.append(commitment)

            theta = transcript.squeeze_challenge()

        evaluate = self.polynomial_evaluator(advice_polys, self.pk.fixed_polys, instance_polys)

        #########################################################################################
        # ROUND 2: lookup permuted columns
        #########################################################################################

        with Timer("prover: lookup permutations"):
            compressed = []
            permuted = []
            for lookup in cs.lookups:
                compressed_input = domain.evaluate(
                    compress([evaluate(e) for e in lookup.input_expressions], theta)
                )
                compressed_table = domain.evaluate(
                    compress([evaluate(e) for e in lookup.table_expressions], theta)
                )
                permuted_input, permuted_table = permute_expression_pair(
                    compressed_input, compressed_table, p
                )

                input_poly = self.blind(domain.interpolate(permuted_input), 2)
                table_poly = self.blind(domain.interpolate(permuted_table), 2)
                input_commitment = self.kzg.commit(input_poly)
                table_commitment = self.kzg.commit(table_poly)
                transcript.write_point(input_commitment)
                transcript.write_point(table_commitment)

                compressed.append((compressed_input, compressed_table))
                permuted.append(
                    (permuted_input, permuted_table, input_poly, table_poly,
                     input_commitment, table_commitment)
                )

            beta = transcript.squeeze_challenge()
            gamma = transcript.squeeze_challenge()

        #########################################################################################
        # ROUND 3: grand products
        #########################################################################################

        with Timer("prover: grand products"):
            permutation = None
            permutation_z_commitment = None
            if cs.permutation_columns:
                values = []
                column_polys = []
                for column in cs.permutation_columns:
                    if column.column_type.value == "advice":
                        values.append(advice_values[column.index])
                        column_polys.append(advice_polys[column.index])
                    elif column.column_type.value == "fixed":
                        values.append(self.pk.fixed_values[column.index])
                        column_polys.append(self.pk.fixed_polys[column.index])
                    else:
                        values.append(instance_values[column.index])
                        column_polys.append(instance_polys[column.index])

                z_values = permutation_product(
                    values, self.pk.permutation_values, domain, beta, gamma
                )
                z_poly = self.blind(domain.interpolate(z_values), 3)
                permutation_z_commitment = self.kzg.commit(z_poly)
                transcript.write_point(permutation_z_commitment)

                permutation = PermutationArgument(
                    z_poly,
                    z_poly.scale(domain.omega),
                    column_polys,
                    self.pk.permutation_polys,
                )

            lookups = []
            lookup_z = []
            for (compressed_input, compressed_table), entry in zip(compressed, permuted):
                permuted_input, permuted_table, input_poly, table_poly = entry[:4]
                z_values = lookup_product(
                    compressed_input, compressed_table, permuted_input, permuted_table,
                    beta, gamma, p,
                )
                z_poly = self.blind(domain.interpolate(z_values), 3)
                z_commitment = self.kzg.commit(z_poly)
                transcript.write_point(z_commitment)

                lookup_z.append((z_poly, z_commitment))
                lookups.append(
                    LookupArgument(
                        z_poly,
                        z_poly.scale(domain.omega),
                        input_poly,
                        input_poly.scale(domain.omega_inv),
                        table_poly,
                    )
                )

            y = transcript.squeeze_challenge()

        #########################################################################################
        # ROUND 4: quotient
        #########################################################################################

        with Timer("prover: quotient"):
            x_poly = Polynomial([0, 1], p)
            terms = constraint_terms(
                cs, evaluate, self.pk.l0, x_poly, theta, beta, gamma,
                self.vk.deltas(), permutation, lookups,
            )
            numerator = combine(terms, y, p)

            h_poly, remainder = numerator.divide_by_vanishing_poly(n)
            if not remainder.is_zero():
                raise ConstraintSystemFailure("witness does not satisfy the constraint system")

            if h_poly.degree() >= n * self.vk.num_chunks:
                raise InvalidParameters("quotient does not fit in the expected number of pieces")
            h_pieces = h_poly.split(n, self.vk.num_chunks)

            h_commitments = []
            for piece in h_pieces:
                commitment = self.kzg.commit(piece)
                transcript.write_point(commitment)
                h_commitments.append(commitment)

            x = transcript.squeeze_challenge()

        #########################################################################################
        # ROUND 5: evaluations and opening
        #########################################################################################

        with Timer("prover: opening"):
            x_next = domain.rotate(x, 1)
            x_prev = domain.rotate(x, -1)
            query = MultiOpeningQuery()

            def write_evaluation(poly, commitment, point):
                query.add_polynomial(poly, commitment)
                transcript.write_scalar(query.prover_query(commitment, point))

            for column, rotation in cs.advice_queries:
                write_evaluation(
                    advice_polys[column.index],
                    advice_commitments[column.index],
                    domain.rotate(x, rotation),
                )

            for column, rotation in cs.fixed_queries:
                write_evaluation(
                    self.pk.fixed_polys[column.index],
                    self.vk.fixed_commitments[column.index],
                    domain.rotate(x, rotation),
                )

            if permutation is not None:
                for poly, commitment in zip(
                    self.pk.permutation_polys, self.vk.permutation_commitments
                ):
                    write_evaluation(poly, commitment, x)
                write_evaluation(permutation.z, permutation_z_commitment, x)
                write_evaluation(permutation.z, permutation_z_commitment, x_next)

            for (z_poly, z_commitment), entry in zip(lookup_z, permuted):
                input_poly, table_poly, input_commitment, table_commitment = entry[2:]
                write_evaluation(z_poly, z_commitment, x)
                write_evaluation(z_poly, z_commitment, x_next)
                write_evaluation(input_poly, input_commitment, x)
                write_evaluation(input_poly, input_commitment, x_prev)
                write_evaluation(table_poly, table_commitment, x)

            for piece, commitment in zip(h_pieces, h_commitments):
                write_evaluation(piece, commitment, x)

            self.kzg.multi_open(query, transcript)


def create_proof(
    params: Params,
    pk: ProvingKey,
    circuit: Circuit,
    instances: list,
    transcript: Blake2bWrite,
    rng=None,
):
    """
    Prove that `circuit`, synthesized with its witness, satisfies the
    constraint system of `pk` with the public `instances`. The proof is
    written to `transcript`; `transcript.finalize()` returns its bytes.
    """
    logger.info("Generating proof")

    if params.curve != pk.vk.curve or params.k != pk.vk.k:
        raise InvalidParameters("parameters do not match the proving key")
    if params.n < pk.vk.cs.minimum_rows():
        raise NotEnoughRowsAvailable(params.k)

    Prover(params, pk, rng).prove(circuit, instances, transcript)
