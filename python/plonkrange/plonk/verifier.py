import hashlib
import logging

from ..arithmetization.constraint_system import ConstraintSystem
from ..commitment import MultiOpeningQuery
from ..ecc import EllipticCurve
from ..errors import InvalidParameters, TranscriptError
from ..polynomial import EvaluationDomain
from ..transcript import Blake2bRead
from ..utils import Timer
from .lookup import LookupArgument
from .permutation import PermutationArgument
from .setup import Params
from .vanishing import combine, constraint_terms, quotient_chunks, unconverted_selector

logger = logging.getLogger(__name__)


class VerifyingKey:

    def __init__(
        self,
        k: int,
        cs: ConstraintSystem,
        fixed_commitments: list,
        permutation_commitments: list,
        curve: str = "BN254",
    ):
        self.E = EllipticCurve(curve)
        self.order = self.E.order
        self.curve = curve
        self.k = k
        self.n = 1 << k
        self.cs = cs
        self.domain = EvaluationDomain(k, self.order)
        self.fixed_commitments = fixed_commitments
        self.permutation_commitments = permutation_commitments
        self.num_chunks = quotient_chunks(cs.degree(), self.n)
        self.digest = self.__compute_digest()

    def __compute_digest(self):
        hasher = hashlib.blake2b(digest_size=64, person=b"plonkrange_VKey")
        hasher.update(self.curve.encode())
        hasher.update(self.k.to_bytes(4, "little"))
        hasher.update(self.cs.pinned())
        for commitment in self.fixed_commitments + self.permutation_commitments:
            hasher.update(commitment.to_bytes())
        return hasher.digest()

    def hash_into(self, transcript):
        transcript.common_bytes(self.digest)

    def deltas(self) -> list:
        return [
            pow(self.domain.delta, i, self.order)
            for i in range(len(self.cs.permutation_columns))
        ]


def check_instances(cs: ConstraintSystem, instances: list, n: int) -> list:
    """Pad every instance column to `n` rows"""
    if len(instances) != cs.num_instance_columns:
        raise InvalidParameters(
            f"expected {cs.num_instance_columns} instance columns, got {len(instances)}"
        )
    padded = []
    for values in instances:
        if len(values) > n:
            raise InvalidParameters("instance column is larger than the circuit")
        column = [v % cs.modulus for v in values]
        padded.append(column + [0] * (n - len(column)))
    return padded


def verify_proof(params: Params, vk: VerifyingKey, instances: list, transcript: Blake2bRead) -> bool:
    """
    Verify a proof read from `transcript` against `vk` and the public
    `instances` (one list of field elements per instance column).

    Returns `False` when the proof is invalid and raises `TranscriptError`
    when the proof bytes are malformed.
    """
    logger.info("Verifying proof")

    if params.curve != vk.curve or params.k != vk.k:
        raise InvalidParameters("parameters do not match the verifying key")

    cs = vk.cs
    p = vk.order
    domain = vk.domain
    n = vk.n
    instance_values = check_instances(cs, instances, n)

    vk.hash_into(transcript)
    for column in instance_values:
        for value in column:
            transcript.common_scalar(value)

    with Timer("verifier: read commitments"):
        advice_commitments = [transcript.read_point() for _ in range(cs.num_advice_columns)]
        theta = transcript.squeeze_challenge()

        permuted_commitments = [
            (transcript.read_point(), transcript.read_point()) for _ in cs.lookups
        ]
        beta = transcript.squeeze_challenge()
        gamma = transcript.squeeze_challenge()

        permutation_z_commitment = None
        if cs.permutation_columns:
            permutation_z_commitment = transcript.read_point()
        lookup_z_commitments = [transcript.read_point() for _ in cs.lookups]
        y = transcript.squeeze_challenge()

        h_commitments = [transcript.read_point() for _ in range(vk.num_chunks)]
        x = transcript.squeeze_challenge()

    x_next = domain.rotate(x, 1)
    x_prev = domain.rotate(x, -1)
    query = MultiOpeningQuery()

    def read_evaluation(commitment, point):
        evaluation = transcript.read_scalar()
        query.verifier_query(commitment, point, evaluation)
        return evaluation

    advice_evals = {}
    for column, rotation in cs.advice_queries:
        advice_evals[(column, rotation)] = read_evaluation(
            advice_commitments[column.index], domain.rotate(x, rotation)
        )

    fixed_evals = {}
    for column, rotation in cs.fixed_queries:
        fixed_evals[(column, rotation)] = read_evaluation(
            vk.fixed_commitments[column.index], domain.rotate(x, rotation)
        )

    instance_evals = {}
    for column, rotation in cs.instance_queries:
        instance_evals[(column, rotation)] = domain.barycentric_eval(
            instance_values[column.index], domain.rotate(x, rotation)
        )

    permutation = None
    if cs.permutation_columns:
        sigma_evals = [read_evaluation(c, x) for c in vk.permutation_commitments]
        z = read_evaluation(permutation_z_commitment, x)
        z_next = read_evaluation(permutation_z_commitment, x_next)
        values = []
        for column in cs.permutation_columns:
            evals = {
                "advice": advice_evals,
                "fixed": fixed_evals,
                "instance": instance_evals,
            }[column.column_type.value]
            values.append(evals[(column, 0)])
        permutation = PermutationArgument(z, z_next, values, sigma_evals)

    lookups = []
    for (input_commitment, table_commitment), z_commitment in zip(
        permuted_commitments, lookup_z_commitments
    ):
        z = read_evaluation(z_commitment, x)
        z_next = read_evaluation(z_commitment, x_next)
        permuted_input = read_evaluation(input_commitment, x)
        permuted_input_prev = read_evaluation(input_commitment, x_prev)
        permuted_table = read_evaluation(table_commitment, x)
        lookups.append(
            LookupArgument(z, z_next, permuted_input, permuted_input_prev, permuted_table)
        )

    h_evals = [read_evaluation(c, x) for c in h_commitments]

    def evaluate(expression):
        return expression.evaluate(
            constant=lambda c: c % p,
            selector_column=unconverted_selector,
            fixed_column=lambda q: fixed_evals[(q.column, int(q.rotation))],
            advice_column=lambda q: advice_evals[(q.column, int(q.rotation))],
            instance_column=lambda q: instance_evals[(q.column, int(q.rotation))],
            negated=lambda a: -a % p,
            sum_=lambda a, b: (a + b) % p,
            product=lambda a, b: a * b % p,
            scaled=lambda a, f: a * f % p,
        )

    l0 = domain.lagrange_evals(x, [0])[0]
    terms = constraint_terms(
        cs, evaluate, l0, x, theta, beta, gamma, vk.deltas(), permutation, lookups
    )
    expected = combine(terms, y, p)

    # h(x) = sum(h_i(x) * x^(n * i))
    x_n = pow(x, n, p)
    h_eval = 0
    for chunk in reversed(h_evals):
        h_eval = (h_eval * x_n + chunk) % p

    if expected != h_eval * domain.vanishing_eval(x) % p:
        logger.info("Proof rejected: vanishing argument does not hold")
        return False

    with Timer("verifier: multi-open"):
        valid = params.kzg().multi_verify(query, transcript)

    if not transcript.is_consumed():
        raise TranscriptError("proof has trailing bytes")

    if not valid:
        logger.info("Proof rejected: opening proof does not verify")
    return valid
