from abc import ABC, abstractmethod

from ..ecc import Curve
from ..errors import TranscriptError
from ..polynomial import Polynomial


class MultiOpeningQuery:
    """
    Set of (commitment, point, evaluation) claims opened together.

    Entries are keyed by the encoded commitment and kept in insertion order,
    so a prover and a verifier that register the same claims in the same
    order derive the same grouping.
    """

    def __init__(self):
        self.polynomials = {}
        self.commitments = {}
        self.opening_points = {}
        self.evaluations = {}

    def add_polynomial(self, polynomial: Polynomial, commitment: Curve):
        key = commitment.to_bytes()
        if key not in self.commitments:
            self.polynomials[key] = polynomial
            self.commitments[key] = commitment

    def prover_query(self, commitment: Curve, point: int) -> int:
        key = commitment.to_bytes()
        evaluation = self.polynomials[key](point)
        self._record(key, point, evaluation)
        return evaluation

    def verifier_query(self, commitment: Curve, point: int, evaluation: int):
        """
        Register a claimed evaluation read from a proof.

        Raises `TranscriptError` when the proof claims two different
        evaluations of one commitment at the same point.
        """
        key = commitment.to_bytes()
        if key not in self.commitments:
            self.commitments[key] = commitment
        if not self._record(key, point, evaluation):
            raise TranscriptError(
                f"conflicting evaluation claims for commitment {key.hex()[:16]}..."
            )

    def _record(self, key, point, evaluation) -> bool:
        """Record a claim, returning `False` if it contradicts a previous one"""
        points = self.opening_points.setdefault(key, [])
        evaluations = self.evaluations.setdefault(key, {})
        if point in evaluations:
            return evaluations[point] == evaluation
        points.append(point)
        evaluations[point] = evaluation
        return True

    def to_polynomial(self, key: bytes) -> Polynomial:
        return self.polynomials[key]

    def to_commitment(self, key: bytes) -> Curve:
        return self.commitments[key]

    def get_evaluation(self, key: bytes, point: int) -> int:
        return self.evaluations[key][point]

    def point_sets(self):
        """
        Group commitments by the tuple of points they are opened at.

        Example:
        a(x), b(x), c(y), d(y) => {a, b} {c, d}
        a(x), b(x), c(x), c(y) => {a, b} {c}
        """
        groups = {}
        for key, points in self.opening_points.items():
            groups.setdefault(tuple(points), []).append(key)
        return list(groups.items())


class PolynomialCommitmentScheme(ABC):

    def __init__(self, max_degree, group):
        self.degree = max_degree
        self.group = group
        self.order = None
        self.name = ""
        self.is_setup = False

    @abstractmethod
    def setup(self):
        raise NotImplementedError()

    @abstractmethod
    def commit(self, polynomial):
        raise NotImplementedError()

    @abstractmethod
    def open(self, polynomial, point):
        raise NotImplementedError()

    @abstractmethod
    def verify(self, commitment, proof, point, evaluation):
        raise NotImplementedError()

    @abstractmethod
    def multi_open(self, points_query: MultiOpeningQuery, transcript):
        raise NotImplementedError()

    @abstractmethod
    def multi_verify(self, points_query: MultiOpeningQuery, transcript):
        raise NotImplementedError()
