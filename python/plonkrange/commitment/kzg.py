from ..ecc import EllipticCurve
from ..errors import InvalidParameters
from ..polynomial import Polynomial, lagrange_interpolation
from ..transcript import Blake2bRead, Blake2bWrite
from ..utils import get_random_int
from .base import MultiOpeningQuery, PolynomialCommitmentScheme


class KZG(PolynomialCommitmentScheme):

    def __init__(self, max_degree, group):
        super().__init__(max_degree, group)
        self.E = EllipticCurve(self.group)
        self.order = self.E.order
        self.name = "KZG"
        self.G1_tau = None
        self.G2_tau = None

    @classmethod
    def from_srs(cls, g1_tau: list, g2_tau, group: str):
        """Reuse powers of tau coming from another setup"""
        kzg = cls(len(g1_tau) - 1, group)
        kzg.G1_tau = list(g1_tau)
        kzg.G2_tau = g2_tau
        kzg.is_setup = True
        return kzg

    def setup(self, rng=None):

        tau = get_random_int(self.order - 1, rng)
        power_of_tau = [pow(tau, i, self.order) for i in range(self.degree + 1)]

        self.G1_tau = self.E.batch_mul(self.E.G1(), power_of_tau)
        self.G2_tau = self.E.G2() * tau
        self.is_setup = True

    def commit(self, polynomial: Polynomial):

        assert self.G1_tau, "Trusted setup has not been run"

        coeffs = polynomial.coeffs()
        if len(coeffs) > len(self.G1_tau):
            raise InvalidParameters(
                f"polynomial of degree {len(coeffs) - 1} exceeds the setup degree {self.degree}"
            )

        return self.E.multiexp(self.G1_tau, coeffs)

    def open(self, polynomial: Polynomial, point: int):

        assert self.G1_tau, "Trusted setup has not been run"

        evaluation = polynomial(point)
        divisor_poly = Polynomial([-point % self.order, 1], self.order)
        quotient_poly, remainder = (polynomial - evaluation) / divisor_poly
        if not remainder.is_zero():
            raise ValueError("Given polynomial is not divided to zero")

        proof = self.commit(quotient_poly)

        return proof, evaluation

    def verify(self, commitment, proof, point, evaluation):

        assert self.G1_tau, "Trusted setup has not been run"

        lhs = self.E.pairing(proof, self.G2_tau - self.E.G2() * point)
        rhs = self.E.pairing(commitment - self.E.G1() * evaluation, self.E.G2())

        return lhs == rhs

    def _combine(self, points_query: MultiOpeningQuery, x1: int, is_verifier=False):
        """
        Combine the polynomials (or commitments) opened at the same point set
        with powers of `x1`, and interpolate the combined evaluations.
        """
        combined = []
        r_polys = []
        points_list = []
        for points, keys in points_query.point_sets():
            if not is_verifier:
                q = Polynomial([0], self.order)
                for i, key in enumerate(keys):
                    q += points_query.to_polynomial(key) * pow(x1, i, self.order)
            else:
                q = self.E.identity()
                for i, key in enumerate(keys):
                    q += points_query.to_commitment(key) * pow(x1, i, self.order)

            ys = []
            for point in points:
                evaluations = [
                    pow(x1, j, self.order) * points_query.get_evaluation(key, point)
                    for j, key in enumerate(keys)
                ]
                ys.append(sum(evaluations) % self.order)

            combined.append(q)
            r_polys.append(lagrange_interpolation(list(points), ys, self.order))
            points_list.append(points)

        return combined, r_polys, points_list

    def multi_open(self, points_query: MultiOpeningQuery, transcript: Blake2bWrite):
        """
        Implementation based on Multipoint opening argument
        (https://zcash.github.io/halo2/design/proving-system/multipoint-opening.html)

        The evaluations themselves are expected to be in the transcript already.
        """

        assert self.G1_tau, "Trusted setup has not been run"

        x1 = transcript.squeeze_challenge()
        x2 = transcript.squeeze_challenge()

        # group polynomials according to their evaluation points
        q_polys, r_polys, points_list = self._combine(points_query, x1)

        f_poly = Polynomial([0], self.order)
        for i, points in enumerate(points_list):
            divisor = Polynomial([1], self.order)
            for point in points:
                divisor *= Polynomial([-point % self.order, 1], self.order)

            quotient, remainder = (q_polys[i] - r_polys[i]) / divisor
            assert remainder.is_zero()

            f_poly += quotient * pow(x2, i, self.order)

        transcript.write_point(self.commit(f_poly))
        x3 = transcript.squeeze_challenge()

        for q in q_polys:
            transcript.write_scalar(q(x3))
        x4 = transcript.squeeze_challenge()

        final_poly = f_poly
        for i, poly in enumerate(q_polys):
            final_poly += poly * pow(x4, i + 1, self.order)

        opening_proof, _ = self.open(final_poly, x3)
        transcript.write_point(opening_proof)

    def multi_verify(self, points_query: MultiOpeningQuery, transcript: Blake2bRead):

        assert self.G1_tau, "Trusted setup has not been run"

        x1 = transcript.squeeze_challenge()
        x2 = transcript.squeeze_challenge()

        q_commitments, r_polys, points_list = self._combine(points_query, x1, True)

        f_commitment = transcript.read_point()
        x3 = transcript.squeeze_challenge()

        q_polys_x3 = [transcript.read_scalar() for _ in q_commitments]
        x4 = transcript.squeeze_challenge()

        opening_proof = transcript.read_point()

        # construct f_poly(x3)
        f_poly_x3 = 0
        for i, points in enumerate(points_list):
            denominator = 1
            for point in points:
                denominator = denominator * (x3 - point) % self.order

            numerator = (q_polys_x3[i] - r_polys[i](x3)) % self.order

            f_poly_x3 += (
                pow(x2, i, self.order)
                * numerator
                * pow(denominator, -1, self.order)
                % self.order
            )

        f_poly_x3 %= self.order

        # construct final_commitment
        final_commitment = f_commitment
        for i, commitment in enumerate(q_commitments):
            final_commitment += commitment * pow(x4, i + 1, self.order)

        # final_poly(x3) = f_poly(x3) + x4^1 * q1(x3) + x4^2 * q2(x3) + ...
        final_poly_x3 = f_poly_x3
        for i, q in enumerate(q_polys_x3):
            final_poly_x3 += pow(x4, i + 1, self.order) * q
        final_poly_x3 %= self.order

        # e(proof, g2 * tau - g2 * x3) == e(final_commitment - g1 * final_poly_eval, g2)
        return self.verify(final_commitment, opening_proof, x3, final_poly_x3)
