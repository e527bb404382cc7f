from enum import Enum
from typing import Sequence

from joblib import Parallel, delayed
from py_ecc import optimized_bls12_381, optimized_bn128
from py_ecc.fields import (
    optimized_bn128_FQ,
    optimized_bn128_FQ2,
    optimized_bls12_381_FQ,
    optimized_bls12_381_FQ2,
)

from .errors import TranscriptError
from .utils import get_n_jobs, get_parallel_threshold, split_list


class CurveType(Enum):
    BN128 = optimized_bn128
    BN254 = optimized_bn128
    ALT_BN128 = optimized_bn128
    BLS12_381 = optimized_bls12_381


class CurveFQ(Enum):
    BN128 = optimized_bn128_FQ
    BN254 = optimized_bn128_FQ
    ALT_BN128 = optimized_bn128_FQ
    BLS12_381 = optimized_bls12_381_FQ


class CurveFQ2(Enum):
    BN128 = optimized_bn128_FQ2
    BN254 = optimized_bn128_FQ2
    ALT_BN128 = optimized_bn128_FQ2
    BLS12_381 = optimized_bls12_381_FQ2


class CurvePointSize(Enum):
    """Size in bytes of one base field coordinate"""

    BN128 = 32
    BN254 = 32
    ALT_BN128 = 32
    BLS12_381 = 48


def _multiexp_chunk(name, points, scalars):
    curve = CurveType[name].value.optimized_curve
    total = None
    for point, scalar in zip(points, scalars):
        if scalar == 0:
            continue
        term = curve.multiply(point, scalar)
        total = term if total is None else curve.add(total, term)
    return total


class EllipticCurve:
    def __init__(self, curve: str):
        self.name = curve
        self.curve = CurveType[curve].value.optimized_curve
        self.order = self.curve.curve_order
        self.field_modulus = self.curve.field_modulus
        self.point_size = CurvePointSize[curve].value
        self.__pairing = CurveType[curve].value.optimized_pairing.pairing

    def G1(self):
        """
        Return generator G1 of the curve
        """
        return Curve(self.curve.G1, self.name)

    def G2(self):
        """
        Return generator G2 of the curve
        """
        return Curve(self.curve.G2, self.name)

    def identity(self):
        """
        Return the point at infinity of G1
        """
        return Curve(self.curve.Z1, self.name)

    def pairing(self, a, b):
        """
        Compute pairing, that is `e(a, b)`, where `a in G1` and `b in G2`
        """
        return self.__pairing(b.point, a.point)

    def batch_mul(self, g, s: Sequence[int]):
        """
        Multiply EC point `g` by every scalar of `s`
        """
        return [g * scalar for scalar in s]

    def multiexp(self, g, s: Sequence[int]):
        """
        Perform Multi-Scalar-Multiplication (MSM)
        to compute sum of g[i] * s[i] where g is
        Elliptic Curve point and s is scalar
        from Polynomial coefficients
        """
        assert len(s) <= len(g), "Not enough points for the given scalars"

        scalars = [int(x) % self.order for x in s]
        points = [p.point for p in g[: len(scalars)]]

        if len(scalars) >= get_parallel_threshold():
            n_jobs = get_n_jobs()
            chunk_size = max(1, len(scalars) // 8)
            partials = Parallel(n_jobs=n_jobs)(
                delayed(_multiexp_chunk)(self.name, pts, scl)
                for pts, scl in zip(
                    split_list(points, chunk_size), split_list(scalars, chunk_size)
                )
            )
        else:
            partials = [_multiexp_chunk(self.name, points, scalars)]

        total = self.identity()
        for partial in partials:
            if partial is not None:
                total = total + Curve(partial, self.name)
        return total

    def g1_from_bytes(self, data: bytes):
        """
        Decode an uncompressed G1 point `x || y` (big-endian coordinates)
        """
        size = self.point_size
        if len(data) != 2 * size:
            raise TranscriptError(f"G1 point must be {2 * size} bytes, got {len(data)}")

        x = int.from_bytes(data[:size], "big")
        y = int.from_bytes(data[size:], "big")
        if x == 0 and y == 0:
            return self.identity()
        if x >= self.field_modulus or y >= self.field_modulus:
            raise TranscriptError("G1 coordinate is not a field element")

        fq = CurveFQ[self.name].value
        point = (fq(x), fq(y), fq.one())
        if not self.curve.is_on_curve(point, self.curve.b):
            raise TranscriptError("G1 point is not on the curve")
        return Curve(point, self.name)

    def g2_from_bytes(self, data: bytes):
        """
        Decode an uncompressed G2 point `x0 || x1 || y0 || y1`
        """
        size = self.point_size
        if len(data) != 4 * size:
            raise TranscriptError(f"G2 point must be {4 * size} bytes, got {len(data)}")

        x0, x1, y0, y1 = [
            int.from_bytes(chunk, "big") for chunk in split_list(data, size)
        ]
        if x0 == x1 == y0 == y1 == 0:
            return Curve(self.curve.Z2, self.name)

        fq2 = CurveFQ2[self.name].value
        point = (fq2([x0, x1]), fq2([y0, y1]), fq2.one())
        if not self.curve.is_on_curve(point, self.curve.b2):
            raise TranscriptError("G2 point is not on the curve")
        return Curve(point, self.name)


class Curve:
    """
    Point of G1 or G2 in projective coordinates
    """

    def __init__(self, point, crv: str):
        self.name = crv
        self.curve = CurveType[crv].value.optimized_curve
        self.point = point

    def __add__(self, other):
        if not isinstance(other, Curve):
            raise TypeError(
                f"Addition of {type(self)} with {type(other)} is not allowed"
            )

        return Curve(self.curve.add(self.point, other.point), self.name)

    def __radd__(self, other):
        # allows sum() over points
        if isinstance(other, int) and other == 0:
            return self
        return self.__add__(other)

    def __sub__(self, other):
        return self + (-other)

    def __mul__(self, other):
        if not isinstance(other, int):
            raise TypeError(
                f"Multiplication of {type(self)} with {type(other)} is not allowed"
            )

        scalar = other % self.curve.curve_order
        return Curve(self.curve.multiply(self.point, scalar), self.name)

    def __rmul__(self, other):
        return self.__mul__(other)

    def __neg__(self):
        return Curve(self.curve.neg(self.point), self.name)

    def __eq__(self, other):
        if not isinstance(other, Curve):
            return NotImplemented
        return self.curve.eq(self.point, other.point)

    def __hash__(self):
        return hash(self.to_bytes())

    def __str__(self) -> str:
        if self.is_zero():
            return "Curve(infinity)"
        return f"{self.curve.normalize(self.point)}"

    def __repr__(self) -> str:
        return self.__str__()

    def is_zero(self) -> bool:
        return self.curve.is_inf(self.point)

    def is_g2(self) -> bool:
        return isinstance(self.point[0], CurveFQ2[self.name].value)

    def to_bytes(self) -> bytes:
        """Uncompressed encoding, all-zero for the point at infinity"""
        size = CurvePointSize[self.name].value
        if self.is_g2():
            if self.is_zero():
                return bytes(4 * size)
            x, y = self.curve.normalize(self.point)
            x0, x1 = x.coeffs
            y0, y1 = y.coeffs
            return b"".join(int(c).to_bytes(size, "big") for c in (x0, x1, y0, y1))

        if self.is_zero():
            return bytes(2 * size)
        x, y = self.curve.normalize(self.point)
        return int(x).to_bytes(size, "big") + int(y).to_bytes(size, "big")

    def hex(self) -> str:
        return self.to_bytes().hex()
