from typing import Sequence, Union

# pylint: disable=no-name-in-module
from flint import (
    fmpz_mod_poly,
    fmpz_mod_poly_ctx,
    fmpz_mod_ctx,
)

from .constant import MULTIPLICATIVE_GENERATOR
from .errors import InvalidParameters
from .utils import batch_modinv, is_power_of_two, two_adicity

_POLY_CTX = {}


def _poly_ring(p: int) -> fmpz_mod_poly_ctx:
    ring = _POLY_CTX.get(p)
    if ring is None:
        ring = fmpz_mod_poly_ctx(fmpz_mod_ctx(p))
        _POLY_CTX[p] = ring
    return ring


class Polynomial:
    def __init__(self, arg: Union[Sequence[int], fmpz_mod_poly], p: int):
        """
        Initialize the polynomial with coefficients.

        arg: List of coefficients, where arg[i] is the coefficient of x^i,
             or an existing flint polynomial.
        p: Prime number representing the finite field.
        """
        self.p = int(p)
        if isinstance(arg, fmpz_mod_poly):
            self.poly = arg
        else:
            self.poly = _poly_ring(self.p)([int(c) % self.p for c in arg])

    @classmethod
    def zero(cls, p):
        return cls([0], p)

    def coeffs(self):
        """Return the list of coefficents of the polynomial."""
        coeffs = self.poly.coeffs() or [0]
        return [int(x) for x in coeffs]

    def degree(self):
        """Return the degree of the polynomial, -1 for the zero polynomial."""
        return int(self.poly.degree())

    def is_zero(self):
        """Return the boolean whether the polynomial is equal to zero"""
        return self.poly.is_zero()

    def __bool__(self):
        return not self.is_zero()

    def __eq__(self, other):
        if not isinstance(other, Polynomial):
            return NotImplemented
        return self.p == other.p and self.poly == other.poly

    def __hash__(self):
        return hash((self.p, tuple(self.coeffs())))

    def __str__(self):
        """Return the string representation of the polynomial."""
        return str(self.poly)

    def __repr__(self):
        return self.__str__()

    def _lift(self, other):
        if isinstance(other, Polynomial):
            return other.poly
        if isinstance(other, int):
            return _poly_ring(self.p)([other % self.p])
        return NotImplemented

    def __add__(self, other):
        other = self._lift(other)
        if other is NotImplemented:
            return other
        return Polynomial(self.poly + other, self.p)

    def __radd__(self, other):
        return self.__add__(other)

    def __neg__(self):
        """Negate polynomial coefficients"""
        return Polynomial(-self.poly, self.p)

    def __sub__(self, other):
        other = self._lift(other)
        if other is NotImplemented:
            return other
        return Polynomial(self.poly - other, self.p)

    def __rsub__(self, other):
        other = self._lift(other)
        if other is NotImplemented:
            return other
        return Polynomial(other - self.poly, self.p)

    def __mul__(self, other):
        if isinstance(other, Polynomial):
            return Polynomial(self.poly * other.poly, self.p)
        elif isinstance(other, int):
            return Polynomial(self.poly * (other % self.p), self.p)
        return NotImplemented

    def __rmul__(self, other):
        return self.__mul__(other)

    def __truediv__(self, other):
        """
        Divide two polynomials.
        Return quotient and remainder
        """
        if other.is_zero():
            raise ZeroDivisionError("Division by zero")
        quotient, remainder = divmod(self.poly, other.poly)
        return Polynomial(quotient, self.p), Polynomial(remainder, self.p)

    def __call__(self, point: int) -> int:
        """Evaluate the polynomial at point"""
        return int(self.poly(point % self.p))

    def scale(self, factor: int):
        """Return `f(factor * X)`"""
        coeffs = self.coeffs()
        acc = 1
        scaled = []
        for c in coeffs:
            scaled.append(c * acc % self.p)
            acc = acc * factor % self.p
        return Polynomial(scaled, self.p)

    def multiply_by_vanishing_poly(self, n: int):
        """Return `f(X) * (X^n - 1)`"""
        coeffs = self.coeffs()
        shifted = [0] * n + coeffs
        return Polynomial(shifted, self.p) - self

    def divide_by_vanishing_poly(self, n: int):
        """Return quotient and remainder of `f(X) / (X^n - 1)`"""
        vanishing = Polynomial([-1] + [0] * (n - 1) + [1], self.p)
        return self / vanishing

    def split(self, size: int, count: int):
        """Split into `count` chunks of `size` coefficients (lowest first)"""
        coeffs = self.coeffs()
        assert len(coeffs) <= size * count, "polynomial does not fit in chunks"
        return [
            Polynomial(coeffs[i * size : (i + 1) * size] or [0], self.p)
            for i in range(count)
        ]


def ntt(values: Sequence[int], omega: int, p: int) -> list:
    """
    Iterative radix-2 number theoretic transform of `values`
    where `omega` is a primitive `len(values)`-th root of unity
    """
    n = len(values)
    assert is_power_of_two(n), "NTT size must be a power of two"

    a = [int(v) % p for v in values]

    # bit-reversal permutation
    j = 0
    for i in range(1, n):
        bit = n >> 1
        while j & bit:
            j ^= bit
            bit >>= 1
        j |= bit
        if i < j:
            a[i], a[j] = a[j], a[i]

    length = 2
    while length <= n:
        w_len = pow(omega, n // length, p)
        half = length // 2
        twiddles = [1] * half
        for t in range(1, half):
            twiddles[t] = twiddles[t - 1] * w_len % p
        for start in range(0, n, length):
            for t in range(half):
                u = a[start + t]
                v = a[start + t + half] * twiddles[t] % p
                a[start + t] = (u + v) % p
                a[start + t + half] = (u - v) % p
        length <<= 1

    return a


def intt(values: Sequence[int], omega: int, p: int) -> list:
    n_inv = pow(len(values), -1, p)
    transformed = ntt(values, pow(omega, -1, p), p)
    return [v * n_inv % p for v in transformed]


def get_generator(p: int) -> int:
    try:
        return MULTIPLICATIVE_GENERATOR[p]
    except KeyError:
        raise InvalidParameters(f"no known multiplicative generator for field {p}") from None


def get_nth_root_of_unity(n: int, p: int) -> int:
    """Primitive n-th root of unity of the field `p`"""
    assert is_power_of_two(n), "domain size must be a power of two"
    if two_adicity(p - 1) < n.bit_length() - 1:
        raise InvalidParameters(f"field {p} has no subgroup of size {n}")
    omega = pow(get_generator(p), (p - 1) // n, p)
    assert pow(omega, n, p) == 1
    assert n == 1 or pow(omega, n // 2, p) != 1
    return omega


class EvaluationDomain:
    """
    Multiplicative subgroup H = {1, w, ..., w^(n-1)} of size n = 2^k
    """

    def __init__(self, k: int, p: int):
        self.k = k
        self.n = 1 << k
        self.p = p
        self.omega = get_nth_root_of_unity(self.n, p)
        self.omega_inv = pow(self.omega, -1, p)
        self.generator = get_generator(p)
        # generator of the odd-order subgroup, used to shift permutation cosets
        self.delta = pow(self.generator, 1 << two_adicity(p - 1), p)
        self.__elements = None

    def elements(self):
        if self.__elements is None:
            elements = [1] * self.n
            for i in range(1, self.n):
                elements[i] = elements[i - 1] * self.omega % self.p
            self.__elements = elements
        return self.__elements

    def rotate(self, point: int, rotation: int) -> int:
        """Return `point * w^rotation`"""
        if rotation >= 0:
            return point * pow(self.omega, rotation, self.p) % self.p
        return point * pow(self.omega_inv, -rotation, self.p) % self.p

    def interpolate(self, evals: Sequence[int]) -> Polynomial:
        """Polynomial of degree < n taking `evals[i]` at `w^i`"""
        evals = list(evals) + [0] * (self.n - len(evals))
        return Polynomial(intt(evals, self.omega, self.p), self.p)

    def evaluate(self, poly: Polynomial) -> list:
        """Evaluations of `poly` over H"""
        coeffs = poly.coeffs()
        folded = [0] * self.n
        # X^n = 1 on H
        for i, c in enumerate(coeffs):
            folded[i % self.n] += c
        return ntt(folded, self.omega, self.p)

    def vanishing_eval(self, x: int) -> int:
        """Evaluate `X^n - 1` at `x`"""
        return (pow(x, self.n, self.p) - 1) % self.p

    def lagrange_evals(self, x: int, rows: Sequence[int]) -> list:
        """Evaluate the Lagrange basis polynomials of `rows` at `x`"""
        zh = self.vanishing_eval(x)
        if zh == 0:
            # x lies in H
            return [1 if pow(self.omega, row, self.p) == x else 0 for row in rows]

        points = [pow(self.omega, row, self.p) for row in rows]
        denominators = batch_modinv([self.n * (x - w) % self.p for w in points], self.p)
        return [w * zh * d % self.p for w, d in zip(points, denominators)]

    def barycentric_eval(self, evals: Sequence[int], x: int) -> int:
        """
        Evaluate at `x` the polynomial of degree < n whose evaluations over H
        are `evals` (missing trailing values are zero)
        """
        rows = [i for i, v in enumerate(evals) if v % self.p != 0]
        if not rows:
            return 0
        basis = self.lagrange_evals(x, rows)
        return sum(evals[row] * b for row, b in zip(rows, basis)) % self.p


def lagrange_interpolation(x, y, p):
    """
    Naive implementation of Lagrange interpolation from given points `(x_i, y_i)`.
    For very large points, use the NTT instead.
    """
    M = len(x)
    poly = Polynomial([0], p)
    for j in range(M):
        pt = Polynomial([y[j]], p)
        for k in range(M):
            if k == j:
                continue
            fac = pow(x[j] - x[k], -1, p)
            pt *= Polynomial([-x[k] * fac, fac], p)
        poly += pt
    return poly
