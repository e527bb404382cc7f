import pytest

from plonkrange.constant import BN254_SCALAR_FIELD, BLS12_381_SCALAR_FIELD
from plonkrange.errors import InvalidParameters, Synthesis
from plonkrange.polynomial import (
    EvaluationDomain,
    Polynomial,
    get_nth_root_of_unity,
    intt,
    lagrange_interpolation,
    ntt,
)
from plonkrange.utils import batch_modinv, next_power_of_two, two_adicity
from plonkrange.value import Value


def test_univariate_polynomial():

    for p in (BN254_SCALAR_FIELD, BLS12_381_SCALAR_FIELD):

        a = Polynomial([1, 2, 3], p)
        b = Polynomial([2, 3, 4], p)

        assert a + b == Polynomial([3, 5, 7], p)
        assert a - b == Polynomial([-1, -1, -1], p)
        assert 1 - a == Polynomial([0, -2, -3], p)
        assert a * b == Polynomial([2, 7, 16, 17, 12], p)

        quotient, remainder = (a * b) / a
        assert quotient == b
        assert remainder.is_zero()

        assert a + 5 == Polynomial([6, 2, 3], p)
        assert a * 2 == Polynomial([2, 4, 6], p)
        assert -a == Polynomial([-1, -2, -3], p)

        assert a(2) == (1 + 2 * 2 + 2**2 * 3) % p
        assert a.scale(2) == Polynomial([1, 4, 12], p)


def test_zero_polynomial():

    zero = Polynomial([0, 0, 0], BN254_SCALAR_FIELD)

    assert zero.is_zero()
    assert zero.degree() == -1
    assert zero.coeffs() == [0]


def test_vanishing_polynomial():

    p = BN254_SCALAR_FIELD
    a = Polynomial([1, 2, 3], p)

    multiple = a.multiply_by_vanishing_poly(4)
    assert multiple == Polynomial([-1, -2, -3, 0, 1, 2, 3], p)

    quotient, remainder = multiple.divide_by_vanishing_poly(4)
    assert quotient == a
    assert remainder.is_zero()


def test_split_polynomial():

    p = BN254_SCALAR_FIELD
    pieces = Polynomial([1, 2, 3, 4, 5], p).split(2, 4)

    assert pieces == [
        Polynomial([1, 2], p),
        Polynomial([3, 4], p),
        Polynomial([5], p),
        Polynomial([0], p),
    ]


def test_ntt():

    for p in (BN254_SCALAR_FIELD, BLS12_381_SCALAR_FIELD):
        omega = get_nth_root_of_unity(8, p)
        values = [3, 1, 4, 1, 5, 9, 2, 6]

        evaluations = ntt(values, omega, p)
        poly = Polynomial(values, p)
        assert evaluations == [poly(pow(omega, i, p)) for i in range(8)]
        assert intt(evaluations, omega, p) == values


def test_evaluation_domain():

    for p in (BN254_SCALAR_FIELD, BLS12_381_SCALAR_FIELD):
        domain = EvaluationDomain(3, p)
        evals = [1, 2, 3, 4, 5, 6, 7, 8]

        poly = domain.interpolate(evals)
        assert poly.degree() < domain.n
        assert domain.evaluate(poly) == evals
        assert [poly(w) for w in domain.elements()] == evals

        # values over H ignore multiples of the vanishing polynomial
        assert domain.evaluate(poly + poly.multiply_by_vanishing_poly(domain.n)) == evals

        x = 1234567
        assert domain.barycentric_eval(evals, x) == poly(x)
        assert domain.barycentric_eval(evals, domain.elements()[2]) == 3
        assert domain.vanishing_eval(domain.omega) == 0

        l0 = domain.interpolate([1] + [0] * 7)
        assert domain.lagrange_evals(x, [0]) == [l0(x)]

        assert domain.rotate(x, 1) == x * domain.omega % p
        assert domain.rotate(domain.rotate(x, 1), -1) == x


def test_root_of_unity_out_of_range():

    with pytest.raises(InvalidParameters):
        get_nth_root_of_unity(2**40, BN254_SCALAR_FIELD)


def test_lagrange_interpolation():

    p = BN254_SCALAR_FIELD
    poly = lagrange_interpolation([1, 2, 3], [2, 5, 10], p)

    # x^2 + 1
    assert poly == Polynomial([1, 0, 1], p)


def test_utils():

    p = BN254_SCALAR_FIELD
    values = [2, 3, 5, 7]

    assert batch_modinv(values, p) == [pow(v, -1, p) for v in values]
    assert batch_modinv([], p) == []
    assert next_power_of_two(17) == 32
    assert two_adicity(p - 1) == 28


def test_value():

    known = Value.known(3)
    unknown = Value.unknown()

    assert known.is_known()
    assert not unknown.is_known()
    assert (known + 4).assign() == 7
    assert (known * known).assign() == 9
    assert (10 - known).assign() == 7
    assert known.map(lambda x: x * 2) == Value.known(6)
    assert not (known + unknown).is_known()
    assert known.zip(Value.known(1)).assign() == (3, 1)

    with pytest.raises(Synthesis):
        unknown.assign()
