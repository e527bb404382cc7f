import random

import pytest

from plonkrange.commitment import KZG, MultiOpeningQuery
from plonkrange.errors import InvalidParameters, TranscriptError
from plonkrange.polynomial import Polynomial
from plonkrange.transcript import Blake2bRead, Blake2bWrite


@pytest.mark.parametrize("curve", ["BN254", "BLS12_381"])
def test_kzg(curve):

    kzg = KZG(4, curve)
    kzg.setup()

    poly = Polynomial([1, 3, 3, 7], kzg.order)
    commitment = kzg.commit(poly)

    point = random.randint(1, kzg.order)

    proof, evaluation = kzg.open(poly, point)

    assert evaluation == poly(point)
    assert kzg.verify(commitment, proof, point, evaluation)
    assert not kzg.verify(commitment, proof, point, evaluation + 1)


def test_kzg_degree_too_large():

    kzg = KZG(4, "BN254")
    kzg.setup()

    with pytest.raises(InvalidParameters):
        kzg.commit(Polynomial([1, 2, 3, 4, 5, 6], kzg.order))


def test_kzg_parallel_commit(monkeypatch):

    kzg = KZG(16, "BN254")
    kzg.setup()

    poly = Polynomial(list(range(1, 18)), kzg.order)
    commitment = kzg.commit(poly)

    monkeypatch.setenv("PLONKRANGE_PARALLEL_THRESHOLD", "1")
    monkeypatch.setenv("PLONKRANGE_PARALLEL_CPU", "1")

    assert kzg.commit(poly) == commitment


def test_kzg_from_srs():

    kzg = KZG(4, "BN254")
    kzg.setup()
    other = KZG.from_srs(kzg.G1_tau, kzg.G2_tau, "BN254")

    poly = Polynomial([4, 2], kzg.order)
    proof, evaluation = other.open(poly, 5)

    assert kzg.verify(kzg.commit(poly), proof, 5, evaluation)


def _queries(kzg, x, y):
    poly1 = Polynomial([1, 3, 3, 7], kzg.order)
    poly2 = Polynomial([1, 2, 3, 4], kzg.order)
    poly3 = Polynomial([1, 2, 3, 0], kzg.order)

    c1 = kzg.commit(poly1)
    c2 = kzg.commit(poly2)
    c3 = kzg.commit(poly3)

    query = MultiOpeningQuery()

    query.add_polynomial(poly1, c1)
    query.add_polynomial(poly2, c2)
    query.add_polynomial(poly3, c3)

    claims = [(c1, x), (c2, x), (c2, y), (c3, x), (c3, y)]
    evaluations = [query.prover_query(c, point) for c, point in claims]

    return query, claims, evaluations


def test_multi_kzg():

    kzg = KZG(4, "BN254")
    kzg.setup()

    x = 123
    y = 1234
    query, claims, evaluations = _queries(kzg, x, y)

    transcript = Blake2bWrite()
    kzg.multi_open(query, transcript)
    proof = transcript.finalize()

    verifier_query = MultiOpeningQuery()
    for (commitment, point), evaluation in zip(claims, evaluations):
        verifier_query.verifier_query(commitment, point, evaluation)

    assert kzg.multi_verify(verifier_query, Blake2bRead(proof))


def test_multi_kzg_wrong_evaluation():

    kzg = KZG(4, "BN254")
    kzg.setup()

    x = 123
    y = 1234
    query, claims, evaluations = _queries(kzg, x, y)

    transcript = Blake2bWrite()
    kzg.multi_open(query, transcript)
    proof = transcript.finalize()

    evaluations[2] += 1
    verifier_query = MultiOpeningQuery()
    for (commitment, point), evaluation in zip(claims, evaluations):
        verifier_query.verifier_query(commitment, point, evaluation)

    assert not kzg.multi_verify(verifier_query, Blake2bRead(proof))


def test_conflicting_evaluation_claims():

    kzg = KZG(4, "BN254")
    kzg.setup()
    commitment = kzg.commit(Polynomial([1, 2], kzg.order))

    query = MultiOpeningQuery()
    query.verifier_query(commitment, 5, 11)
    query.verifier_query(commitment, 5, 11)

    with pytest.raises(TranscriptError):
        query.verifier_query(commitment, 5, 12)

    assert query.get_evaluation(commitment.to_bytes(), 5) == 11


def test_point_sets():

    kzg = KZG(4, "BN254")
    kzg.setup()

    query, claims, _ = _queries(kzg, 5, 6)
    c1, c2 = claims[0][0].to_bytes(), claims[1][0].to_bytes()
    c3 = claims[3][0].to_bytes()

    assert query.point_sets() == [((5,), [c1]), ((5, 6), [c2, c3])]
