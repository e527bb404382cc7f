import pytest

from plonkrange.ecc import EllipticCurve
from plonkrange.errors import TranscriptError
from plonkrange.transcript import Blake2bRead, Blake2bWrite


@pytest.mark.parametrize("curve", ["BN254", "BLS12_381"])
def test_transcript_roundtrip(curve):

    E = EllipticCurve(curve)
    point = E.G1() * 1337
    scalar = 42

    writer = Blake2bWrite(curve=curve)
    writer.write_point(point)
    writer.write_point(E.identity())
    writer.write_scalar(scalar)
    challenge = writer.squeeze_challenge()
    proof = writer.finalize()

    assert len(proof) == 2 * (2 * E.point_size) + 32

    reader = Blake2bRead(proof, curve=curve)
    assert reader.read_point() == point
    assert reader.read_point().is_zero()
    assert reader.read_scalar() == scalar
    assert reader.squeeze_challenge() == challenge
    assert reader.is_consumed()


def test_challenges_depend_on_label_and_data():

    first = Blake2bWrite(b"first")
    second = Blake2bWrite(b"second")
    assert first.squeeze_challenge() != second.squeeze_challenge()

    a = Blake2bWrite()
    b = Blake2bWrite()
    a.common_scalar(1)
    b.common_scalar(2)
    assert a.squeeze_challenge() != b.squeeze_challenge()


def test_consecutive_challenges_differ():

    transcript = Blake2bWrite()
    assert transcript.squeeze_challenge() != transcript.squeeze_challenge()


def test_truncated_proof():

    writer = Blake2bWrite()
    writer.write_scalar(7)
    proof = writer.finalize()

    with pytest.raises(TranscriptError):
        Blake2bRead(proof[:-1]).read_scalar()


def test_non_canonical_scalar():

    E = EllipticCurve("BN254")

    with pytest.raises(TranscriptError):
        Blake2bRead(E.order.to_bytes(32, "little")).read_scalar()


def test_point_not_on_curve():

    data = (1).to_bytes(32, "big") + (1).to_bytes(32, "big")

    with pytest.raises(TranscriptError):
        Blake2bRead(data).read_point()
