"""
Fiat-Shamir transcripts over BLAKE2b.

The prover writes every commitment and evaluation through a `Blake2bWrite`,
which both absorbs it into the hash state and appends it to the proof bytes.
The verifier replays the same sequence with `Blake2bRead` over those bytes, so
both sides squeeze identical challenges. The proof is exactly the bytes
produced by `Blake2bWrite.finalize()`.
"""

import hashlib

from .ecc import Curve, EllipticCurve
from .errors import TranscriptError

SCALAR_SIZE = 32

PREFIX_CHALLENGE = b"\x00"
PREFIX_POINT = b"\x01"
PREFIX_SCALAR = b"\x02"


class FiatShamirTranscript:

    def __init__(self, label: bytes = b"plonkrange", curve: str = "BN254"):
        self.label = label
        self.E = EllipticCurve(curve)
        self.order = self.E.order
        self.hasher = hashlib.blake2b(digest_size=64, person=b"plonkrange_Trans")
        self.hasher.update(label)

    def common_point(self, point: Curve):
        """Absorb a curve point without writing it to the proof"""
        self.hasher.update(PREFIX_POINT)
        self.hasher.update(point.to_bytes())

    def common_scalar(self, scalar: int):
        """Absorb a scalar without writing it to the proof"""
        self.hasher.update(PREFIX_SCALAR)
        self.hasher.update((scalar % self.order).to_bytes(SCALAR_SIZE, "little"))

    def common_bytes(self, data: bytes):
        self.hasher.update(PREFIX_SCALAR)
        self.hasher.update(len(data).to_bytes(8, "little"))
        self.hasher.update(data)

    def squeeze_challenge(self) -> int:
        self.hasher.update(PREFIX_CHALLENGE)
        digest = self.hasher.copy().digest()
        return int.from_bytes(digest, "little") % self.order


class Blake2bWrite(FiatShamirTranscript):

    def __init__(self, label: bytes = b"plonkrange", curve: str = "BN254"):
        super().__init__(label, curve)
        self.buffer = bytearray()

    def write_point(self, point: Curve):
        self.common_point(point)
        self.buffer += point.to_bytes()

    def write_scalar(self, scalar: int):
        self.common_scalar(scalar)
        self.buffer += (scalar % self.order).to_bytes(SCALAR_SIZE, "little")

    def finalize(self) -> bytes:
        return bytes(self.buffer)


class Blake2bRead(FiatShamirTranscript):

    def __init__(self, proof: bytes, label: bytes = b"plonkrange", curve: str = "BN254"):
        super().__init__(label, curve)
        self.proof = bytes(proof)
        self.position = 0

    def _take(self, size: int) -> bytes:
        end = self.position + size
        if end > len(self.proof):
            raise TranscriptError(
                f"unexpected end of proof: wanted {size} bytes at offset {self.position}"
            )
        data = self.proof[self.position : end]
        self.position = end
        return data

    def read_point(self) -> Curve:
        point = self.E.g1_from_bytes(self._take(2 * self.E.point_size))
        self.common_point(point)
        return point

    def read_scalar(self) -> int:
        scalar = int.from_bytes(self._take(SCALAR_SIZE), "little")
        if scalar >= self.order:
            raise TranscriptError("scalar is not a canonical field element")
        self.common_scalar(scalar)
        return scalar

    def is_consumed(self) -> bool:
        return self.position == len(self.proof)
