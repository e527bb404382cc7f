import logging

from ..commitment import KZG
from ..ecc import EllipticCurve
from ..errors import InvalidParameters, TranscriptError
from ..utils import Timer

logger = logging.getLogger(__name__)


class Params:
    """
    Public parameters for circuits of `2^k` rows: powers of a secret `tau`
    in G1 and `tau` in G2
    """

    def __init__(self, k: int, G1_tau: list, G2_tau, curve: str = "BN254"):
        self.k = k
        self.n = 1 << k
        self.curve = curve
        self.E = EllipticCurve(curve)
        self.order = self.E.order
        self.G1_tau = G1_tau
        self.G2_tau = G2_tau

        if len(G1_tau) < self.n + 4:
            raise InvalidParameters(
                f"{len(G1_tau)} powers of tau are not enough for k = {k}"
            )

    @classmethod
    def setup(cls, k: int, curve: str = "BN254", rng=None):
        """Run a (toxic) trusted setup for circuits of `2^k` rows"""
        if k <= 0:
            raise InvalidParameters(f"k must be positive, got {k}")

        logger.info("Generating parameters for k = %d on %s", k, curve)
        with Timer("setup"):
            kzg = KZG((1 << k) + 3, curve)
            kzg.setup(rng)

        return cls(k, kzg.G1_tau, kzg.G2_tau, curve)

    def kzg(self) -> KZG:
        return KZG.from_srs(self.G1_tau, self.G2_tau, self.curve)

    def to_bytes(self) -> bytes:
        name = self.curve.encode()
        data = bytes([self.k, len(name)]) + name
        data += len(self.G1_tau).to_bytes(4, "little")
        data += b"".join(point.to_bytes() for point in self.G1_tau)
        data += self.G2_tau.to_bytes()
        return data

    @classmethod
    def from_bytes(cls, data: bytes):
        try:
            k = data[0]
            name_length = data[1]
            curve = data[2 : 2 + name_length].decode()
            offset = 2 + name_length
            E = EllipticCurve(curve)
            count = int.from_bytes(data[offset : offset + 4], "little")
            offset += 4
        except (IndexError, KeyError, UnicodeDecodeError) as exc:
            raise TranscriptError("malformed parameters header") from exc

        g1_size = 2 * E.point_size
        g2_size = 4 * E.point_size
        if len(data) != offset + count * g1_size + g2_size:
            raise TranscriptError("parameters have an unexpected length")

        G1_tau = []
        for _ in range(count):
            G1_tau.append(E.g1_from_bytes(data[offset : offset + g1_size]))
            offset += g1_size
        G2_tau = E.g2_from_bytes(data[offset:])

        return cls(k, G1_tau, G2_tau, curve)
