"""
Errors raised while configuring, assigning and proving circuits.

Configuration and assignment errors belong to circuit construction and are
fatal for the current synthesis pass. Backend errors come from key generation,
proof creation and verification. An out-of-range witness is never an error at
assignment time: it is only reported by `MockProver.verify()` or by a proof
that cannot be created or verified.
"""


class PlonkRangeError(Exception):
    """Base class of every error raised by this package"""


class ConfigurationError(PlonkRangeError):
    """Invalid static circuit parameter, detected while building the constraint system"""


class AssignmentError(PlonkRangeError):
    """The layouter could not place a region or write a cell"""


class NotEnoughRowsAvailable(AssignmentError):

    def __init__(self, k: int, row: int = None):
        self.k = k
        self.row = row
        if row is None:
            msg = f"not enough rows available for k = {k}"
        else:
            msg = f"row {row} is outside the {1 << k} usable rows (k = {k})"
        super().__init__(msg)


class Synthesis(AssignmentError):
    """A witness value was required but is unknown"""


class BackendError(PlonkRangeError):
    """Failure during key generation, proof creation or verification"""


class InvalidParameters(BackendError):
    """Public parameters do not fit the circuit"""


class ConstraintSystemFailure(BackendError):
    """The witness does not satisfy the constraint system"""


class TranscriptError(BackendError):
    """Proof bytes could not be read from the transcript"""
