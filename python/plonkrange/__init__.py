from .value import Value
from .errors import (
    PlonkRangeError,
    ConfigurationError,
    AssignmentError,
    NotEnoughRowsAvailable,
    Synthesis,
    BackendError,
    InvalidParameters,
    ConstraintSystemFailure,
    TranscriptError,
)

__version__ = "0.1.0"
