from .base import MultiOpeningQuery, PolynomialCommitmentScheme
from .kzg import KZG
