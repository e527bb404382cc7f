from ..errors import ConstraintSystemFailure
from ..utils import batch_modinv


def compress(values: list, theta: int):
    """Fold several columns into one with powers of `theta`"""
    acc = 0
    for value in values:
        acc = acc * theta + value
    return acc


def permute_expression_pair(compressed_input: list, compressed_table: list, p: int):
    """
    Sort the input so that equal values are adjacent, then arrange the table
    so that the first row of every run of the input matches the table.

    Raises `ConstraintSystemFailure` if an input value is not in the table.
    """
    leftover = {}
    for value in compressed_table:
        leftover[value % p] = leftover.get(value % p, 0) + 1

    permuted_input = sorted(v % p for v in compressed_input)
    permuted_table = [0] * len(permuted_input)
    repeated_rows = []

    for row, value in enumerate(permuted_input):
        if row == 0 or value != permuted_input[row - 1]:
            count = leftover.get(value, 0)
            if count == 0:
                raise ConstraintSystemFailure("lookup input is not in the table")
            permuted_table[row] = value
            leftover[value] = count - 1
        else:
            repeated_rows.append(row)

    unused = []
    for value, count in leftover.items():
        unused.extend([value] * count)
    assert len(unused) == len(repeated_rows)

    for row, value in zip(repeated_rows, unused):
        permuted_table[row] = value

    return permuted_input, permuted_table


def lookup_product(
    compressed_input: list,
    compressed_table: list,
    permuted_input: list,
    permuted_table: list,
    beta: int,
    gamma: int,
    p: int,
) -> list:
    """Evaluations over H of the grand product `Z`, starting from `Z(1) = 1`"""
    n = len(compressed_input)

    denominators = [
        (a + beta) * (s + gamma) % p for a, s in zip(permuted_input, permuted_table)
    ]
    if any(d == 0 for d in denominators):
        raise ConstraintSystemFailure("lookup denominator vanishes")
    inverses = batch_modinv(denominators, p)

    z = [1] * n
    for j in range(n - 1):
        numerator = (compressed_input[j] + beta) * (compressed_table[j] + gamma)
        z[j + 1] = z[j] * numerator * inverses[j] % p

    last = (compressed_input[n - 1] + beta) * (compressed_table[n - 1] + gamma)
    assert z[n - 1] * last * inverses[n - 1] % p == 1

    return z


class LookupArgument:
    """
    Permuted columns and grand product of one lookup.

    Fields are polynomials on the prover side and evaluations at `x` on the
    verifier side.
    """

    def __init__(self, z, z_next, permuted_input, permuted_input_prev, permuted_table):
        self.z = z
        self.z_next = z_next
        self.permuted_input = permuted_input
        self.permuted_input_prev = permuted_input_prev
        self.permuted_table = permuted_table

    def expressions(self, l0, compressed_input, compressed_table, beta: int, gamma: int) -> list:
        """
        l0(X) * (1 - Z(X)) = 0
        Z(wX) (A'(X) + beta) (S'(X) + gamma) - Z(X) (A(X) + beta) (S(X) + gamma) = 0
        l0(X) * (A'(X) - S'(X)) = 0
        (1 - l0(X)) * (A'(X) - S'(X)) * (A'(X) - A'(w^-1 X)) = 0
        """
        a_minus_s = self.permuted_input - self.permuted_table
        return [
            l0 * (1 - self.z),
            self.z_next * (self.permuted_input + beta) * (self.permuted_table + gamma)
            - self.z * (compressed_input + beta) * (compressed_table + gamma),
            l0 * a_minus_s,
            (1 - l0) * a_minus_s * (self.permuted_input - self.permuted_input_prev),
        ]
