from ..errors import AssignmentError, ConstraintSystemFailure
from ..polynomial import EvaluationDomain
from ..utils import batch_modinv


class PermutationAssembly:
    """
    Cycles of cells constrained to be equal, over the columns enabled for
    equality. Each cell maps to the next cell of its cycle.
    """

    def __init__(self, n: int, columns: list):
        self.n = n
        self.columns = list(columns)
        self.mapping = [[(i, j) for j in range(n)] for i in range(len(columns))]
        self.aux = [[(i, j) for j in range(n)] for i in range(len(columns))]
        self.sizes = [[1] * n for _ in columns]

    def _column_index(self, column) -> int:
        try:
            return self.columns.index(column)
        except ValueError:
            raise AssignmentError(f"{column} is not enabled for equality") from None

    def copy(self, left_column, left_row: int, right_column, right_row: int):
        left = (self._column_index(left_column), left_row)
        right = (self._column_index(right_column), right_row)

        left_cycle = self.aux[left[0]][left[1]]
        right_cycle = self.aux[right[0]][right[1]]
        if left_cycle == right_cycle:
            return

        if self.sizes[left_cycle[0]][left_cycle[1]] < self.sizes[right_cycle[0]][right_cycle[1]]:
            left_cycle, right_cycle = right_cycle, left_cycle

        # merge the right cycle into the left one
        self.sizes[left_cycle[0]][left_cycle[1]] += self.sizes[right_cycle[0]][right_cycle[1]]
        cell = right_cycle
        while True:
            self.aux[cell[0]][cell[1]] = left_cycle
            cell = self.mapping[cell[0]][cell[1]]
            if cell == right_cycle:
                break

        self.mapping[left[0]][left[1]], self.mapping[right[0]][right[1]] = (
            self.mapping[right[0]][right[1]],
            self.mapping[left[0]][left[1]],
        )

    def build_sigma(self, domain: EvaluationDomain) -> list:
        """
        Evaluations of the sigma polynomials: the cell `(i, j)` is labelled
        `delta^i * w^j` and sigma sends each cell to the label of the next
        cell of its cycle
        """
        p = domain.p
        omegas = domain.elements()
        deltas = [pow(domain.delta, i, p) for i in range(len(self.columns))]
        return [
            [deltas[i] * omegas[j] % p for i, j in column]
            for column in self.mapping
        ]


class PermutationArgument:
    """
    Grand product `Z` and the opened values of the permutation argument.

    Fields are polynomials on the prover side and evaluations at `x` on the
    verifier side.
    """

    def __init__(self, z, z_next, values: list, sigmas: list):
        self.z = z
        self.z_next = z_next
        self.values = values
        self.sigmas = sigmas

    def expressions(self, l0, x, beta: int, gamma: int, deltas: list) -> list:
        """
        l0(X) * (1 - Z(X)) = 0
        Z(wX) * prod(v_i + beta * sigma_i + gamma) - Z(X) * prod(v_i + beta * delta^i * X + gamma) = 0
        """
        left = self.z_next
        right = self.z
        for value, sigma, delta in zip(self.values, self.sigmas, deltas):
            left = left * (value + sigma * beta + gamma)
            right = right * (value + x * (beta * delta) + gamma)

        return [l0 * (1 - self.z), left - right]


def permutation_product(values: list, sigmas: list, domain: EvaluationDomain, beta: int, gamma: int) -> list:
    """Evaluations over H of the grand product `Z`, starting from `Z(1) = 1`"""
    p = domain.p
    n = domain.n
    omegas = domain.elements()
    deltas = [pow(domain.delta, i, p) for i in range(len(values))]

    numerators = [1] * n
    denominators = [1] * n
    for column, sigma, delta in zip(values, sigmas, deltas):
        for j in range(n):
            numerators[j] = numerators[j] * (column[j] + beta * delta * omegas[j] + gamma) % p
            denominators[j] = denominators[j] * (column[j] + beta * sigma[j] + gamma) % p

    if any(d == 0 for d in denominators):
        raise ConstraintSystemFailure("permutation denominator vanishes")
    inverses = batch_modinv(denominators, p)

    z = [1] * n
    for j in range(n - 1):
        z[j + 1] = z[j] * numerators[j] * inverses[j] % p

    if z[n - 1] * numerators[n - 1] * inverses[n - 1] % p != 1:
        raise ConstraintSystemFailure("equality constraints are not satisfied")

    return z
