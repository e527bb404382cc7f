"""
The constraints checked by the quotient argument, in the order they are
combined with powers of the challenge `y`:

1. every constraint of every custom gate,
2. the equality permutation argument (when a column is enabled for equality),
3. every lookup argument.

The same code builds polynomials on the prover side and evaluations at the
challenge point on the verifier side.
"""

from .lookup import compress


def constraint_terms(
    cs,
    evaluate,
    l0,
    x,
    theta: int,
    beta: int,
    gamma: int,
    deltas: list,
    permutation,
    lookups: list,
) -> list:
    terms = []
    for gate in cs.gates:
        for poly in gate.polys:
            terms.append(evaluate(poly))

    if permutation is not None:
        terms.extend(permutation.expressions(l0, x, beta, gamma, deltas))

    for lookup, argument in zip(cs.lookups, lookups):
        compressed_input = compress([evaluate(e) for e in lookup.input_expressions], theta)
        compressed_table = compress([evaluate(e) for e in lookup.table_expressions], theta)
        terms.extend(
            argument.expressions(l0, compressed_input, compressed_table, beta, gamma)
        )

    return terms


def combine(terms: list, y: int, p: int):
    """`sum(y^i * terms[i])`, reduced mod `p` when the terms are field elements"""
    acc = 0
    for term in terms:
        acc = acc * y + term
        if isinstance(acc, int):
            acc %= p
    return acc


def quotient_chunks(degree: int, n: int) -> int:
    """
    Number of `n`-coefficient pieces of the quotient, given a constraint
    degree and blinded polynomials of degree at most `n + 2`
    """
    max_quotient_degree = degree * (n + 2) - n
    return max_quotient_degree // n + 1


def unconverted_selector(selector):
    raise AssertionError(f"{selector} must be converted to a fixed column before proving")
