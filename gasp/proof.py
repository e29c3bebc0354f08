"""
GASP Game Engine - Proof Verifier

A proof is a proper nontrivial divisor of the challenge number.
1 and the number itself divide it but are rejected as degenerate.
"""

from math import isqrt
from typing import List


def is_acceptable_proof(number: int, proof: int) -> bool:
    """
    Check whether `proof` solves a challenge on `number`.

    Args:
        number: Challenge number (nonzero)
        proof: Candidate divisor

    Returns:
        True if proof != 1, proof != number and proof divides number
    """
    if proof == 0 or proof == 1 or proof == number:
        return False
    return number % proof == 0


def acceptable_proofs(number: int) -> List[int]:
    """
    List every acceptable proof for `number`, ascending.

    Trial division up to sqrt(number); fine for the small numbers used in
    tests and simulations, hopeless for real semiprimes.

    Examples:
        >>> acceptable_proofs(21)
        [3, 7]

        >>> acceptable_proofs(42)
        [2, 3, 6, 7, 14, 21]

        >>> acceptable_proofs(13)
        []
    """
    if number <= 0:
        raise ValueError(f"Number must be positive, got {number}")

    low, high = [], []
    for d in range(2, isqrt(number) + 1):
        if number % d == 0:
            low.append(d)
            if d != number // d:
                high.append(number // d)
    return low + high[::-1]
