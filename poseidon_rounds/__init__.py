"""
Minimal secure round numbers for the Poseidon permutation.
"""

from .round_numbers import (
    PRIME_BITLEN,
    SECURITY_LEVEL,
    InvalidWidthError,
    RoundNumbers,
    RoundNumbersError,
    SearchSpaceExhaustedError,
    calc_round_numbers,
    calc_round_numbers_vectorized,
    n_sboxes,
    round_numbers_are_secure,
)
from .reference_table import ReferenceRow, ReferenceTableError, load_reference_table
