"""
Round-number calculator for the Poseidon permutation over a 256-bit field.

Evaluates the security inequalities of the Poseidon paper
(https://eprint.iacr.org/2019/458.pdf, Section 5.5 and Appendix C) and
searches for the (full, partial) round pair with the fewest S-boxes.

All inequality arithmetic is done in 32-bit floats (numpy.float32). The
bounds are rounded up with ceil(), so the float width can move a borderline
value by one round; the published round-number table was produced with
float32 and the tests pin that choice.
"""

from functools import lru_cache
from typing import NamedTuple, Optional, Tuple

import numpy as np

# Bit length of the field modulus, `n` in the paper (n = ceil(log2(p))).
# BLS12-381's scalar field is 255 bits; 256 is used so elements line up with
# bytes, the one-bit difference does not change the inequalities.
PRIME_BITLEN = 256

# Target security level in bits, `M` in the paper.
SECURITY_LEVEL = 128

# --- Search space ---
# Wide enough to contain a secure pair for every realistic width. There is no
# closed-form upper bound, so these stay fixed.
RF_SEARCH_MIN = 2
RF_SEARCH_MAX = 1000  # inclusive, even values only
RP_SEARCH_MIN = 4
RP_SEARCH_MAX = 200  # exclusive

# --- Security margin ---
# Two extra full rounds and 7.5% more partial rounds (paper, Section 5.5).
MARGIN_FULL_ROUNDS = 2
MARGIN_PARTIAL_FACTOR = np.float32(1.075)

# Statistical-attack full-round requirement for large and small fields.
STAT_RF_LARGE_FIELD = 6
STAT_RF_SMALL_FIELD = 10


class RoundNumbers(NamedTuple):
    full_rounds: int
    partial_rounds: int


# --- Errors ---


class RoundNumbersError(RuntimeError):
    """Base class for round-number calculation failures."""


class InvalidWidthError(RoundNumbersError, ValueError):
    """Width `t` is not an integer greater than 1."""


class SearchSpaceExhaustedError(RoundNumbersError):
    """No candidate in the search space satisfies the security inequalities."""


def check_width(t: int) -> None:
    """Raise InvalidWidthError unless `t` is an integer > 1."""
    if isinstance(t, bool) or not isinstance(t, (int, np.integer)) or t <= 1:
        msg = f"Width t must be an integer greater than 1, got {t!r}"
        raise InvalidWidthError(msg)


# --- Cost functions ---


def n_sboxes(rf: int, rp: int, t: int) -> int:
    """Number of S-boxes, equation (14) of the paper: t * R_F + R_P."""
    return t * rf + rp


def size_cost(rf: int, rp: int, t: int, prime_bitlen: int = PRIME_BITLEN) -> int:
    """Bits pushed through S-boxes: N * R_F + n * R_P with N = n * t."""
    return n_sboxes(rf, rp, t) * prime_bitlen


def depth_cost(rf: int, rp: int) -> int:
    return rf + rp


# --- Security inequalities ---


def _rounded_bounds(rp, t: int, prime_bitlen: int, security_level: int):
    """
    Rounded-up full-round lower bounds for a scalar or an array of `rp`.

    Returns (stat, interp, grob_1, grob_2). `stat` does not depend on `rp`
    and is returned as a plain int; the others follow the shape of `rp`.
    """
    rp = np.asarray(rp, dtype=np.float32)
    t_f = np.float32(t)
    n = np.float32(prime_bitlen)
    m = np.float32(security_level)

    # Statistical: the field is "large" when M <= (n - 3) * (t + 1)
    if m <= (n - np.float32(3.0)) * (t_f + np.float32(1.0)):
        rf_stat = STAT_RF_LARGE_FIELD
    else:
        rf_stat = STAT_RF_SMALL_FIELD

    # Interpolation
    rf_interp = np.float32(0.43) * m + np.log2(t_f) - rp
    # Groebner basis, two estimates
    rf_grob_1 = np.float32(0.21) * n - rp
    rf_grob_2 = (np.float32(0.14) * n - np.float32(1.0) - rp) / (t_f - np.float32(1.0))

    return (
        rf_stat,
        np.ceil(rf_interp).astype(np.int64),
        np.ceil(rf_grob_1).astype(np.int64),
        np.ceil(rf_grob_2).astype(np.int64),
    )


def security_bounds(
    rp: int,
    t: int,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
) -> Tuple[int, int, int, int]:
    """
    The four full-round lower bounds for `rp` partial rounds at width `t`.

    Args:
        rp: Partial-round count
        t: Permutation width, > 1
        prime_bitlen: Field modulus bit length (n)
        security_level: Target security in bits (M)

    Returns:
        (statistical, interpolation, groebner_1, groebner_2), each already
        rounded up to an integer
    """
    check_width(t)
    return tuple(int(b) for b in _rounded_bounds(rp, t, prime_bitlen, security_level))


@lru_cache(maxsize=4096)
def _min_full_rounds(rp: int, t: int, prime_bitlen: int, security_level: int) -> int:
    return max(security_bounds(rp, t, prime_bitlen, security_level))


def round_numbers_are_secure(
    rf: int,
    rp: int,
    t: int,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
) -> bool:
    """True if (rf, rp) satisfies all four security inequalities for width t."""
    check_width(t)
    return rf >= _min_full_rounds(int(rp), int(t), prime_bitlen, security_level)


# --- Round search ---


def apply_security_margin(rf: int, rp: int) -> Tuple[int, int]:
    """Add two full rounds and round 7.5% extra partial rounds up (float32)."""
    rp_margin = np.ceil(MARGIN_PARTIAL_FACTOR * np.float32(rp))
    return rf + MARGIN_FULL_ROUNDS, int(rp_margin)


def _is_improvement(cost: int, rf: int, best_cost: Optional[int], best_rf: int) -> bool:
    # Ties go to the candidate with fewer full rounds than the stored best.
    if best_cost is None:
        return True
    return cost < best_cost or (cost == best_cost and rf < best_rf)


def _exhausted(t: int, prime_bitlen: int, security_level: int):
    msg = (
        f"No secure round numbers for t={t} (n={prime_bitlen}, M={security_level}) "
        f"with R_F <= {RF_SEARCH_MAX} and R_P < {RP_SEARCH_MAX}"
    )
    return SearchSpaceExhaustedError(msg)


def _report(t, best, pre_margin, prime_bitlen, security_level):
    rf, rp = best
    print(f"t={t}: R_F={rf}, R_P={rp} (S-boxes: {n_sboxes(rf, rp, t)})")
    stat, interp, grob_1, grob_2 = security_bounds(
        pre_margin[1], t, prime_bitlen, security_level
    )
    print(
        f"  bounds at R_P={pre_margin[1]}: stat={stat} interp={interp} "
        f"grob1={grob_1} grob2={grob_2}"
    )


def calc_round_numbers(
    t: int,
    security_margin: bool,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
    verbose: bool = False,
) -> RoundNumbers:
    """
    Find the round numbers with the fewest S-boxes for width `t`.

    Scans every even R_F in [2, 1000] (outer) and every R_P in [4, 199]
    (inner). A secure pair gets the optional margin applied before its cost
    is compared, and the security check always uses the pre-margin values.

    Args:
        t: Permutation width, > 1
        security_margin: Add the +2 R_F / +7.5% R_P margin
        prime_bitlen: Field modulus bit length (n)
        security_level: Target security in bits (M)
        verbose: Print the winning pair and the bounds that pinned it

    Returns:
        RoundNumbers(full_rounds, partial_rounds)

    Raises:
        InvalidWidthError: t is not an integer > 1
        SearchSpaceExhaustedError: no secure pair in the search space
    """
    check_width(t)

    best_rf, best_rp, best_cost = 0, 0, None
    pre_margin = (0, 0)

    for rf_test in range(RF_SEARCH_MIN, RF_SEARCH_MAX + 1, 2):
        for rp_test in range(RP_SEARCH_MIN, RP_SEARCH_MAX):
            if not round_numbers_are_secure(
                rf_test, rp_test, t, prime_bitlen, security_level
            ):
                continue
            if security_margin:
                rf, rp = apply_security_margin(rf_test, rp_test)
            else:
                rf, rp = rf_test, rp_test
            cost = n_sboxes(rf, rp, t)
            if _is_improvement(cost, rf, best_cost, best_rf):
                best_rf, best_rp, best_cost = rf, rp, cost
                pre_margin = (rf_test, rp_test)

    if best_cost is None:
        raise _exhausted(t, prime_bitlen, security_level)

    if verbose:
        _report(t, (best_rf, best_rp), pre_margin, prime_bitlen, security_level)
    return RoundNumbers(best_rf, best_rp)


def calc_round_numbers_vectorized(
    t: int,
    security_margin: bool,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
) -> RoundNumbers:
    """
    Same result as calc_round_numbers, evaluated on the whole grid at once.

    The required R_F depends only on R_P, so one bound vector decides the
    whole grid. Within a row (fixed R_F) cost grows strictly with R_P, so the
    first secure R_P is that row's optimum; row optima are then reduced in
    scan order with the same tie-break.
    """
    check_width(t)

    rf_values = np.arange(RF_SEARCH_MIN, RF_SEARCH_MAX + 1, 2, dtype=np.int64)
    rp_values = np.arange(RP_SEARCH_MIN, RP_SEARCH_MAX, dtype=np.int64)

    stat, interp, grob_1, grob_2 = _rounded_bounds(
        rp_values, t, prime_bitlen, security_level
    )
    rf_min = np.maximum(np.maximum(interp, grob_1), np.maximum(grob_2, stat))

    secure = rf_values[:, None] >= rf_min[None, :]
    first_secure = secure.argmax(axis=1)

    best_rf, best_rp, best_cost = 0, 0, None
    for row in np.flatnonzero(secure.any(axis=1)):
        rf_test = int(rf_values[row])
        rp_test = int(rp_values[first_secure[row]])
        if security_margin:
            rf, rp = apply_security_margin(rf_test, rp_test)
        else:
            rf, rp = rf_test, rp_test
        cost = n_sboxes(rf, rp, t)
        if _is_improvement(cost, rf, best_cost, best_rf):
            best_rf, best_rp, best_cost = rf, rp, cost

    if best_cost is None:
        raise _exhausted(t, prime_bitlen, security_level)
    return RoundNumbers(best_rf, best_rp)
