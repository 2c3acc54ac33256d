import pytest
import sys
import os

sys.path.append(os.path.join(os.path.dirname(__file__), ".."))

from poseidon_rounds.round_numbers import (
    RF_SEARCH_MAX,
    RF_SEARCH_MIN,
    RP_SEARCH_MAX,
    RP_SEARCH_MIN,
    InvalidWidthError,
    SearchSpaceExhaustedError,
    apply_security_margin,
    calc_round_numbers,
    calc_round_numbers_vectorized,
    depth_cost,
    n_sboxes,
    round_numbers_are_secure,
    security_bounds,
    size_cost,
)


def test_bounds_at_t3():
    """Bounds for t=3, R_P=51 at n=256, M=128."""
    stat, interp, grob_1, grob_2 = security_bounds(51, 3)
    assert stat == 6
    # 0.43 * 128 + log2(3) - 51 = 5.625...
    assert interp == 6
    # 0.21 * 256 - 51 = 2.76
    assert grob_1 == 3
    # (0.14 * 256 - 1 - 51) / 2 = -8.58
    assert grob_2 == -8


def test_statistical_bound_switches_for_small_fields():
    # M <= (n - 3) * (t + 1) fails for n=16, t=2: 13 * 3 = 39 < 128
    stat, _, _, _ = security_bounds(100, 2, prime_bitlen=16)
    assert stat == 10
    stat, _, _, _ = security_bounds(100, 2)
    assert stat == 6


@pytest.mark.parametrize(
    "rf,rp,t,expected",
    [
        (6, 51, 3, True),
        (6, 50, 3, False),  # interpolation bound is 7
        (4, 100, 3, False),  # statistical bound is 6
        (8, 49, 3, True),
        (6, 52, 4, True),
        (6, 51, 4, False),
    ],
)
def test_round_numbers_are_secure(rf, rp, t, expected):
    assert round_numbers_are_secure(rf, rp, t) is expected


@pytest.mark.parametrize("t", [1, 0, -3])
def test_width_below_two_rejected(t):
    with pytest.raises(InvalidWidthError):
        calc_round_numbers(t, True)
    with pytest.raises(InvalidWidthError):
        round_numbers_are_secure(8, 57, t)


@pytest.mark.parametrize("t", [2.0, "3", True, None])
def test_non_integer_width_rejected(t):
    with pytest.raises(InvalidWidthError):
        calc_round_numbers(t, False)


def test_invalid_width_is_a_value_error():
    with pytest.raises(ValueError):
        calc_round_numbers_vectorized(1, False)


def test_cost_functions():
    assert n_sboxes(8, 55, 3) == 79
    assert size_cost(8, 55, 3) == 79 * 256
    assert size_cost(8, 55, 3, prime_bitlen=64) == 79 * 64
    assert depth_cost(8, 55) == 63


def test_margin_rounding_uses_float32():
    """1.075 * 40 is 43 + 2^-19 exactly; float32 ties to even and gives 43."""
    assert apply_security_margin(6, 40) == (8, 43)
    assert apply_security_margin(6, 51) == (8, 55)  # 54.825
    assert apply_security_margin(6, 54) == (8, 59)  # 58.05


@pytest.mark.parametrize("t", [2, 3, 5, 12, 24])
@pytest.mark.parametrize("security_margin", [False, True])
def test_deterministic(t, security_margin):
    first = calc_round_numbers(t, security_margin)
    for _ in range(3):
        assert calc_round_numbers(t, security_margin) == first


@pytest.mark.parametrize("t", [2, 3, 4, 8, 9, 16, 17, 31, 32, 63])
def test_no_margin_result_is_secure_and_minimal(t):
    """Brute force: no secure pair in the search space is strictly cheaper."""
    rf, rp = calc_round_numbers(t, False)
    assert rf % 2 == 0
    assert round_numbers_are_secure(rf, rp, t)

    best_cost = n_sboxes(rf, rp, t)
    for rf_test in range(RF_SEARCH_MIN, RF_SEARCH_MAX + 1, 2):
        if t * rf_test > best_cost:
            break
        for rp_test in range(RP_SEARCH_MIN, RP_SEARCH_MAX):
            if round_numbers_are_secure(rf_test, rp_test, t):
                assert (
                    n_sboxes(rf_test, rp_test, t) >= best_cost
                ), f"t={t}: ({rf_test}, {rp_test}) beats ({rf}, {rp})"


@pytest.mark.parametrize("t", [2, 3, 5, 9, 17, 25, 37])
def test_margin_applied_on_top_of_minimal_pair(t):
    """The margin result is the margin applied to the secure minimal pair."""
    rf_min, rp_min = calc_round_numbers(t, False)
    rf, rp = calc_round_numbers(t, True)

    assert (rf, rp) == apply_security_margin(rf_min, rp_min)
    assert round_numbers_are_secure(rf - 2, rp_min, t)
    assert rf >= rf_min
    assert rp > rp_min


@pytest.mark.parametrize("t", list(range(2, 41)) + [63, 64, 100])
@pytest.mark.parametrize("security_margin", [False, True])
def test_vectorized_matches_sequential(t, security_margin):
    assert calc_round_numbers_vectorized(t, security_margin) == calc_round_numbers(
        t, security_margin
    )


def test_retargeted_security_level_needs_more_rounds():
    rf_128, rp_128 = calc_round_numbers(3, False)
    rf_256, rp_256 = calc_round_numbers(3, False, security_level=256)
    assert n_sboxes(rf_256, rp_256, 3) > n_sboxes(rf_128, rp_128, 3)
    assert round_numbers_are_secure(rf_256, rp_256, 3, security_level=256)


def test_search_space_exhausted():
    """An unreachable security level must not come back as (0, 0)."""
    with pytest.raises(SearchSpaceExhaustedError, match="t=3"):
        calc_round_numbers(3, True, security_level=10000)
    with pytest.raises(SearchSpaceExhaustedError):
        calc_round_numbers_vectorized(3, True, security_level=10000)


def test_verbose_report(capsys):
    calc_round_numbers(3, True, verbose=True)
    out = capsys.readouterr().out
    assert "t=3: R_F=8, R_P=55 (S-boxes: 79)" in out
    assert "bounds at R_P=51" in out
