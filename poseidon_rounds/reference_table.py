"""
Ground-truth round-number table and cross-checking against it.

File format: leading lines starting with '#' are comments, then one row per
width with five space-separated integers:

    t R_F R_P sbox_cost size_cost

where sbox_cost = t * R_F + R_P and size_cost = sbox_cost * n. The shipped
table was computed with the security margin enabled.
"""

from pathlib import Path
from typing import Iterable, List, NamedTuple, Union

from .round_numbers import (
    PRIME_BITLEN,
    SECURITY_LEVEL,
    RoundNumbersError,
    calc_round_numbers,
    n_sboxes,
    size_cost,
)

DEFAULT_REFERENCE_PATH = Path(__file__).resolve().parent / "parameters" / "round_numbers.txt"

REFERENCE_HEADER = [
    "# Poseidon round numbers (t R_F R_P sbox_cost size_cost)",
    "# n = {n} bits, M = {m} bits, security margin: {margin}",
]


class ReferenceTableError(RoundNumbersError):
    """Malformed reference table."""


class ReferenceRow(NamedTuple):
    t: int
    full_rounds: int
    partial_rounds: int
    sbox_cost: int
    size_cost: int


def parse_reference_line(line: str) -> ReferenceRow:
    """Parse one data line of the table."""
    fields = line.split()
    if len(fields) != 5:
        msg = f"Line does not contain 5 values: {line!r}"
        raise ReferenceTableError(msg)
    try:
        nums = [int(f) for f in fields]
    except ValueError as e:
        msg = f"Failed to parse line as integers: {line!r}"
        raise ReferenceTableError(msg) from e
    return ReferenceRow(*nums)


def load_reference_table(
    path: Union[str, Path] = DEFAULT_REFERENCE_PATH,
) -> List[ReferenceRow]:
    """
    Read a round-number table.

    Only the comment lines before the first data row are skipped; blank
    lines are ignored anywhere.

    Raises:
        FileNotFoundError: path does not exist
        ReferenceTableError: a data line is malformed or the table is empty
    """
    with open(path, "r") as f:
        lines = [line.strip() for line in f]

    start = 0
    while start < len(lines) and (lines[start].startswith("#") or not lines[start]):
        start += 1

    rows = [parse_reference_line(line) for line in lines[start:] if line]
    if not rows:
        msg = f"No rows were parsed from {path}"
        raise ReferenceTableError(msg)
    return rows


def compare_with_reference(
    rows: Iterable[ReferenceRow],
    security_margin: bool = True,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
) -> List[str]:
    """
    Recompute every row and describe each disagreement.

    Returns:
        List of mismatch descriptions, empty when the table agrees
    """
    mismatches = []
    for row in rows:
        rf, rp = calc_round_numbers(
            row.t, security_margin, prime_bitlen, security_level
        )
        computed = ReferenceRow(
            row.t,
            rf,
            rp,
            n_sboxes(rf, rp, row.t),
            size_cost(rf, rp, row.t, prime_bitlen),
        )
        for field in ReferenceRow._fields[1:]:
            expected = getattr(row, field)
            actual = getattr(computed, field)
            if expected != actual:
                mismatches.append(
                    f"t={row.t}: {field} differs (table {expected}, computed {actual})"
                )
    return mismatches


def write_reference_table(
    rows: Iterable[ReferenceRow],
    path: Union[str, Path],
    security_margin: bool = True,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
):
    """Write rows in the table format, with the standard comment header."""
    header = [
        h.format(n=prime_bitlen, m=security_level, margin=security_margin)
        for h in REFERENCE_HEADER
    ]
    with open(path, "w") as f:
        for line in header:
            f.write(line + "\n")
        for row in rows:
            f.write(" ".join(str(v) for v in row) + "\n")
