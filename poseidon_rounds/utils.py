"""
Utility functions for building and reporting round-number tables.
"""

from typing import Iterable

import pandas as pd

from .reference_table import ReferenceRow
from .round_numbers import (
    PRIME_BITLEN,
    SECURITY_LEVEL,
    calc_round_numbers,
    depth_cost,
    n_sboxes,
    size_cost,
)

TABLE_COLUMNS = ["t", "R_F", "R_P", "sbox_cost", "size_cost", "depth_cost"]


def round_numbers_table(
    t_values: Iterable[int],
    security_margin: bool = True,
    prime_bitlen: int = PRIME_BITLEN,
    security_level: int = SECURITY_LEVEL,
    verbose: bool = False,
) -> pd.DataFrame:
    """
    Compute round numbers and their costs for several widths.

    Args:
        t_values: Widths to evaluate, each > 1
        security_margin: Apply the +2 R_F / +7.5% R_P margin
        prime_bitlen: Field modulus bit length (n)
        security_level: Target security in bits (M)
        verbose: Print each width's result as it is computed

    Returns:
        DataFrame with one row per width and columns TABLE_COLUMNS
    """
    records = []
    for t in t_values:
        rf, rp = calc_round_numbers(
            t, security_margin, prime_bitlen, security_level, verbose=verbose
        )
        records.append(
            {
                "t": t,
                "R_F": rf,
                "R_P": rp,
                "sbox_cost": n_sboxes(rf, rp, t),
                "size_cost": size_cost(rf, rp, t, prime_bitlen),
                "depth_cost": depth_cost(rf, rp),
            }
        )
    return pd.DataFrame(records, columns=TABLE_COLUMNS)


def table_to_reference_rows(df: pd.DataFrame):
    """Convert a round_numbers_table() frame to ReferenceRow tuples."""
    return [
        ReferenceRow(
            int(row.t), int(row.R_F), int(row.R_P), int(row.sbox_cost), int(row.size_cost)
        )
        for row in df.itertuples(index=False)
    ]


def print_round_table(df: pd.DataFrame, security_margin: bool):
    """
    Print a round-number table.

    Args:
        df: Output of round_numbers_table()
        security_margin: Whether the margin was applied (shown in the title)
    """
    if df.empty:
        print("No data recorded.")
        return

    title = "with" if security_margin else "without"
    print(f"Poseidon round numbers ({title} security margin)")
    print("-" * 64)
    print(df.to_string(index=False))
    print("-" * 64)


def save_to_csv(df: pd.DataFrame, filename: str):
    """
    Save a round-number table to a CSV file.

    Args:
        df: Output of round_numbers_table()
        filename: Output CSV filename
    """
    df.to_csv(filename, index=False)
    print(f"Data saved to {filename}")
