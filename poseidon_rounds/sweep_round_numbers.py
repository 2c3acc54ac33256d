#!/usr/bin/env python3
"""
Sweep utility for Poseidon round numbers.

Computes (R_F, R_P) over a range of widths, prints the table, and optionally
saves it as CSV, writes it in the reference-table format, or checks it
against a reference table.

Usage:
    python3 -m poseidon_rounds.sweep_round_numbers --t-min 2 --t-max 16
    python3 -m poseidon_rounds.sweep_round_numbers --validate
"""

import argparse
import sys

from .reference_table import (
    DEFAULT_REFERENCE_PATH,
    compare_with_reference,
    load_reference_table,
    write_reference_table,
)
from .round_numbers import PRIME_BITLEN, SECURITY_LEVEL, RoundNumbersError
from .utils import (
    print_round_table,
    round_numbers_table,
    save_to_csv,
    table_to_reference_rows,
)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Poseidon round-number sweep")
    parser.add_argument("--t-min", type=int, default=2, help="Smallest width")
    parser.add_argument("--t-max", type=int, default=16, help="Largest width")
    parser.add_argument(
        "--no-margin", action="store_true", help="Skip the security margin"
    )
    parser.add_argument("--prime-bitlen", type=int, default=PRIME_BITLEN)
    parser.add_argument("--security-level", type=int, default=SECURITY_LEVEL)
    parser.add_argument("--outfile", type=str, default=None, help="Output CSV file")
    parser.add_argument(
        "--write-reference",
        type=str,
        default=None,
        help="Write the sweep in reference-table format to this path",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Check the reference table instead of sweeping",
    )
    parser.add_argument(
        "--reference",
        type=str,
        default=str(DEFAULT_REFERENCE_PATH),
        help="Reference table used by --validate",
    )
    parser.add_argument("--quiet", action="store_true")
    return parser


def run_validation(args) -> int:
    rows = load_reference_table(args.reference)
    mismatches = compare_with_reference(
        rows, not args.no_margin, args.prime_bitlen, args.security_level
    )
    for line in mismatches:
        print(f"MISMATCH {line}")
    if not args.quiet:
        print(f"Checked {len(rows)} rows from {args.reference}: {len(mismatches)} mismatches")
    return 1 if mismatches else 0


def run_sweep(args) -> int:
    if args.t_max < args.t_min:
        print(f"Error: --t-max ({args.t_max}) is below --t-min ({args.t_min})")
        return 1

    security_margin = not args.no_margin
    df = round_numbers_table(
        range(args.t_min, args.t_max + 1),
        security_margin,
        args.prime_bitlen,
        args.security_level,
    )
    if not args.quiet:
        print_round_table(df, security_margin)
    if args.outfile:
        save_to_csv(df, args.outfile)
    if args.write_reference:
        write_reference_table(
            table_to_reference_rows(df),
            args.write_reference,
            security_margin,
            args.prime_bitlen,
            args.security_level,
        )
        print(f"Reference table written to {args.write_reference}")
    return 0


def main(argv=None):
    """Main entry point."""
    args = build_parser().parse_args(argv)
    try:
        status = run_validation(args) if args.validate else run_sweep(args)
    except (RoundNumbersError, FileNotFoundError) as e:
        print(f"Error: {e}")
        sys.exit(1)
    sys.exit(status)


if __name__ == "__main__":
    main()
