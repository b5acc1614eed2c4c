#!/usr/bin/env python3
"""Generate sample transaction files for validation.

Writes legacy-format CSV inputs (one account per file) that can be fed to
``atm-reconcile`` for manual validation and testing.
"""

import argparse
import sys
from datetime import date
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from atm_recon.generators import TransactionGenerator
from atm_recon.sources.csv_file import write_transactions


def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Generate sample transaction CSV files")
    parser.add_argument(
        "--accounts",
        type=int,
        default=3,
        help="Number of account files to generate (default: 3)",
    )
    parser.add_argument(
        "--start",
        type=date.fromisoformat,
        default=date(2024, 1, 1),
        help="First transaction date, YYYY-MM-DD (default: 2024-01-01)",
    )
    parser.add_argument(
        "--end",
        type=date.fromisoformat,
        default=date(2024, 3, 1),
        help="Day after the last transaction date (default: 2024-03-01)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=42,
        help="Random seed for reproducibility (default: 42)",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=project_root / "local",
        help="Directory for generated files (default: local/)",
    )
    args = parser.parse_args()

    if args.end <= args.start:
        parser.error("--end must be after --start")

    print("=" * 60)
    print("Sample Transaction Generator")
    print("=" * 60)
    print(f"Output directory: {args.output_dir}")
    print(f"Seed: {args.seed}")

    for index in range(args.accounts):
        gen = TransactionGenerator(seed=args.seed + index)
        transactions = list(gen.generate_batch(args.start, args.end))
        file_path = args.output_dir / f"account_{index + 1:03d}.csv"
        count = write_transactions(file_path, transactions)
        print(f"Saved {count} transactions to {file_path}")

    print("=" * 60)


if __name__ == "__main__":
    main()
