"""Command-line entry point for atm-reconcile."""

import argparse
import logging
import sys
from pathlib import Path

from atm_recon.batch import reconcile_files
from atm_recon.config import (
    LOG_FORMATS,
    InputConfig,
    MatchingConfig,
    OutputConfig,
    ReconcileConfig,
    parse_output_format,
    parse_policy,
)
from atm_recon.exceptions import ConfigurationError
from atm_recon.logging import setup_logging
from atm_recon.models import BlockedWithdrawalPolicy, OutputFormat

logger = logging.getLogger(__name__)

DESCRIPTION = """\
Reconcile cash purchases with ATM withdrawals.

Each input file holds the transactions of one account in the layout
"id, name, amount, date, is_cash, is_atm". Every cash purchase is matched
against the most recent earlier ATM withdrawals; the output lists each
reconciliation with its parent withdrawal, or "null" when no withdrawal
was available.
"""


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="atm-reconcile",
        description=DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "files",
        nargs="*",
        type=Path,
        help="CSV files containing cash purchase and ATM withdrawal records",
    )
    parser.add_argument(
        "--output-dir",
        type=Path,
        default=Path("output"),
        help="Directory for reconciled files (default: output)",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=[f.value.lower() for f in OutputFormat],
        default="csv",
        help="Output format (default: csv)",
    )
    parser.add_argument(
        "--exact-amounts",
        action="store_true",
        help="Write exact decimal amounts instead of rounding to whole units",
    )
    parser.add_argument(
        "--pretty",
        action="store_true",
        help="Pretty-print JSON output",
    )
    parser.add_argument(
        "--policy",
        type=str,
        choices=[p.value.lower() for p in BlockedWithdrawalPolicy],
        default="discard",
        help="When a withdrawal is not older than the newest purchase: discard it "
        "and continue, or halt matching (default: discard)",
    )
    parser.add_argument(
        "--delimiter",
        type=str,
        default=",",
        help="Input field delimiter (default: ',')",
    )
    parser.add_argument(
        "--no-header",
        action="store_true",
        help="Input files have no header line",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of files to reconcile concurrently (default: 1)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Log level (default: INFO)",
    )
    parser.add_argument(
        "--log-format",
        type=str,
        choices=list(LOG_FORMATS),
        default="standard",
        help="Log format (default: standard)",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ReconcileConfig:
    """Translate parsed arguments into a validated configuration."""
    return ReconcileConfig(
        input=InputConfig(delimiter=args.delimiter, skip_header=not args.no_header),
        output=OutputConfig(
            output_dir=args.output_dir,
            format=parse_output_format(args.format),
            whole_amounts=not args.exact_amounts,
            pretty_json=args.pretty,
        ),
        matching=MatchingConfig(blocked_withdrawal_policy=parse_policy(args.policy)),
        workers=args.workers,
        log_level=args.log_level,
        log_format=args.log_format,
    ).validate()


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.files:
        parser.print_help()
        return 0

    try:
        config = config_from_args(args)
    except ConfigurationError as e:
        parser.error(str(e))

    setup_logging(level=config.log_level, format_type=config.log_format)

    result = reconcile_files(args.files, config)

    logger.info("=" * 60)
    logger.info("Reconciliation complete: %d succeeded, %d failed",
                len(result.succeeded), len(result.failed))
    for file_result in result.succeeded:
        if file_result.output is not None:
            logger.info("  %s -> %s", file_result.source, file_result.output)
    for file_result in result.failed:
        logger.error("  %s: %s", file_result.source, file_result.error)
    logger.info("=" * 60)

    return 0 if result.ok else 1


if __name__ == "__main__":
    sys.exit(main())
