"""Configuration management for atm-reconcile."""

from dataclasses import dataclass, field
from pathlib import Path

from atm_recon.exceptions import ConfigurationError
from atm_recon.models.enums import BlockedWithdrawalPolicy, OutputFormat

LOG_FORMATS = ("standard", "json")


@dataclass
class InputConfig:
    """Input file parsing configuration."""

    delimiter: str = ","
    skip_header: bool = True
    encoding: str = "utf-8"


@dataclass
class OutputConfig:
    """Output configuration."""

    output_dir: Path = field(default_factory=lambda: Path("output"))
    format: OutputFormat = OutputFormat.CSV
    whole_amounts: bool = True  # Legacy rendering: amounts rounded to whole units
    pretty_json: bool = False


@dataclass
class MatchingConfig:
    """Matching loop configuration."""

    blocked_withdrawal_policy: BlockedWithdrawalPolicy = BlockedWithdrawalPolicy.DISCARD


@dataclass
class ReconcileConfig:
    """Main configuration for atm-reconcile."""

    input: InputConfig = field(default_factory=InputConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    matching: MatchingConfig = field(default_factory=MatchingConfig)
    workers: int = 1
    log_level: str = "INFO"
    log_format: str = "standard"

    def validate(self) -> "ReconcileConfig":
        """Check value ranges, returning self so calls can be chained.

        Raises
        ------
        ConfigurationError
            If any setting is out of range.
        """
        if self.workers < 1:
            raise ConfigurationError(f"workers must be at least 1, got {self.workers}")
        if len(self.input.delimiter) != 1:
            raise ConfigurationError(
                f"delimiter must be a single character, got {self.input.delimiter!r}"
            )
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {', '.join(LOG_FORMATS)}, got {self.log_format!r}"
            )
        self.output.format = parse_output_format(self.output.format)
        self.matching.blocked_withdrawal_policy = parse_policy(
            self.matching.blocked_withdrawal_policy
        )
        return self

    @classmethod
    def from_env(cls) -> "ReconcileConfig":
        """Create config from environment variables."""
        import os

        input_config = InputConfig(
            delimiter=os.getenv("RECONCILE_DELIMITER", ","),
            skip_header=os.getenv("RECONCILE_SKIP_HEADER", "true").lower() == "true",
        )

        output = OutputConfig(
            output_dir=Path(os.getenv("RECONCILE_OUTPUT_DIR", "output")),
            format=parse_output_format(os.getenv("RECONCILE_OUTPUT_FORMAT", "csv")),
            whole_amounts=os.getenv("RECONCILE_WHOLE_AMOUNTS", "true").lower() == "true",
            pretty_json=os.getenv("RECONCILE_PRETTY_JSON", "false").lower() == "true",
        )

        matching = MatchingConfig(
            blocked_withdrawal_policy=parse_policy(os.getenv("RECONCILE_POLICY", "discard")),
        )

        workers_str = os.getenv("RECONCILE_WORKERS", "1")
        try:
            workers = int(workers_str)
        except ValueError as e:
            raise ConfigurationError(f"RECONCILE_WORKERS is not an integer: {workers_str!r}") from e

        return cls(
            input=input_config,
            output=output,
            matching=matching,
            workers=workers,
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "standard"),
        ).validate()


def parse_output_format(value: str | OutputFormat) -> OutputFormat:
    """Resolve an output format name, case-insensitively."""
    try:
        return OutputFormat(value.upper() if isinstance(value, str) else value)
    except ValueError as e:
        choices = ", ".join(f.value.lower() for f in OutputFormat)
        raise ConfigurationError(f"Unknown output format {value!r} (expected one of {choices})") from e


def parse_policy(value: str | BlockedWithdrawalPolicy) -> BlockedWithdrawalPolicy:
    """Resolve a blocked-withdrawal policy name, case-insensitively."""
    try:
        return BlockedWithdrawalPolicy(value.upper() if isinstance(value, str) else value)
    except ValueError as e:
        choices = ", ".join(p.value.lower() for p in BlockedWithdrawalPolicy)
        raise ConfigurationError(f"Unknown policy {value!r} (expected one of {choices})") from e
