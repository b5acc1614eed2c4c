"""Console sink for debugging and quick inspection."""

from atm_recon.models import Reconciliation
from atm_recon.sinks.csv_file import HEADER
from atm_recon.sinks.serialization import format_reconciliation


class ConsoleSink:
    """Output reconciliations to console (stdout)."""

    def __init__(self, whole_amounts: bool = True, max_records: int | None = None) -> None:
        """Initialize console sink.

        Parameters
        ----------
        whole_amounts : bool
            Round amounts to whole units like the legacy output.
        max_records : int | None
            Maximum records to print per batch (None for all).
        """
        self.whole_amounts = whole_amounts
        self.max_records = max_records
        self._counts: dict[str, int] = {}

    def write_batch(self, name: str, records: list[Reconciliation]) -> None:
        """Print a batch of reconciliations in the legacy line format."""
        print(f"\n{'='*60}")
        print(f"Batch: {name} ({len(records)} records)")
        print("=" * 60)
        print(HEADER)

        display_records = records[: self.max_records] if self.max_records else records

        for record in display_records:
            print(format_reconciliation(record, self.whole_amounts))

        if self.max_records and len(records) > self.max_records:
            print(f"... and {len(records) - self.max_records} more records")

        self._counts[name] = self._counts.get(name, 0) + len(records)

    def close(self) -> None:
        """Print summary."""
        print(f"\n{'='*60}")
        print("Console Sink Summary")
        print("=" * 60)
        for name, count in self._counts.items():
            print(f"  {name}: {count} records")
