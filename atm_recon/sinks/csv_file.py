"""CSV file sink writing the legacy reconciled layout."""

import logging
from pathlib import Path

from atm_recon.exceptions import SinkError
from atm_recon.models import Reconciliation
from atm_recon.sinks.serialization import format_reconciliation

logger = logging.getLogger(__name__)

HEADER = "id, name, parent, amount"
SUFFIX = ".reconciled.csv"


class CsvFileSink:
    """Output reconciliations to ``<name>.reconciled.csv`` files."""

    def __init__(self, output_dir: str | Path, whole_amounts: bool = True) -> None:
        """Initialize CSV file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write CSV files. Created on first write.
        whole_amounts : bool
            Round amounts to whole units like the legacy output.
        """
        self.output_dir = Path(output_dir)
        self.whole_amounts = whole_amounts
        self._counts: dict[str, int] = {}

    def write_batch(self, name: str, records: list[Reconciliation]) -> Path:
        """Write one batch of reconciliations to its own file."""
        file_path = self.output_dir / f"{name}{SUFFIX}"

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                f.write(HEADER + "\n")
                for record in records:
                    f.write(format_reconciliation(record, self.whole_amounts) + "\n")
        except OSError as e:
            raise SinkError(f"Failed to write {file_path}: {e}") from e

        self._counts[name] = len(records)
        logger.debug("Wrote %d reconciliations to %s", len(records), file_path)
        return file_path

    def close(self) -> None:
        """Log a summary of written files."""
        for name, count in self._counts.items():
            logger.info("%s%s: %d records", name, SUFFIX, count)
