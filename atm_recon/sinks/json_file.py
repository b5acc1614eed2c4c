"""JSON file sink for exporting reconciliations to files."""

import json
import logging
from pathlib import Path
from typing import Any

from atm_recon.exceptions import SinkError
from atm_recon.sinks.serialization import to_dict

logger = logging.getLogger(__name__)

SUFFIX = ".reconciled.json"


class JsonFileSink:
    """Output reconciliations to JSON files."""

    def __init__(self, output_dir: str | Path, pretty: bool = False) -> None:
        """Initialize JSON file sink.

        Parameters
        ----------
        output_dir : str | Path
            Directory to write JSON files. Created on first write.
        pretty : bool
            Pretty-print JSON output.
        """
        self.output_dir = Path(output_dir)
        self.pretty = pretty
        self._counts: dict[str, int] = {}

    def write_batch(self, name: str, records: list[Any]) -> Path:
        """Write a batch of records to a JSON file."""
        file_path = self.output_dir / f"{name}{SUFFIX}"

        data = [to_dict(record) for record in records]

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, "w", encoding="utf-8") as f:
                if self.pretty:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                else:
                    json.dump(data, f, ensure_ascii=False)
        except OSError as e:
            raise SinkError(f"Failed to write {file_path}: {e}") from e

        self._counts[name] = len(records)
        return file_path

    def close(self) -> None:
        """Log a summary of written files."""
        logger.info("JSON files written to: %s", self.output_dir)
        for name, count in self._counts.items():
            logger.info("  %s: %d records", name, count)
