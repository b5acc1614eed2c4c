"""Reconcile one or more transaction files.

Each file is an independent batch: it owns its transactions and stacks, so
files can be reconciled concurrently. A file that cannot be read, parsed or
written is reported and skipped without affecting the others. Invariant
violations are defects and propagate to the caller.
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from atm_recon.config import ReconcileConfig
from atm_recon.exceptions import MalformedInputError, SinkError
from atm_recon.models import OutputFormat
from atm_recon.reconciler import Reconciler, ReconciliationStats
from atm_recon.sinks import Sink, create_sink
from atm_recon.sources.csv_file import read_transactions
from atm_recon.store.stacks import ChronologicalStacks

logger = logging.getLogger(__name__)


@dataclass
class FileResult:
    """Outcome of reconciling a single input file."""

    source: Path
    output: Path | None = None
    transactions: int = 0
    reconciliations: int = 0
    stats: ReconciliationStats | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class BatchResult:
    """Outcome of a multi-file run."""

    results: list[FileResult] = field(default_factory=list)

    @property
    def succeeded(self) -> list[FileResult]:
        return [r for r in self.results if r.ok]

    @property
    def failed(self) -> list[FileResult]:
        return [r for r in self.results if not r.ok]

    @property
    def ok(self) -> bool:
        return not self.failed


def output_name(path: Path) -> str:
    """Batch name used for output files: the input file name without ``.csv``."""
    name = path.name
    return name[: -len(".csv")] if name.lower().endswith(".csv") else name


def reconcile_file(path: str | Path, config: ReconcileConfig, sink: Sink) -> FileResult:
    """Read, reconcile and write one transaction file.

    Parameters
    ----------
    path : str | Path
        Legacy CSV transaction file.
    config : ReconcileConfig
        Parsing, matching and output settings.
    sink : Sink
        Destination for the reconciliations.

    Returns
    -------
    FileResult
        Counts and output location for the file.

    Raises
    ------
    MalformedInputError, OSError, SinkError
        When the file cannot be processed.
    """
    path = Path(path)
    t0 = time.perf_counter()

    transactions = read_transactions(path, config.input)
    stacks = ChronologicalStacks.from_transactions(transactions)
    logger.debug("%s: %s", path, stacks.summary())

    reconciler = Reconciler(config.matching.blocked_withdrawal_policy)
    reconciliations = reconciler.reconcile(stacks)
    output = sink.write_batch(output_name(path), reconciliations)

    logger.info(
        "Reconciled %s: %d transactions -> %d records in %.3fs",
        path,
        len(transactions),
        len(reconciliations),
        time.perf_counter() - t0,
        extra={
            "source": str(path),
            "output": str(output) if output is not None else None,
            "transactions": len(transactions),
            "records": len(reconciliations),
        },
    )
    return FileResult(
        source=path,
        output=output,
        transactions=len(transactions),
        reconciliations=len(reconciliations),
        stats=reconciler.last_stats,
    )


def _reconcile_isolated(path: Path, config: ReconcileConfig, sink: Sink) -> FileResult:
    try:
        return reconcile_file(path, config, sink)
    except (OSError, MalformedInputError, SinkError) as e:
        logger.error("Unable to process file %s: %s", path, e, extra={"source": str(path)})
        return FileResult(source=path, error=str(e))


def reconcile_files(
    paths: Iterable[str | Path],
    config: ReconcileConfig | None = None,
) -> BatchResult:
    """Reconcile several files, isolating failures per file.

    Parameters
    ----------
    paths : Iterable[str | Path]
        Input files, one batch each.
    config : ReconcileConfig | None
        Run configuration; defaults apply when omitted.

    Returns
    -------
    BatchResult
        Per-file results in input order.
    """
    config = (config or ReconcileConfig()).validate()
    paths = [Path(p) for p in paths]
    sink = create_sink(config.output)

    workers = min(config.workers, len(paths)) if paths else 1
    if workers > 1 and config.output.format == OutputFormat.CONSOLE:
        logger.warning("Console output is written sequentially; ignoring workers=%d", workers)
        workers = 1

    try:
        if workers <= 1:
            results = [_reconcile_isolated(path, config, sink) for path in paths]
        else:
            by_index: dict[int, FileResult] = {}
            with ThreadPoolExecutor(max_workers=workers) as executor:
                futures = {
                    executor.submit(_reconcile_isolated, path, config, sink): index
                    for index, path in enumerate(paths)
                }
                for future in as_completed(futures):
                    by_index[futures[future]] = future.result()
            results = [by_index[i] for i in range(len(paths))]
    finally:
        sink.close()

    batch = BatchResult(results=results)
    if batch.failed:
        logger.warning("%d of %d files failed", len(batch.failed), len(paths))
    return batch
