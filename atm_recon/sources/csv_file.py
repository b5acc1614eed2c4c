"""Legacy CSV transaction files.

Expected layout, one header line followed by one transaction per line::

    id, name, amount, date, is_cash, is_atm
    1, ATM, 100, 2020-01-01, false, true
    2, Groceries, 40, 2020-01-02, true, false

Whitespace anywhere inside a field is ignored.
"""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation, getcontext
from pathlib import Path
from typing import Iterable

from atm_recon.config import InputConfig
from atm_recon.exceptions import MalformedInputError
from atm_recon.models import ReconcilableTransaction

logger = logging.getLogger(__name__)

HEADER = "id, name, amount, date, is_cash, is_atm"
FIELD_COUNT = 6

_WHITESPACE = re.compile(r"\s+")


def _strip(value: str) -> str:
    return _WHITESPACE.sub("", value)


def _parse_flag(value: str) -> bool:
    return value.lower() == "true"


def parse_line(line: str, delimiter: str = ",") -> ReconcilableTransaction:
    """Create a transaction from one input line.

    Parameters
    ----------
    line : str
        Record with format ``id,name,amount,date,is_cash,is_atm``.
    delimiter : str
        Field separator.

    Returns
    -------
    ReconcilableTransaction
        A withdrawal when only ``is_atm`` is true, a purchase when only
        ``is_cash`` is true.

    Raises
    ------
    MalformedInputError
        If the line has the wrong number of fields, an unparseable or
        negative value, an amount outside the decimal exponent range, an
        empty name, or both or neither kind flag set.
    """
    values = [_strip(v) for v in line.rstrip("\r\n").split(delimiter)]
    if len(values) != FIELD_COUNT:
        raise MalformedInputError(
            f"Expected {FIELD_COUNT} fields, found {len(values)}: {line.strip()}"
        )

    id_raw, name, amount_raw, date_raw, cash_raw, atm_raw = values

    try:
        transaction_id = int(id_raw)
    except ValueError as e:
        raise MalformedInputError(f"Invalid transaction id {id_raw!r}: {line.strip()}") from e
    if transaction_id < 0:
        raise MalformedInputError(f"Negative transaction id {transaction_id}: {line.strip()}")

    if not name:
        raise MalformedInputError(f"Empty transaction name: {line.strip()}")

    try:
        amount = Decimal(amount_raw)
    except InvalidOperation as e:
        raise MalformedInputError(f"Invalid amount {amount_raw!r}: {line.strip()}") from e
    if not amount.is_finite() or amount < 0:
        raise MalformedInputError(f"Amount must be a non-negative number: {line.strip()}")
    context = getcontext()
    if amount.as_tuple().exponent < context.Emin or amount.adjusted() > context.Emax:
        raise MalformedInputError(f"Amount out of range: {line.strip()}")

    try:
        on = date.fromisoformat(date_raw)
    except ValueError as e:
        raise MalformedInputError(f"Invalid date {date_raw!r}: {line.strip()}") from e

    is_cash = _parse_flag(cash_raw)
    is_atm = _parse_flag(atm_raw)

    if is_atm and not is_cash:
        return ReconcilableTransaction.withdrawal(transaction_id, name, amount, on)
    if is_cash and not is_atm:
        return ReconcilableTransaction.purchase(transaction_id, name, amount, on)
    raise MalformedInputError(f"Input type is ambiguous (atm/cash): {line.strip()}")


def read_transactions(
    path: str | Path,
    config: InputConfig | None = None,
) -> list[ReconcilableTransaction]:
    """Load every transaction from a legacy CSV file.

    Parameters
    ----------
    path : str | Path
        File to read.
    config : InputConfig | None
        Parsing options; defaults apply when omitted.

    Returns
    -------
    list[ReconcilableTransaction]
        Transactions in file order.

    Raises
    ------
    MalformedInputError
        On the first malformed line or a repeated transaction id. The error
        carries the file path and line number.
        Undecodable text is reported the same way, without a line number.
    OSError
        If the file cannot be read.
    """
    config = config or InputConfig()
    path = Path(path)
    transactions: list[ReconcilableTransaction] = []
    seen_ids: set[int] = set()

    try:
        with open(path, "r", encoding=config.encoding) as f:
            for line_number, line in enumerate(f, start=1):
                if line_number == 1 and config.skip_header:
                    continue
                if not line.strip():
                    continue
                try:
                    tx = parse_line(line, config.delimiter)
                except MalformedInputError as e:
                    raise MalformedInputError(str(e), source=path, line_number=line_number) from e
                if tx.transaction_id in seen_ids:
                    raise MalformedInputError(
                        f"Duplicate transaction id {tx.transaction_id}",
                        source=path,
                        line_number=line_number,
                    )
                seen_ids.add(tx.transaction_id)
                transactions.append(tx)
    except UnicodeDecodeError as e:
        raise MalformedInputError(
            f"Not valid {config.encoding} text: {e.reason}", source=path
        ) from e

    logger.debug("Read %d transactions from %s", len(transactions), path)
    return transactions


def write_transactions(
    path: str | Path,
    transactions: Iterable[ReconcilableTransaction],
    delimiter: str = ",",
) -> int:
    """Write transactions in the legacy input layout.

    Returns
    -------
    int
        Number of transactions written.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    sep = f"{delimiter} "
    count = 0

    with open(path, "w", encoding="utf-8") as f:
        f.write(sep.join(HEADER.split(", ")) + "\n")
        for tx in transactions:
            row = [
                str(tx.transaction_id),
                tx.name,
                str(tx.amount),
                tx.date.isoformat(),
                "true" if tx.is_purchase else "false",
                "true" if tx.is_withdrawal else "false",
            ]
            f.write(sep.join(row) + "\n")
            count += 1

    return count
