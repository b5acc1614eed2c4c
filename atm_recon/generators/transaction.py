"""Sample cash purchase and ATM withdrawal generator."""

import random
import re
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterator

from atm_recon.generators.base import BaseGenerator
from atm_recon.models import ReconcilableTransaction, TransactionKind

_NAME_UNSAFE = re.compile(r"[^A-Za-z0-9-]")


class TransactionGenerator(BaseGenerator):
    """Generate single-account batches of purchases and withdrawals."""

    KINDS = list(TransactionKind)
    KIND_WEIGHTS = [0.25, 0.75]

    # ATMs dispense multiples of 20
    WITHDRAWAL_NOTE = 20
    WITHDRAWAL_MAX_NOTES = 25

    def __init__(
        self,
        seed: int | None = None,
        locale: str = "en_US",
        whole_amounts: bool = True,
    ) -> None:
        super().__init__(seed, locale)
        self.whole_amounts = whole_amounts
        self._next_id = 1

    def generate(self, on: date) -> ReconcilableTransaction:
        """Generate a single transaction dated ``on``.

        Parameters
        ----------
        on : date
            Transaction date.

        Returns
        -------
        ReconcilableTransaction
            Withdrawal or purchase with the next sequential id.
        """
        kind = random.choices(self.KINDS, weights=self.KIND_WEIGHTS, k=1)[0]
        transaction_id = self._next_id
        self._next_id += 1

        if kind == TransactionKind.WITHDRAWAL:
            notes = random.randint(1, self.WITHDRAWAL_MAX_NOTES)
            return ReconcilableTransaction.withdrawal(
                transaction_id,
                self._withdrawal_name(),
                Decimal(notes * self.WITHDRAWAL_NOTE),
                on,
            )

        # Pareto distribution: many small purchases, few large
        amount = min(random.paretovariate(1.5) * 10, 500)
        amount = round(amount) if self.whole_amounts else round(amount, 2)
        return ReconcilableTransaction.purchase(
            transaction_id,
            self._purchase_name(),
            Decimal(str(amount)),
            on,
        )

    def generate_batch(
        self,
        start_date: date,
        end_date: date,
        avg_transactions_per_day: float = 1.5,
    ) -> Iterator[ReconcilableTransaction]:
        """Generate transactions for every day in ``[start_date, end_date)``.

        Yields
        ------
        ReconcilableTransaction
            Transactions in date order with increasing ids.
        """
        current_date = start_date

        while current_date < end_date:
            num_transactions = max(0, int(random.expovariate(1 / avg_transactions_per_day)))
            for _ in range(num_transactions):
                yield self.generate(current_date)
            current_date += timedelta(days=1)

    def _purchase_name(self) -> str:
        """Merchant-like label without whitespace or delimiters."""
        return _NAME_UNSAFE.sub("", self.fake.company().split()[0]) or "Purchase"

    def _withdrawal_name(self) -> str:
        city = _NAME_UNSAFE.sub("", self.fake.city())
        return f"ATM-{city}" if city else "ATM"
