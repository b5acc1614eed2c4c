"""Pytest configuration and fixtures."""

import logging
from datetime import date
from decimal import Decimal
from pathlib import Path
from typing import Iterator

import pytest

from atm_recon.models import ReconcilableTransaction


@pytest.fixture(autouse=True)
def _restore_root_logger() -> Iterator[None]:
    """Undo handler changes made by setup_logging during a test."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def seed() -> int:
    """Fixed seed for reproducible tests."""
    return 42


@pytest.fixture
def scenario_transactions() -> list[ReconcilableTransaction]:
    """One withdrawal funding two later purchases, with 10 left unexplained."""
    return [
        ReconcilableTransaction.withdrawal(1, "W1", Decimal("100"), date(2020, 1, 1)),
        ReconcilableTransaction.purchase(2, "C1", Decimal("40"), date(2020, 1, 2)),
        ReconcilableTransaction.purchase(3, "C2", Decimal("70"), date(2020, 1, 3)),
    ]


@pytest.fixture
def scenario_csv(tmp_path: Path) -> Path:
    """Legacy input file holding the scenario transactions."""
    path = tmp_path / "scenario.csv"
    path.write_text(
        "id, name, amount, date, is_cash, is_atm\n"
        "1, W1, 100, 2020-01-01, false, true\n"
        "2, C1, 40, 2020-01-02, true, false\n"
        "3, C2, 70, 2020-01-03, true, false\n",
        encoding="utf-8",
    )
    return path


@pytest.fixture
def malformed_csv(tmp_path: Path) -> Path:
    """Legacy input file whose second record sets both kind flags."""
    path = tmp_path / "malformed.csv"
    path.write_text(
        "id, name, amount, date, is_cash, is_atm\n"
        "1, W1, 100, 2020-01-01, false, true\n"
        "2, C1, 40, 2020-01-02, true, true\n",
        encoding="utf-8",
    )
    return path
