"""Shared serialization utilities for sinks."""

from dataclasses import fields, is_dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from atm_recon.amounts import round_half_up
from atm_recon.models import Reconciliation

NULL_PARENT = "null"


def to_dict(obj: Any) -> dict:
    """Convert object to dictionary."""
    if is_dataclass(obj):
        return {f.name: serialize_value(getattr(obj, f.name)) for f in fields(obj)}
    elif isinstance(obj, dict):
        return obj
    else:
        return {"value": str(obj)}


def serialize_value(value: Any) -> Any:
    """Serialize a value for JSON output."""
    if isinstance(value, Decimal):
        return str(value)
    elif isinstance(value, Enum):
        return value.value
    elif isinstance(value, datetime):
        return value.isoformat()
    elif isinstance(value, date):
        return value.isoformat()
    elif isinstance(value, dict):
        return {k: serialize_value(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [serialize_value(v) for v in value]
    return value


def format_amount(value: Decimal, whole: bool = True) -> str:
    """Render an amount for the legacy text format.

    Parameters
    ----------
    value : Decimal
        Amount to render.
    whole : bool
        Round to a whole number, half up, as the legacy ``%.0f`` output
        does. Fractions are lost. When False the exact value is written.
    """
    if whole:
        return f"{round_half_up(value):f}"
    return f"{value:f}"


def format_reconciliation(record: Reconciliation, whole: bool = True) -> str:
    """Render a reconciliation as ``id, name, parent, amount``."""
    parent = NULL_PARENT if record.parent_id is None else str(record.parent_id)
    return ", ".join(
        [
            str(record.cash_id),
            record.cash_name,
            parent,
            format_amount(record.settled_amount, whole),
        ]
    )
