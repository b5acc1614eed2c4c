"""Exact decimal arithmetic for transaction amounts.

Amounts are parsed from text without any precision limit. Sums and
differences are computed in a context wide enough for both operands, so no
digit is ever rounded away regardless of the ambient decimal context.
"""

from contextlib import contextmanager
from decimal import ROUND_HALF_UP, Decimal, Inexact, localcontext
from typing import Iterator

from atm_recon.exceptions import InvariantViolationError

WHOLE = Decimal("1")


def _span(*values: Decimal) -> int:
    """Digits needed to hold the sum or difference of ``values`` exactly."""
    top = max(v.adjusted() for v in values)
    bottom = min(v.as_tuple().exponent for v in values)
    # one extra digit for a carry, one for adjusted() counting from zero
    return max(top - bottom + 2, 1)


@contextmanager
def _exact(*values: Decimal) -> Iterator[None]:
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, _span(*values))
        ctx.traps[Inexact] = True
        try:
            yield
        except Inexact as e:
            raise InvariantViolationError(
                f"Inexact arithmetic on amounts {', '.join(str(v) for v in values)}"
            ) from e


def add(a: Decimal, b: Decimal) -> Decimal:
    """Return ``a + b`` without rounding."""
    with _exact(a, b):
        return a + b


def subtract(a: Decimal, b: Decimal) -> Decimal:
    """Return ``a - b`` without rounding."""
    with _exact(a, b):
        return a - b


def round_half_up(value: Decimal) -> Decimal:
    """Round to a whole number, half away from zero, at any magnitude."""
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, value.adjusted() + 2)
        return value.quantize(WHOLE, rounding=ROUND_HALF_UP)
