from decimal import Decimal, ROUND_HALF_UP

CENTS = Decimal("0.01")


def round_cents(value: float) -> float:
    """Half-up rounding to cents, the way prices are displayed."""
    return float(Decimal(str(value)).quantize(CENTS, rounding=ROUND_HALF_UP))
