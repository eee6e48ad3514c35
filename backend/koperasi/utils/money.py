from __future__ import annotations

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP

from koperasi.core.errors import InvalidInputError

Q2 = Decimal("0.01")
ZERO = Decimal("0")

# "fully paid" comparisons tolerate sub-cent drift
HALF_CENT = Decimal("0.005")


def d2(x: Decimal) -> Decimal:
    return x.quantize(Q2, rounding=ROUND_HALF_UP)


def to_dec(v) -> Decimal:
    if isinstance(v, Decimal):
        return v
    if v is None:
        return ZERO
    return Decimal(str(v))


def allocate_cents(total: Decimal, weights: list[Decimal]) -> list[Decimal]:
    """Split ``total`` (cents) proportionally to ``weights``.

    Largest-remainder rounding: each share is floored to the cent and the
    leftover cents go to the largest fractional remainders, so the result
    always sums to ``d2(total)``. All-zero weights yield all-zero shares.
    """
    total = d2(total)
    weight_sum = sum(weights, ZERO)
    if not weights or weight_sum <= 0:
        return [ZERO.quantize(Q2) for _ in weights]

    exact = [total * w / weight_sum for w in weights]
    floored = [e.quantize(Q2, rounding=ROUND_DOWN) for e in exact]

    leftover = int(((total - sum(floored, ZERO)) / Q2).to_integral_value(rounding=ROUND_HALF_UP))
    order = sorted(range(len(weights)), key=lambda i: (exact[i] - floored[i], -i), reverse=True)
    for i in order[:leftover]:
        floored[i] += Q2
    return floored


def require_cents(amount: Decimal, label: str = "Amount") -> Decimal:
    """Reject sub-cent amounts; Numeric(15, 2) columns would round them silently."""
    if amount != d2(amount):
        raise InvalidInputError("amount_precision", f"{label} cannot have more than 2 decimal places")
    return amount
