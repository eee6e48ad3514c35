from decimal import Decimal
from random import Random

import pytest

from koperasi.core.errors import InvalidInputError
from koperasi.utils.money import allocate_cents, d2, require_cents, to_dec


@pytest.mark.parametrize(
    "raw, expected",
    [
        ("888.4878867", "888.49"),
        ("0.005", "0.01"),
        ("0.004999", "0.00"),
        ("-1.005", "-1.01"),
        ("100", "100.00"),
    ],
)
def test_d2_rounds_half_up_to_cents(raw, expected):
    assert d2(Decimal(raw)) == Decimal(expected)
    assert str(d2(Decimal(raw))) == expected


def test_to_dec_accepts_floats_ints_and_none():
    assert to_dec(0.1) == Decimal("0.1")
    assert to_dec(12) == Decimal("12")
    assert to_dec(None) == Decimal("0")
    d = Decimal("3.14")
    assert to_dec(d) is d


def test_allocate_gives_leftover_cents_to_largest_remainders():
    out = allocate_cents(Decimal("100.00"), [Decimal("1"), Decimal("1"), Decimal("1")])
    assert out == [Decimal("33.34"), Decimal("33.33"), Decimal("33.33")]

    out = allocate_cents(Decimal("10.00"), [Decimal("2"), Decimal("1")])
    # 6.666.. and 3.333..: the larger remainder wins the cent
    assert out == [Decimal("6.67"), Decimal("3.33")]


def test_allocate_zero_weights_yields_zero_shares():
    assert allocate_cents(Decimal("500.00"), [Decimal("0"), Decimal("0")]) == [Decimal("0"), Decimal("0")]
    assert allocate_cents(Decimal("500.00"), []) == []


def test_allocate_zero_weight_member_gets_nothing():
    out = allocate_cents(Decimal("99.99"), [Decimal("0"), Decimal("3"), Decimal("0")])
    assert out == [Decimal("0"), Decimal("99.99"), Decimal("0")]


def test_allocate_always_sums_to_total():
    rng = Random(7)
    for _ in range(300):
        total = Decimal(rng.randint(0, 10_000_000)) / 100
        weights = [Decimal(rng.randint(0, 50_000)) / 100 for _ in range(rng.randint(1, 40))]
        out = allocate_cents(total, weights)

        assert len(out) == len(weights)
        if sum(weights) == 0:
            assert all(x == 0 for x in out)
            continue
        assert sum(out, Decimal("0")) == total
        for share, w in zip(out, weights):
            assert share >= 0
            exact = total * w / sum(weights)
            assert abs(share - exact) < Decimal("0.01")


def test_require_cents_rejects_sub_cent_amounts():
    assert require_cents(Decimal("12.30")) == Decimal("12.30")
    assert require_cents(Decimal("7")) == Decimal("7")
    for bad in (Decimal("0.004"), Decimal("1.005"), to_dec(0.001)):
        with pytest.raises(InvalidInputError) as ei:
            require_cents(bad)
        assert ei.value.code == "amount_precision"
