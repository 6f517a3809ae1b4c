"""Агрегация статистики как чистая функция."""
from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest

from pest_crm.core.errors import ValidationError
from pest_crm.models import OrderStatus, OrderType
from pest_crm.services.statistics_service import STAT_FIELDS, aggregate, month_bounds, parse_date


def _order(day, order_type=OrderType.PRIMARY, final=None, cash=None, status=OrderStatus.COMPLETED):
    return SimpleNamespace(
        date=day,
        order_type=order_type,
        status=status,
        final_amount=None if final is None else Decimal(final),
        cash_desk=None if cash is None else Decimal(cash),
    )


def test_every_day_present_even_without_data():
    daily, totals = aggregate(date(2024, 1, 30), date(2024, 2, 2), [], {})
    assert [d.date for d in daily] == ["2024-01-30", "2024-01-31", "2024-02-01", "2024-02-02"]
    assert all(getattr(totals, name) == 0 for name in STAT_FIELDS)


def test_sums_and_net_profit():
    orders = [
        _order("2024-06-01", final=6000, cash=3600),
        _order("2024-06-01", OrderType.SECONDARY, final=2000, cash=1200),
        _order("2024-06-02", final=None, cash=None),
        _order("2024-06-02", final=9999, cash=9999, status=OrderStatus.CANCELLED),
    ]
    daily, totals = aggregate(date(2024, 6, 1), date(2024, 6, 2), orders, {"2024-06-01": Decimal("800")})
    first, second = daily
    assert first.primary_count == 1 and first.secondary_count == 1
    assert first.primary_sum == 6000
    assert first.secondary_sum == 2000
    assert first.total_sum == 8000
    assert first.cash_desk == 4800
    assert first.ad_spend == 800
    assert first.net_profit == 4000
    # заказ без суммы считается, но даёт 0
    assert second.primary_count == 1
    assert second.total_sum == 0
    assert second.net_profit == 0
    for name in STAT_FIELDS:
        assert getattr(totals, name) == sum(getattr(d, name) for d in daily)


def test_ad_spend_without_orders_gives_negative_profit():
    daily, totals = aggregate(date(2024, 6, 5), date(2024, 6, 5), [], {"2024-06-05": Decimal("300")})
    assert daily[0].net_profit == -300
    assert totals.net_profit == -300


@pytest.mark.parametrize(
    "year, month, last",
    [(2024, 2, 29), (2023, 2, 28), (2024, 6, 30), (2024, 12, 31)],
)
def test_month_bounds(year, month, last):
    start, end = month_bounds(year, month)
    assert start == date(year, month, 1)
    assert end == date(year, month, last)


def test_month_bounds_rejects_bad_month():
    with pytest.raises(ValidationError):
        month_bounds(2024, 0)


def test_parse_date():
    assert parse_date("2024-06-15") == date(2024, 6, 15)
    with pytest.raises(ValidationError):
        parse_date("15.06.2024")
    with pytest.raises(ValidationError):
        parse_date(None)
