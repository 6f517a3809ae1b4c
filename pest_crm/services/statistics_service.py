"""
Статистика по дням: количество и суммы завершённых заказов (первичные/вторичные),
касса, расход на рекламу, чистая прибыль. Итоги — сумма дневных значений.
"""
import calendar
from collections import defaultdict
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from pest_crm.core.errors import ValidationError
from pest_crm.core.logging_config import get_logger
from pest_crm.models import DailyAdSpend, MonthlyPlan, Order, OrderStatus, OrderType
from pest_crm.schemas.statistics import (
    DailyStats,
    PeriodInfo,
    PlanResponse,
    PlanUpdate,
    StatisticsResponse,
    TotalsStats,
)

logger = get_logger(__name__)

STAT_FIELDS = (
    "primary_count",
    "secondary_count",
    "primary_sum",
    "secondary_sum",
    "total_sum",
    "cash_desk",
    "ad_spend",
    "net_profit",
)


def parse_date(value: Optional[str], name: str = "date") -> date:
    if not value:
        raise ValidationError(f"Не указана дата ({name})")
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Неверный формат даты {name}: {value}, нужен YYYY-MM-DD")


def month_bounds(year: int, month: int) -> Tuple[date, date]:
    """Первый и последний день месяца."""
    if not 1 <= month <= 12:
        raise ValidationError("Месяц должен быть от 1 до 12")
    if not 1 <= year <= 9999:
        raise ValidationError("Неверный год")
    last_day = calendar.monthrange(year, month)[1]
    return date(year, month, 1), date(year, month, last_day)


def iter_days(start: date, end: date) -> Iterator[date]:
    day = start
    while day <= end:
        yield day
        day += timedelta(days=1)


def _money(value) -> Decimal:
    return Decimal(value) if value is not None else Decimal("0")


def aggregate(
    start: date,
    end: date,
    orders: Iterable[Order],
    ad_spend: Dict[str, Decimal],
) -> Tuple[List[DailyStats], TotalsStats]:
    """Показатели на каждый день диапазона (включая пустые дни) и итоги."""
    by_date: Dict[str, List[Order]] = defaultdict(list)
    for order in orders:
        if order.status == OrderStatus.COMPLETED:
            by_date[order.date].append(order)

    daily: List[DailyStats] = []
    for day in iter_days(start, end):
        key = day.isoformat()
        day_orders = by_date.get(key, [])
        primary = [o for o in day_orders if o.order_type == OrderType.PRIMARY]
        secondary = [o for o in day_orders if o.order_type == OrderType.SECONDARY]
        primary_sum = sum((_money(o.final_amount) for o in primary), Decimal("0"))
        secondary_sum = sum((_money(o.final_amount) for o in secondary), Decimal("0"))
        cash_desk = sum((_money(o.cash_desk) for o in day_orders), Decimal("0"))
        day_ad_spend = _money(ad_spend.get(key))
        daily.append(DailyStats(
            date=key,
            primary_count=len(primary),
            secondary_count=len(secondary),
            primary_sum=primary_sum,
            secondary_sum=secondary_sum,
            total_sum=primary_sum + secondary_sum,
            cash_desk=cash_desk,
            ad_spend=day_ad_spend,
            net_profit=cash_desk - day_ad_spend,
        ))

    totals = TotalsStats(**{
        name: sum((getattr(d, name) for d in daily), 0 if name.endswith("_count") else Decimal("0"))
        for name in STAT_FIELDS
    })
    return daily, totals


async def _load_range(
    db: AsyncSession, start: date, end: date
) -> Tuple[List[Order], Dict[str, Decimal]]:
    start_s, end_s = start.isoformat(), end.isoformat()
    orders = (await db.execute(
        select(Order).where(
            Order.date >= start_s,
            Order.date <= end_s,
            Order.status == OrderStatus.COMPLETED,
        )
    )).scalars().all()
    rows = (await db.execute(
        select(DailyAdSpend).where(DailyAdSpend.date >= start_s, DailyAdSpend.date <= end_s)
    )).scalars().all()
    return list(orders), {r.date: r.ad_spend for r in rows}


async def _find_plan(db: AsyncSession, year: int, month: int) -> Optional[MonthlyPlan]:
    r = await db.execute(
        select(MonthlyPlan).where(MonthlyPlan.year == year, MonthlyPlan.month == month)
    )
    return r.scalar_one_or_none()


async def get_or_create_plan(db: AsyncSession, year: int, month: int) -> MonthlyPlan:
    plan = await _find_plan(db, year, month)
    if plan:
        return plan
    try:
        async with db.begin_nested():
            plan = MonthlyPlan(year=year, month=month)
            db.add(plan)
    except IntegrityError:
        # параллельный запрос успел создать план на этот месяц
        plan = await _find_plan(db, year, month)
        if plan is None:
            raise
        return plan
    await db.refresh(plan)
    logger.info("Создан пустой план на %s-%02d", year, month)
    return plan


async def month_statistics(db: AsyncSession, year: int, month: int) -> StatisticsResponse:
    start, end = month_bounds(year, month)
    orders, ad_spend = await _load_range(db, start, end)
    daily, totals = aggregate(start, end, orders, ad_spend)
    plan = await get_or_create_plan(db, year, month)
    return StatisticsResponse(
        daily=daily,
        totals=totals,
        plan=PlanResponse.model_validate(plan),
    )


async def period_statistics(
    db: AsyncSession, start_date: Optional[str], end_date: Optional[str]
) -> StatisticsResponse:
    start = parse_date(start_date, "startDate")
    end = parse_date(end_date, "endDate")
    if end < start:
        raise ValidationError("Дата окончания раньше даты начала")
    orders, ad_spend = await _load_range(db, start, end)
    daily, totals = aggregate(start, end, orders, ad_spend)
    return StatisticsResponse(
        daily=daily,
        totals=totals,
        period=PeriodInfo(start_date=start.isoformat(), end_date=end.isoformat()),
    )


async def upsert_ad_spend(db: AsyncSession, day: str, amount: Decimal) -> DailyAdSpend:
    parse_date(day)
    r = await db.execute(select(DailyAdSpend).where(DailyAdSpend.date == day))
    row = r.scalar_one_or_none()
    if row:
        row.ad_spend = amount
    else:
        row = DailyAdSpend(date=day, ad_spend=amount)
        db.add(row)
    await db.flush()
    await db.refresh(row)
    logger.info("Расход на рекламу за %s: %s", day, amount)
    return row


async def upsert_plan(db: AsyncSession, year: int, month: int, data: PlanUpdate) -> MonthlyPlan:
    month_bounds(year, month)
    plan = await get_or_create_plan(db, year, month)
    for name, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(plan, name, value)
    await db.flush()
    await db.refresh(plan)
    logger.info("План на %s-%02d обновлён", year, month)
    return plan
