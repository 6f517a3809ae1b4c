from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from pest_crm.schemas.common import CamelModel, DATE_PATTERN, Money


class StatsBlock(CamelModel):
    """Набор показателей: количество и суммы по первичным/вторичным, касса, реклама, прибыль."""

    primary_count: int = 0
    secondary_count: int = 0
    primary_sum: Money = Decimal("0")
    secondary_sum: Money = Decimal("0")
    total_sum: Money = Decimal("0")
    cash_desk: Money = Decimal("0")
    ad_spend: Money = Decimal("0")
    net_profit: Money = Decimal("0")


class DailyStats(StatsBlock):
    date: str  # YYYY-MM-DD


class TotalsStats(StatsBlock):
    pass


class PlanResponse(StatsBlock):
    year: int
    month: int


class PlanUpdate(CamelModel):
    primary_count: Optional[int] = Field(default=None, ge=0)
    secondary_count: Optional[int] = Field(default=None, ge=0)
    primary_sum: Optional[Decimal] = None
    secondary_sum: Optional[Decimal] = None
    total_sum: Optional[Decimal] = None
    cash_desk: Optional[Decimal] = None
    ad_spend: Optional[Decimal] = None
    net_profit: Optional[Decimal] = None


class AdSpendUpdate(CamelModel):
    date: str = Field(..., pattern=DATE_PATTERN)
    amount: Decimal = Field(..., ge=0)


class AdSpendResponse(CamelModel):
    date: str
    ad_spend: Money


class PeriodInfo(CamelModel):
    start_date: str
    end_date: str


class StatisticsResponse(CamelModel):
    """daily — по дню на каждую дату диапазона; plan — в режиме месяца, period — в режиме периода."""

    daily: List[DailyStats]
    totals: TotalsStats
    plan: Optional[PlanResponse] = None
    period: Optional[PeriodInfo] = None
