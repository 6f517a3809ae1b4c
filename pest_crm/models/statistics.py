"""Расход на рекламу по дням и месячный план."""
from decimal import Decimal
from sqlalchemy import Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pest_crm.core.database import Base


class DailyAdSpend(Base):
    """Расход на рекламу за день (одна строка на дату)."""
    __tablename__ = "daily_ad_spend"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    date: Mapped[str] = mapped_column(String(10), unique=True, nullable=False)
    ad_spend: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)


class MonthlyPlan(Base):
    """План на месяц: целевые количества и суммы."""
    __tablename__ = "monthly_plans"
    __table_args__ = (UniqueConstraint("year", "month", name="uq_monthly_plans_year_month"),)

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    primary_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    secondary_count: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    primary_sum: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    secondary_sum: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    total_sum: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    cash_desk: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    ad_spend: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
    net_profit: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)
