from typing import Optional

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pest_crm.api.auth import require_auth
from pest_crm.core.database import get_db
from pest_crm.schemas.common import ApiResponse
from pest_crm.schemas.statistics import (
    AdSpendResponse,
    AdSpendUpdate,
    PlanResponse,
    PlanUpdate,
    StatisticsResponse,
)
from pest_crm.services import statistics_service

router = APIRouter(prefix="/api/statistics", tags=["statistics"], dependencies=[Depends(require_auth)])


@router.get("/period", response_model=ApiResponse[StatisticsResponse])
async def statistics_period(
    start_date: Optional[str] = Query(None, alias="startDate", description="Начало (YYYY-MM-DD)"),
    end_date: Optional[str] = Query(None, alias="endDate", description="Конец (YYYY-MM-DD)"),
    db: AsyncSession = Depends(get_db),
):
    """Статистика за произвольный период: каждый день диапазона, итоги и границы периода."""
    stats = await statistics_service.period_statistics(db, start_date, end_date)
    return ApiResponse(data=stats)


@router.get("/{year}/{month}", response_model=ApiResponse[StatisticsResponse])
async def statistics_month(
    year: int = Path(...),
    month: int = Path(...),
    db: AsyncSession = Depends(get_db),
):
    """Статистика за месяц с планом (пустой план создаётся при первом запросе)."""
    stats = await statistics_service.month_statistics(db, year, month)
    return ApiResponse(data=stats)


@router.put("/ad-spend", response_model=ApiResponse[AdSpendResponse])
async def put_ad_spend(body: AdSpendUpdate, db: AsyncSession = Depends(get_db)):
    row = await statistics_service.upsert_ad_spend(db, body.date, body.amount)
    return ApiResponse(data=AdSpendResponse.model_validate(row))


@router.put("/plan/{year}/{month}", response_model=ApiResponse[PlanResponse])
async def put_plan(
    year: int,
    month: int,
    body: PlanUpdate,
    db: AsyncSession = Depends(get_db),
):
    plan = await statistics_service.upsert_plan(db, year, month, body)
    return ApiResponse(data=PlanResponse.model_validate(plan))
