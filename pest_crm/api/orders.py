from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pest_crm.api.auth import require_auth
from pest_crm.core.database import get_db
from pest_crm.core.logging_config import get_logger
from pest_crm.models import OrderStatus
from pest_crm.schemas.common import ApiResponse
from pest_crm.schemas.order import OrderCreate, OrderResponse, OrderUpdate
from pest_crm.services import order_service
from pest_crm.services.file_storage import delete_file_quietly

logger = get_logger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"], dependencies=[Depends(require_auth)])


def _to_list(orders) -> List[OrderResponse]:
    return [OrderResponse.model_validate(o) for o in orders]


@router.get("", response_model=ApiResponse[List[OrderResponse]])
async def list_orders(
    date: Optional[str] = Query(None, description="День (YYYY-MM-DD)"),
    month: Optional[int] = Query(None, description="Месяц 1-12, вместе с year"),
    year: Optional[int] = Query(None),
    status: Optional[OrderStatus] = None,
    db: AsyncSession = Depends(get_db),
):
    """Заказы для календаря, по дате и времени."""
    orders = await order_service.list_orders(db, date=date, year=year, month=month, status=status)
    return ApiResponse(data=_to_list(orders))


@router.get("/search/query", response_model=ApiResponse[List[OrderResponse]])
async def search_orders(
    phone: Optional[str] = None,
    address: Optional[str] = None,
    date: Optional[str] = None,
    db: AsyncSession = Depends(get_db),
):
    """Поиск по телефону, адресу и дате; без фильтров — все заказы (новые сверху)."""
    orders = await order_service.search_orders(db, phone=phone, address=address, date=date)
    return ApiResponse(data=_to_list(orders))


@router.get("/{order_id}", response_model=ApiResponse[OrderResponse])
async def get_order(order_id: str, db: AsyncSession = Depends(get_db)):
    order = await order_service.get_order(db, order_id)
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.post("", response_model=ApiResponse[OrderResponse], status_code=201)
async def post_order(data: OrderCreate, db: AsyncSession = Depends(get_db)):
    order = await order_service.create_order(db, data)
    logger.info("Создан заказ id=%s на %s %s", order.id, order.date, order.time)
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.put("/{order_id}", response_model=ApiResponse[OrderResponse])
async def put_order(
    order_id: str,
    data: OrderUpdate,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    """Частичное обновление. Смена статуса запускает переходы жизненного цикла."""
    result = await order_service.update_order(db, order_id, data)
    order = result.order
    if data.status is not None:
        logger.info("Заказ id=%s: статус %s", order.id, order.status.value)
    if result.released_file:
        background.add_task(delete_file_quietly, result.released_file)
    return ApiResponse(data=OrderResponse.model_validate(order))


@router.delete("/{order_id}", response_model=ApiResponse[None])
async def delete_order(
    order_id: str,
    background: BackgroundTasks,
    db: AsyncSession = Depends(get_db),
):
    order = await order_service.delete_order(db, order_id)
    if order.contract_photo:
        background.add_task(delete_file_quietly, order.contract_photo)
    logger.info("Удалён заказ id=%s", order_id)
    return ApiResponse(message="Заказ удалён")
