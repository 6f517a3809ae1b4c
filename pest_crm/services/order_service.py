from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pest_crm.core.errors import NotFoundError
from pest_crm.core.logging_config import get_logger
from pest_crm.models import Order, OrderStatus
from pest_crm.schemas.order import OrderCreate, OrderUpdate, dump_phones
from pest_crm.services.order_lifecycle import LifecycleResult, apply_commands, build_commands
from pest_crm.services.statistics_service import month_bounds

logger = get_logger(__name__)


async def _get_order(db: AsyncSession, order_id: str) -> Optional[Order]:
    result = await db.execute(select(Order).where(Order.id == order_id))
    return result.scalar_one_or_none()


async def get_order(db: AsyncSession, order_id: str) -> Order:
    order = await _get_order(db, order_id)
    if not order:
        raise NotFoundError("Заказ не найден")
    return order


async def list_orders(
    db: AsyncSession,
    date: Optional[str] = None,
    year: Optional[int] = None,
    month: Optional[int] = None,
    status: Optional[OrderStatus] = None,
) -> List[Order]:
    """Заказы для календаря: по дате или за месяц (год и месяц вместе), по статусу."""
    q = select(Order).order_by(Order.date.asc(), Order.time.asc())
    if year is not None and month is not None:
        start, end = month_bounds(year, month)
        q = q.where(Order.date >= start.isoformat(), Order.date <= end.isoformat())
    elif date:
        q = q.where(Order.date == date)
    if status is not None:
        q = q.where(Order.status == status)
    result = await db.execute(q)
    return list(result.scalars().all())


async def search_orders(
    db: AsyncSession,
    phone: Optional[str] = None,
    address: Optional[str] = None,
    date: Optional[str] = None,
) -> List[Order]:
    """
    Поиск: телефон — подстрока в сохранённом списке телефонов, адрес — подстрока
    с учётом регистра, дата — точное совпадение. Фильтры объединяются через И,
    пустые не применяются.
    """
    q = select(Order).order_by(Order.created_at.desc())
    if phone:
        q = q.where(Order.phones.contains(phone, autoescape=True))
    if address:
        q = q.where(Order.address.contains(address, autoescape=True))
    if date:
        q = q.where(Order.date == date)
    orders = (await db.execute(q)).scalars().all()
    if address:
        # LIKE в SQLite не различает регистр
        orders = [o for o in orders if address in o.address]
    return list(orders)


async def create_order(db: AsyncSession, data: OrderCreate) -> Order:
    order = Order(
        order_type=data.order_type,
        client_type=data.client_type,
        date=data.date,
        time=data.time,
        client_name=data.client_name,
        pest=data.pest,
        object_type=data.object_type,
        volume=data.volume or "",
        address=data.address,
        phones=dump_phones(data.phones),
        comment=data.comment or "",
        manager=data.manager,
        base_price=data.base_price or 0,
        status=OrderStatus.IN_PROGRESS,
    )
    db.add(order)
    await db.flush()
    await db.refresh(order)
    return order


async def update_order(db: AsyncSession, order_id: str, data: OrderUpdate) -> LifecycleResult:
    """Частичное обновление; завершение с датой повтора создаёт вторичный заказ в той же транзакции."""
    order = await get_order(db, order_id)
    previous_photo = order.contract_photo
    result = apply_commands(order, build_commands(data))
    if result.follow_up is not None:
        db.add(result.follow_up)
    await db.flush()
    await db.refresh(order)
    if result.follow_up is not None:
        await db.refresh(result.follow_up)
        logger.info(
            "Создан вторичный заказ id=%s на %s %s по заказу id=%s",
            result.follow_up.id, result.follow_up.date, result.follow_up.time, order.id,
        )
    # Файл удаляется только при явной замене contractPhoto, не при смене статуса
    replaced = "contract_photo" in data.model_fields_set and order.contract_photo == data.contract_photo
    if previous_photo and replaced and previous_photo != order.contract_photo:
        result.released_file = previous_photo
    return result


async def delete_order(db: AsyncSession, order_id: str) -> Order:
    """Удаляет заказ и возвращает его (файл договора удаляет вызывающий код)."""
    order = await get_order(db, order_id)
    await db.delete(order)
    await db.flush()
    return order
