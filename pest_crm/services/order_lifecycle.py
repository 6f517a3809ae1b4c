"""
Жизненный цикл заказа: in_progress → completed | cancelled (и обратно).

Частичное обновление из API разбирается в явные команды:
EditOrder (общие поля), ReopenOrder, CompleteOrder, CancelOrder.
apply_commands меняет заказ и, при завершении с датой повтора,
возвращает новый вторичный заказ. Сохраняет оба вызывающий код
в одной транзакции.
"""
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import List, Optional, Union

from pest_crm.models import Order, OrderStatus, OrderType
from pest_crm.schemas.order import OrderUpdate, dump_phones
from pest_crm.services.order_status import owns_field, stale_fields

DEFAULT_REPEAT_TIME = "09:00"

# Общие поля заказа (не зависят от статуса)
COMMON_FIELDS = (
    "order_type",
    "client_type",
    "date",
    "time",
    "client_name",
    "pest",
    "object_type",
    "volume",
    "address",
    "phones",
    "comment",
    "manager",
    "base_price",
)

# Детали завершения, которые можно править отдельно от сумм
COMPLETION_DETAILS = (
    "master_name",
    "master_contact",
    "completion_comment",
    "contract_photo",
)

# Копируются из исходного заказа во вторичный
FOLLOW_UP_FIELDS = (
    "client_name",
    "pest",
    "object_type",
    "volume",
    "address",
    "phones",
    "client_type",
    "manager",
    "base_price",
)


@dataclass
class EditOrder:
    fields: dict = field(default_factory=dict)
    # Поля статуса (детали завершения, причина отмены) без смены статуса
    status_fields: dict = field(default_factory=dict)


@dataclass
class ReopenOrder:
    pass


@dataclass
class CompleteOrder:
    final_amount: Optional[Decimal] = None
    master_percent: Optional[Decimal] = None
    details: dict = field(default_factory=dict)
    repeat_date: Optional[str] = None
    repeat_time: Optional[str] = None


@dataclass
class CancelOrder:
    reason: Optional[str] = None


Command = Union[EditOrder, ReopenOrder, CompleteOrder, CancelOrder]


@dataclass
class LifecycleResult:
    order: Order
    follow_up: Optional[Order] = None
    # Файл договора, на который заказ больше не ссылается
    released_file: Optional[str] = None


def calculate_master_income(amount: Decimal, percent: Decimal) -> Decimal:
    """Доля мастера, округлённая до рубля."""
    return (Decimal(amount) * Decimal(percent) / Decimal("100")).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )


def calculate_cash_desk(amount: Decimal, master_income: Decimal) -> Decimal:
    return Decimal(amount) - Decimal(master_income)


def build_commands(data: OrderUpdate) -> List[Command]:
    provided = data.model_dump(exclude_unset=True)
    commands: List[Command] = []

    edit = EditOrder()
    for name in COMMON_FIELDS:
        # Общие поля NOT NULL: явный null игнорируется
        if name in provided and provided[name] is not None:
            value = provided[name]
            edit.fields[name] = dump_phones(value) if name == "phones" else value

    status = provided.get("status")
    if status == OrderStatus.COMPLETED:
        commands.append(CompleteOrder(
            final_amount=provided.get("final_amount"),
            master_percent=provided.get("master_percent"),
            details={k: provided[k] for k in COMPLETION_DETAILS if k in provided},
            repeat_date=provided.get("repeat_date"),
            repeat_time=provided.get("repeat_time"),
        ))
    elif status == OrderStatus.CANCELLED:
        commands.append(CancelOrder(reason=provided.get("cancel_reason")))
    elif status == OrderStatus.IN_PROGRESS:
        commands.append(ReopenOrder())
    else:
        # Без смены статуса суммы не принимаются: выплата считается только при завершении
        for name in COMPLETION_DETAILS + ("repeat_date", "repeat_time", "cancel_reason"):
            if name in provided:
                edit.status_fields[name] = provided[name]

    if edit.fields or edit.status_fields:
        commands.insert(0, edit)
    return commands


def _snapshot(order: Order) -> dict:
    return {name: getattr(order, name) for name in FOLLOW_UP_FIELDS}


def _enter_status(order: Order, status: OrderStatus) -> None:
    for name in stale_fields(status):
        setattr(order, name, None)
    order.status = status


def _apply_completion(order: Order, cmd: CompleteOrder) -> None:
    for name, value in cmd.details.items():
        setattr(order, name, value)
    if cmd.final_amount is not None and cmd.master_percent is not None:
        income = calculate_master_income(cmd.final_amount, cmd.master_percent)
        order.final_amount = cmd.final_amount
        order.master_percent = cmd.master_percent
        order.master_income = income
        order.cash_desk = calculate_cash_desk(cmd.final_amount, income)
    elif cmd.final_amount is not None or cmd.master_percent is not None:
        # Черновик: одна из сумм без второй, расчёт выплаты сбрасывается
        if cmd.final_amount is not None:
            order.final_amount = cmd.final_amount
        if cmd.master_percent is not None:
            order.master_percent = cmd.master_percent
        order.master_income = None
        order.cash_desk = None
    if cmd.repeat_date is not None:
        order.repeat_date = cmd.repeat_date
        order.repeat_time = cmd.repeat_time or DEFAULT_REPEAT_TIME


def _follow_up(snapshot: dict, repeat_date: str, repeat_time: Optional[str]) -> Order:
    return Order(
        order_type=OrderType.SECONDARY,
        status=OrderStatus.IN_PROGRESS,
        date=repeat_date,
        time=repeat_time or DEFAULT_REPEAT_TIME,
        comment="",
        **snapshot,
    )


def apply_commands(order: Order, commands: List[Command]) -> LifecycleResult:
    snapshot = _snapshot(order)
    was_status = order.status
    was_repeat_date = order.repeat_date
    result = LifecycleResult(order=order)

    for cmd in commands:
        if isinstance(cmd, EditOrder):
            for name, value in cmd.fields.items():
                setattr(order, name, value)
            for name, value in cmd.status_fields.items():
                if owns_field(order.status, name):
                    setattr(order, name, value)
        elif isinstance(cmd, CompleteOrder):
            _enter_status(order, OrderStatus.COMPLETED)
            _apply_completion(order, cmd)
            # Повторное сохранение завершённого заказа с той же датой повтора не плодит дубли
            repeat_is_new = (
                was_status != OrderStatus.COMPLETED or cmd.repeat_date != was_repeat_date
            )
            if cmd.repeat_date and repeat_is_new:
                result.follow_up = _follow_up(snapshot, cmd.repeat_date, cmd.repeat_time)
        elif isinstance(cmd, CancelOrder):
            _enter_status(order, OrderStatus.CANCELLED)
            if cmd.reason is not None:
                order.cancel_reason = cmd.reason
        elif isinstance(cmd, ReopenOrder):
            _enter_status(order, OrderStatus.IN_PROGRESS)
    return result
