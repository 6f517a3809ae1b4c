import json
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field, field_validator

from pest_crm.models import ClientType, OrderStatus, OrderType
from pest_crm.schemas.common import CamelModel, DATE_PATTERN, Money, TIME_PATTERN


def parse_phones(value) -> List[str]:
    """Телефоны из хранимой JSON-строки (или уже списка)."""
    if value is None:
        return []
    if isinstance(value, list):
        return value
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return [value]
    if isinstance(parsed, list):
        return [str(p) for p in parsed]
    return [str(parsed)]


def dump_phones(phones: Optional[List[str]]) -> str:
    return json.dumps(list(phones or []), ensure_ascii=False)


class OrderCreate(CamelModel):
    """Новый заказ из календаря. Статус не принимается — всегда in_progress."""
    order_type: OrderType = OrderType.PRIMARY
    client_type: ClientType = ClientType.INDIVIDUAL
    date: str = Field(..., pattern=DATE_PATTERN)
    time: str = Field(..., pattern=TIME_PATTERN)
    client_name: str = ""
    pest: str = ""
    object_type: str = ""
    volume: str = ""
    address: str = ""
    phones: List[str] = Field(default_factory=list)
    comment: str = ""
    manager: str = ""
    base_price: Decimal = Field(default=Decimal("0"), ge=0)


class OrderUpdate(CamelModel):
    """Частичное обновление: любое подмножество полей плюс смена статуса."""
    order_type: Optional[OrderType] = None
    client_type: Optional[ClientType] = None
    date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)
    client_name: Optional[str] = None
    pest: Optional[str] = None
    object_type: Optional[str] = None
    volume: Optional[str] = None
    address: Optional[str] = None
    phones: Optional[List[str]] = None
    comment: Optional[str] = None
    manager: Optional[str] = None
    base_price: Optional[Decimal] = Field(default=None, ge=0)

    status: Optional[OrderStatus] = None

    final_amount: Optional[Decimal] = Field(default=None, ge=0)
    master_percent: Optional[Decimal] = Field(default=None, ge=0, le=100)
    master_name: Optional[str] = None
    master_contact: Optional[str] = None
    completion_comment: Optional[str] = None
    contract_photo: Optional[str] = None
    repeat_date: Optional[str] = Field(default=None, pattern=DATE_PATTERN)
    repeat_time: Optional[str] = Field(default=None, pattern=TIME_PATTERN)

    cancel_reason: Optional[str] = None


class OrderResponse(CamelModel):
    id: str
    order_type: OrderType
    client_type: ClientType
    date: str
    time: str
    client_name: str
    pest: str
    object_type: str
    volume: str
    address: str
    phones: List[str]
    comment: str
    manager: str
    base_price: Money
    status: OrderStatus
    final_amount: Optional[Money] = None
    master_percent: Optional[Money] = None
    master_income: Optional[Money] = None
    cash_desk: Optional[Money] = None
    master_name: Optional[str] = None
    master_contact: Optional[str] = None
    completion_comment: Optional[str] = None
    contract_photo: Optional[str] = None
    repeat_date: Optional[str] = None
    repeat_time: Optional[str] = None
    cancel_reason: Optional[str] = None
    created_at: datetime

    @field_validator("phones", mode="before")
    @classmethod
    def _parse_phones(cls, v):
        return parse_phones(v)
