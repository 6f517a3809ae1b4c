import enum
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional
from sqlalchemy import String, Enum, Numeric, DateTime, Text
from sqlalchemy.orm import Mapped, mapped_column

from pest_crm.core.database import Base


class OrderStatus(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class OrderType(str, enum.Enum):
    PRIMARY = "primary"
    SECONDARY = "secondary"


class ClientType(str, enum.Enum):
    INDIVIDUAL = "individual"
    LEGAL = "legal"


class Order(Base):
    """Заказ на обработку: слот в календаре (date, time) и финансы по нему."""
    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    order_type: Mapped[OrderType] = mapped_column(
        Enum(OrderType), default=OrderType.PRIMARY, nullable=False
    )
    client_type: Mapped[ClientType] = mapped_column(
        Enum(ClientType), default=ClientType.INDIVIDUAL, nullable=False
    )
    date: Mapped[str] = mapped_column(String(10), index=True, nullable=False)  # YYYY-MM-DD
    time: Mapped[str] = mapped_column(String(5), nullable=False)  # HH:00

    client_name: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    pest: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    object_type: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    volume: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    address: Mapped[str] = mapped_column(String(500), default="", nullable=False)
    # Список телефонов хранится JSON-строкой; поиск по телефону — подстрокой в ней
    phones: Mapped[str] = mapped_column(Text, default="[]", nullable=False)
    comment: Mapped[str] = mapped_column(Text, default="", nullable=False)
    manager: Mapped[str] = mapped_column(String(255), default="", nullable=False)
    base_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0, nullable=False)

    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus), default=OrderStatus.IN_PROGRESS, nullable=False
    )

    # Завершение
    final_amount: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    master_percent: Mapped[Optional[Decimal]] = mapped_column(Numeric(5, 2), nullable=True)
    master_income: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    cash_desk: Mapped[Optional[Decimal]] = mapped_column(Numeric(12, 2), nullable=True)
    master_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    master_contact: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    completion_comment: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    contract_photo: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    repeat_date: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    repeat_time: Mapped[Optional[str]] = mapped_column(String(5), nullable=True)

    # Отмена
    cancel_reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )
