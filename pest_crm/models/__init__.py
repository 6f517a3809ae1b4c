from pest_crm.core.database import Base
from pest_crm.models.order import ClientType, Order, OrderStatus, OrderType
from pest_crm.models.statistics import DailyAdSpend, MonthlyPlan

__all__ = [
    "Base",
    "ClientType",
    "DailyAdSpend",
    "MonthlyPlan",
    "Order",
    "OrderStatus",
    "OrderType",
]
