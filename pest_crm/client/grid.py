"""Календарная сетка: дни месяца × 24 часовых слота."""
import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional, Tuple

HOURS = list(range(24))
WEEKDAYS = ("Пн", "Вт", "Ср", "Чт", "Пт", "Сб", "Вс")


def slot_time(hour: int) -> str:
    return f"{hour:02d}:00"


def month_dates(year: int, month: int) -> List[date]:
    days = calendar.monthrange(year, month)[1]
    return [date(year, month, d) for d in range(1, days + 1)]


def is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def order_kind(order: dict) -> str:
    """Вид карточки: отменён / выполнен / первичный / вторичный."""
    if order.get("status") == "cancelled":
        return "cancelled"
    if order.get("status") == "completed":
        return "completed"
    return "primary" if order.get("orderType") == "primary" else "secondary"


@dataclass
class Slot:
    date: str
    time: str
    orders: List[dict] = field(default_factory=list)

    @property
    def is_free(self) -> bool:
        # Занятый слот не даёт создать заказ из календаря; модель это не ограничивает
        return not self.orders


class CalendarGrid:
    def __init__(self, dates: List[date], orders: List[dict], today: Optional[date] = None):
        self.dates = dates
        self.today = today or date.today()
        self._slots: Dict[Tuple[str, str], List[dict]] = {}
        for order in orders:
            self._slots.setdefault((order["date"], order["time"]), []).append(order)

    @classmethod
    def for_month(cls, year: int, month: int, orders: List[dict], today: Optional[date] = None):
        return cls(month_dates(year, month), orders, today=today)

    def slot(self, day: date, hour: int) -> Slot:
        key = (day.isoformat(), slot_time(hour))
        return Slot(date=key[0], time=key[1], orders=list(self._slots.get(key, [])))

    def can_create(self, day: date, hour: int) -> bool:
        return self.slot(day, hour).is_free

    def header(self, day: date) -> dict:
        return {
            "label": day.strftime("%d.%m"),
            "weekday": WEEKDAYS[day.weekday()],
            "is_today": day == self.today,
            "is_weekend": is_weekend(day),
        }

    def rows(self) -> List[List[Slot]]:
        """Строка на каждый час, ячейка на каждый день."""
        return [[self.slot(day, hour) for day in self.dates] for hour in HOURS]
