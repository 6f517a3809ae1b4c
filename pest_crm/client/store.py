"""
Состояние клиента: загруженные заказы и статистика.

OrderStore — единственный владелец состояния; экраны получают его явно
и меняют только через действия. Данные не синхронизируются по частям:
после навигации или по таймеру список перезапрашивается целиком.
"""
import re
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set

from pest_crm.client.api import ApiError, CrmApiClient
from pest_crm.core.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class StoreState:
    orders: List[dict] = field(default_factory=list)
    statistics: Optional[dict] = None
    is_loading: bool = False
    error: Optional[str] = None


class OrderStore:
    def __init__(self, api: CrmApiClient):
        self.api = api
        self.state = StoreState()

    def _start(self) -> None:
        self.state.is_loading = True
        self.state.error = None

    def _fail(self, error: ApiError) -> None:
        self.state.error = error.message
        self.state.is_loading = False

    # Загрузка: ошибка сохраняется в state.error, исключение не пробрасывается

    async def fetch_orders(self, year: int, month: int) -> None:
        self._start()
        try:
            self.state.orders = await self.api.get_orders(year=year, month=month)
            self.state.is_loading = False
        except ApiError as e:
            self._fail(e)

    async def fetch_orders_by_date(self, date: str) -> None:
        self._start()
        try:
            self.state.orders = await self.api.get_orders(date=date)
            self.state.is_loading = False
        except ApiError as e:
            self._fail(e)

    async def fetch_statistics(self, year: int, month: int) -> None:
        self._start()
        try:
            self.state.statistics = await self.api.get_statistics(year, month)
            self.state.is_loading = False
        except ApiError as e:
            self._fail(e)

    async def fetch_statistics_by_period(self, start_date: str, end_date: str) -> None:
        self._start()
        try:
            self.state.statistics = await self.api.get_statistics_by_period(start_date, end_date)
            self.state.is_loading = False
        except ApiError as e:
            self._fail(e)

    # Изменения: ошибка сохраняется и пробрасывается для показа в форме

    async def create_order(self, data: dict) -> dict:
        self._start()
        try:
            order = await self.api.create_order(data)
        except ApiError as e:
            self._fail(e)
            raise
        self.state.orders = self.state.orders + [order]
        self.state.is_loading = False
        return order

    async def update_order(self, order_id: str, data: dict) -> dict:
        self._start()
        try:
            updated = await self.api.update_order(order_id, data)
        except ApiError as e:
            self._fail(e)
            raise
        self.state.orders = [updated if o["id"] == order_id else o for o in self.state.orders]
        self.state.is_loading = False
        return updated

    async def delete_order(self, order_id: str) -> None:
        self._start()
        try:
            await self.api.delete_order(order_id)
        except ApiError as e:
            self._fail(e)
            raise
        self.state.orders = [o for o in self.state.orders if o["id"] != order_id]
        self.state.is_loading = False

    async def search_orders(
        self,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        date: Optional[str] = None,
    ) -> List[dict]:
        self._start()
        try:
            found = await self.api.search_orders(phone=phone, address=address, date=date)
        except ApiError as e:
            self._fail(e)
            raise
        self.state.is_loading = False
        return found

    async def update_ad_spend(self, date: str, amount: float) -> None:
        try:
            await self.api.update_ad_spend(date, amount)
        except ApiError as e:
            self.state.error = e.message
            raise

    def clear_error(self) -> None:
        self.state.error = None


_NON_DIGITS = re.compile(r"[^\d]")

SUM_FIELDS = ("primaryCount", "secondaryCount", "primarySum", "secondarySum", "totalSum", "cashDesk")


class AdSpendEditor:
    """
    Правка расхода на рекламу по дням без запроса на каждое нажатие.

    Изменённые даты копятся как «грязные»; blur сохраняет одну дату,
    flush — все (при смене периода, уходе со страницы, закрытии).
    Неудачное сохранение оставляет дату грязной до следующей попытки.
    """

    def __init__(self, store: OrderStore):
        self.store = store
        self.values: Dict[str, str] = {}
        self.dirty: Set[str] = set()

    def load(self, statistics: Optional[dict]) -> None:
        """Начальные значения из статистики; грязные даты сбрасываются."""
        self.values = {}
        for day in (statistics or {}).get("daily", []):
            amount = day.get("adSpend") or 0
            self.values[day["date"]] = str(int(amount)) if amount else ""
        self.dirty.clear()

    def change(self, date: str, raw: str) -> None:
        self.values[date] = _NON_DIGITS.sub("", raw or "")
        self.dirty.add(date)

    def amount(self, date: str) -> int:
        value = self.values.get(date) or ""
        return int(value) if value else 0

    @property
    def has_dirty(self) -> bool:
        return bool(self.dirty)

    async def blur(self, date: str) -> bool:
        if date not in self.dirty:
            return False
        try:
            await self.store.update_ad_spend(date, self.amount(date))
        except ApiError as e:
            logger.warning("Не удалось сохранить расход за %s: %s", date, e.message)
            return False
        self.dirty.discard(date)
        return True

    async def flush(self) -> bool:
        """Сохранить все грязные даты; False, если хоть одна не сохранилась."""
        saved_all = True
        for date in sorted(self.dirty):
            if not await self.blur(date):
                saved_all = False
        return saved_all

    def day_net_profit(self, day: dict) -> float:
        return (day.get("cashDesk") or 0) - self.amount(day["date"])

    def totals(self, daily: List[dict]) -> dict:
        """Итоги по дням с учётом ещё не сохранённых значений рекламы."""
        totals = {name: 0 for name in SUM_FIELDS}
        for day in daily:
            for name in SUM_FIELDS:
                totals[name] += day.get(name) or 0
        totals["adSpend"] = sum(self.amount(day["date"]) for day in daily)
        totals["netProfit"] = totals["cashDesk"] - totals["adSpend"]
        return totals
