"""
HTTP-клиент CRM API. Каждый ответ — конверт {success, data, error, message}:
ответ не 2xx или success=false превращается в ApiError с текстом error → message → HTTP <код>.
"""
from typing import Any, Callable, Dict, List, Optional

import httpx

from pest_crm.core.logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "http://localhost:8000"


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class UnauthorizedError(ApiError):
    """Токен отсутствует, неверен или истёк: нужен повторный вход."""


def _clean(params: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in params.items() if v not in (None, "")}


class CrmApiClient:
    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        on_unauthorized: Optional[Callable[[], None]] = None,
    ):
        self.token = token
        self.on_unauthorized = on_unauthorized
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def __aenter__(self) -> "CrmApiClient":
        return self

    async def __aexit__(self, *exc) -> None:
        await self.aclose()

    def _headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def request(self, method: str, url: str, **kwargs) -> Any:
        logger.debug("%s %s", method, url)
        response = await self._http.request(method, url, headers=self._headers(), **kwargs)
        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}
        if response.status_code == 401:
            self.token = None
            if self.on_unauthorized:
                self.on_unauthorized()
            raise UnauthorizedError(
                body.get("error") or body.get("message") or "HTTP 401", status_code=401
            )
        if not response.is_success:
            raise ApiError(
                body.get("error") or body.get("message") or f"HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if body.get("success") is False:
            raise ApiError(body.get("error") or "API Error", status_code=response.status_code)
        return body.get("data")

    # Авторизация

    async def login(self, password: str) -> str:
        data = await self.request("POST", "/api/auth/login", json={"password": password})
        self.token = data["token"]
        return self.token

    async def verify(self) -> dict:
        return await self.request("GET", "/api/auth/verify")

    def logout(self) -> None:
        self.token = None

    async def health(self) -> dict:
        response = await self._http.get("/health")
        return response.json()

    # Заказы

    async def get_orders(
        self,
        date: Optional[str] = None,
        year: Optional[int] = None,
        month: Optional[int] = None,
        status: Optional[str] = None,
    ) -> List[dict]:
        params = _clean({"date": date, "year": year, "month": month, "status": status})
        return await self.request("GET", "/api/orders", params=params)

    async def get_order(self, order_id: str) -> dict:
        return await self.request("GET", f"/api/orders/{order_id}")

    async def create_order(self, data: dict) -> dict:
        return await self.request("POST", "/api/orders", json=data)

    async def update_order(self, order_id: str, data: dict) -> dict:
        return await self.request("PUT", f"/api/orders/{order_id}", json=data)

    async def delete_order(self, order_id: str) -> None:
        await self.request("DELETE", f"/api/orders/{order_id}")

    async def search_orders(
        self,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        date: Optional[str] = None,
    ) -> List[dict]:
        params = _clean({"phone": phone, "address": address, "date": date})
        return await self.request("GET", "/api/orders/search/query", params=params)

    # Статистика

    async def get_statistics(self, year: int, month: int) -> dict:
        return await self.request("GET", f"/api/statistics/{year}/{month:02d}")

    async def get_statistics_by_period(self, start_date: str, end_date: str) -> dict:
        params = {"startDate": start_date, "endDate": end_date}
        return await self.request("GET", "/api/statistics/period", params=params)

    async def update_ad_spend(self, date: str, amount: float) -> dict:
        return await self.request("PUT", "/api/statistics/ad-spend", json={"date": date, "amount": amount})

    async def update_plan(self, year: int, month: int, plan: dict) -> dict:
        return await self.request("PUT", f"/api/statistics/plan/{year}/{month}", json=plan)

    # Файлы

    async def upload_file(self, filename: str, content: bytes, mimetype: str) -> dict:
        files = {"file": (filename, content, mimetype)}
        return await self.request("POST", "/api/upload", files=files)

    async def delete_file(self, filename: str) -> None:
        await self.request("DELETE", f"/api/upload/{filename}")
