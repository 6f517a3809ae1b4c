from decimal import Decimal
from typing import Annotated, Generic, Optional, TypeVar

from pydantic import BaseModel, PlainSerializer
from pydantic.alias_generators import to_camel

T = TypeVar("T")

# Денежные суммы: Decimal внутри, число в JSON
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"
TIME_PATTERN = r"^\d{2}:\d{2}$"


class CamelModel(BaseModel):
    """JSON API в camelCase, в Python — snake_case."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


class ApiResponse(BaseModel, Generic[T]):
    """Ответ API: {success, data?, error?, message?}."""
    success: bool = True
    data: Optional[T] = None
    error: Optional[str] = None
    message: Optional[str] = None


def error_body(message: str) -> dict:
    return {"success": False, "error": message}
