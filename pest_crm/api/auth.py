"""Веб-авторизация: вход по общему паролю, JWT, проверка токена."""
from typing import Optional

from fastapi import APIRouter, Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel

from pest_crm.core.errors import AuthError, ValidationError
from pest_crm.core.logging_config import get_logger
from pest_crm.schemas.common import ApiResponse, CamelModel
from pest_crm.services.auth_service import (
    create_access_token,
    decode_token,
    expires_in,
    verify_password,
)

router = APIRouter(prefix="/api/auth", tags=["auth"])
security = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


class LoginRequest(BaseModel):
    password: Optional[str] = None


class TokenData(CamelModel):
    token: str
    expires_in: str


class VerifyData(CamelModel):
    valid: bool
    user_id: str


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """Идентификатор пользователя из Bearer-токена; иначе 401."""
    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthError("Требуется авторизация")
    payload = decode_token(credentials.credentials)
    if not payload or "sub" not in payload:
        logger.warning("Токен не прошёл проверку (неверный или истёк)")
        raise AuthError("Недействительный токен")
    return str(payload["sub"])


@router.post("/login", response_model=ApiResponse[TokenData])
async def login(body: LoginRequest):
    if not body.password:
        raise ValidationError("Введите пароль")
    if not verify_password(body.password):
        logger.warning("Неудачная попытка входа")
        raise AuthError("Неверный пароль")
    return ApiResponse(data=TokenData(token=create_access_token(), expires_in=expires_in()))


@router.get("/verify", response_model=ApiResponse[VerifyData])
async def verify(user_id: str = Depends(require_auth)):
    return ApiResponse(data=VerifyData(valid=True, user_id=user_id))


@router.post("/logout", response_model=ApiResponse[None])
async def logout():
    # Токены не хранятся на сервере: клиент просто удаляет свой
    return ApiResponse(message="Выход выполнен")
