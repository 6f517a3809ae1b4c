"""Общий пароль входа и JWT для веб-авторизации."""
import hmac
import sys
from datetime import datetime, timedelta
from typing import List, Optional

import bcrypt
import jwt

from pest_crm.config import settings

ADMIN_SUBJECT = "admin"


def make_password_hash(password: str) -> str:
    """Значение для ADMIN_PASSWORD_HASH: bcrypt-хеш общего пароля."""
    if not password:
        raise ValueError("Пароль не может быть пустым")
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str) -> bool:
    """Проверка общего пароля: по bcrypt-хешу, если задан, иначе по ADMIN_PASSWORD."""
    if settings.admin_password_hash:
        return bcrypt.checkpw(plain.encode("utf-8"), settings.admin_password_hash.encode("utf-8"))
    return hmac.compare_digest(plain.encode("utf-8"), settings.admin_password.encode("utf-8"))


def create_access_token(subject: str = ADMIN_SUBJECT) -> str:
    now = datetime.utcnow()
    expire = now + timedelta(minutes=settings.jwt_expire_minutes)
    payload = {
        "sub": subject,
        "exp": expire,
        "iat": now,
    }
    return jwt.encode(
        payload,
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> Optional[dict]:
    try:
        return jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
        )
    except jwt.PyJWTError:
        return None


def expires_in() -> str:
    """Срок жизни токена в формате 7d / 12h / 30m."""
    minutes = settings.jwt_expire_minutes
    if minutes % (60 * 24) == 0:
        return f"{minutes // (60 * 24)}d"
    if minutes % 60 == 0:
        return f"{minutes // 60}h"
    return f"{minutes}m"


def main(argv: Optional[List[str]] = None) -> int:
    """pest-crm-hash-password <пароль> — печатает строку для .env."""
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1 or not args[0]:
        print("Использование: pest-crm-hash-password <пароль>", file=sys.stderr)
        return 2
    print(f"ADMIN_PASSWORD_HASH={make_password_hash(args[0])}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
