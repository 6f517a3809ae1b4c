"""Ошибки предметной области и их HTTP-коды."""


class CrmError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NotFoundError(CrmError):
    status_code = 404


class ValidationError(CrmError):
    status_code = 400


class AuthError(CrmError):
    status_code = 401


class UnsupportedMediaError(CrmError):
    """Недопустимый тип файла или превышен размер."""
    status_code = 400
