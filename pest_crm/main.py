from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from pest_crm.config import settings
from pest_crm.core.database import engine, Base
from pest_crm.core.errors import AuthError, CrmError
from pest_crm.core.logging_config import setup_logging, get_logger
from pest_crm.schemas.common import error_body
from pest_crm.services.file_storage import URL_PREFIX, uploads_dir
from pest_crm.api.auth import router as auth_router
from pest_crm.api.orders import router as orders_router
from pest_crm.api.statistics import router as statistics_router
from pest_crm.api.upload import router as upload_router

import pest_crm.models  # noqa: F401  регистрация таблиц в Base.metadata

setup_logging()
logger = get_logger(__name__)

APP_NAME = "CRM Pest Control API"
APP_VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Таблицы БД проверены/созданы")
    yield
    await engine.dispose()


app = FastAPI(title=APP_NAME, version=APP_VERSION, lifespan=lifespan)


@app.exception_handler(CrmError)
async def crm_error_handler(request: Request, exc: CrmError):
    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthError) else None
    return JSONResponse(status_code=exc.status_code, content=error_body(exc.message), headers=headers)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail if isinstance(exc.detail, str) else "Ошибка запроса"
    if exc.status_code == 404 and detail == "Not Found":
        detail = "Route not found"
    return JSONResponse(status_code=exc.status_code, content=error_body(detail), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    logger.warning("Ошибка валидации %s %s: %s", request.method, request.url.path, errors)
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "query", "path"))
        message = f"{field}: {first.get('msg')}" if field else str(first.get("msg"))
    else:
        message = "Некорректные данные запроса"
    return JSONResponse(status_code=400, content=error_body(message))


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Необработанная ошибка: %s", exc)
    detail = "Внутренняя ошибка сервера"
    if isinstance(exc, IntegrityError):
        detail = "Конфликт данных (дубликат). Обновите страницу и повторите."
    return JSONResponse(status_code=500, content=error_body(detail))


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    logger.info("%s %s", request.method, request.url.path)
    return await call_next(request)


app.include_router(auth_router)
app.include_router(orders_router)
app.include_router(statistics_router)
app.include_router(upload_router)

# Файлы договоров открываются браузером напрямую (<img>, ссылка), без заголовка авторизации
app.mount(URL_PREFIX, StaticFiles(directory=uploads_dir(), check_dir=False), name="uploads")


@app.get("/health")
def health():
    return {"status": "ok", "timestamp": datetime.utcnow().isoformat()}


@app.get("/api")
def api_info():
    return {"message": APP_NAME, "version": APP_VERSION}
