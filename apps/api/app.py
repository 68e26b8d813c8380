"""
FastAPI приложение AquaTrack
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
import time
import uuid

from apps.api.services.sales_entry_service_db import PersistenceError
from apps.api.services.user_service_db import UserServiceDB
from core.config.settings import settings
from core.database.session import close_database, get_async_session, init_database
from core.logging.logger import logger
from shared.services.expected_amount import AdjustmentError
from .main import api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Подключение к БД и создание администратора по умолчанию."""
    await init_database()
    async with get_async_session() as session:
        await UserServiceDB(session).ensure_default_admin(
            settings.default_admin_user_id, settings.default_admin_password
        )
    logger.info("Application started", app=settings.app_name, version=settings.version)
    yield
    await close_database()
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Создание FastAPI приложения."""
    app = FastAPI(
        title=settings.app_name,
        description="API сверки продаж воды и расчета зарплаты курьеров",
        version=settings.version,
        debug=settings.debug,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # В продакшене ограничить
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_middleware(
        TrustedHostMiddleware,
        allowed_hosts=["*"]  # В продакшене ограничить
    )

    # Middleware для логирования запросов
    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Логирование всех HTTP запросов."""
        request_id = str(uuid.uuid4())
        start_time = time.time()

        logger.info(
            "HTTP Request started",
            request_id=request_id,
            method=request.method,
            url=str(request.url),
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)

            process_time = time.time() - start_time
            logger.info(
                "HTTP Request completed",
                request_id=request_id,
                status_code=response.status_code,
                process_time=process_time
            )

            # Добавляем заголовки для отслеживания
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = str(process_time)

            return response

        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                "HTTP Request failed",
                request_id=request_id,
                error=str(e),
                process_time=process_time
            )
            raise

    # Обработчики ошибок
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        """Обработчик HTTP исключений."""
        logger.warning(
            "HTTP Exception",
            status_code=exc.status_code,
            detail=exc.detail,
            path=request.url.path
        )

        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": "HTTP Error",
                "message": exc.detail,
                "status_code": exc.status_code
            },
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Обработчик ошибок валидации."""
        details = [
            {"loc": list(error.get("loc", ())), "msg": error.get("msg"), "type": error.get("type")}
            for error in exc.errors()
        ]
        logger.warning("Validation Error", errors=details, path=request.url.path)

        return JSONResponse(
            status_code=422,
            content={
                "error": "Validation Error",
                "message": "Ошибка валидации данных",
                "details": details
            }
        )

    @app.exception_handler(AdjustmentError)
    async def adjustment_exception_handler(request: Request, exc: AdjustmentError):
        """Сервис проверки ожидаемой суммы не дал результата. Отчет не сохранен."""
        logger.error("Expected amount adjustment failed", error=str(exc), path=request.url.path)

        return JSONResponse(
            status_code=502,
            content={
                "error": "processing failed",
                "message": f"Expected amount check failed, the entry was not saved: {exc}"
            }
        )

    @app.exception_handler(PersistenceError)
    async def persistence_exception_handler(request: Request, exc: PersistenceError):
        """Сверка посчитана, но не сохранена: причина и предпросмотр."""
        return JSONResponse(
            status_code=503,
            content={
                "error": "Persistence Error",
                "message": f"The entry was computed but could not be saved: {exc.cause}",
                "preview": jsonable_encoder(exc.preview),
            }
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_exception_handler(request: Request, exc: SQLAlchemyError):
        """Ошибка базы данных."""
        logger.error("Database Error", error=str(exc), path=request.url.path)

        return JSONResponse(
            status_code=503,
            content={
                "error": "Persistence Error",
                "message": f"Database is unavailable: {exc}"
            }
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(request: Request, exc: Exception):
        """Общий обработчик исключений."""
        logger.exception("General Exception", error=str(exc), path=request.url.path)

        return JSONResponse(
            status_code=500,
            content={
                "error": "Internal Server Error",
                "message": "Внутренняя ошибка сервера"
            }
        )

    # Подключаем API роутеры
    app.include_router(api_router)

    @app.get("/")
    async def root():
        """Корневой эндпоинт."""
        return {
            "app": settings.app_name,
            "version": settings.version,
            "status": "running",
            "docs": "/docs" if settings.debug else "disabled"
        }

    @app.get("/health")
    async def health_check():
        """Проверка состояния приложения."""
        return {
            "status": "healthy",
            "timestamp": time.time(),
            "version": settings.version
        }

    return app


# Создаем экземпляр приложения
app = create_app()
