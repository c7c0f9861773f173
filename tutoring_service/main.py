import time
import logging
import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy import text

from . import __version__
from .config import settings
from .infrastructure.db import engine
from .infrastructure.models import Base
from .infrastructure.metrics import (
    metrics_endpoint,
    http_requests_total,
    http_request_duration_seconds
)
from .infrastructure.rate_limit import limiter
from .interfaces.http.errors import register_exception_handlers
from .interfaces.http.routers import groups as groups_router
from .interfaces.http.routers import users as users_router

# Настройка структурированного логирования
log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.make_filtering_bound_logger(log_level),
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()

app = FastAPI(title="Tutoring Groups Service", version=__version__)
app.state.limiter = limiter

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With"],
    max_age=600,
)

register_exception_handlers(app)


def _route_template(request: Request) -> str:
    # /api/groups/{group_id}, а не сырой путь: иначе метки растут без предела
    route = request.scope.get("route")
    return getattr(route, "path", request.url.path)


@app.middleware("http")
async def observe_requests(request: Request, call_next):
    """Метрики и лог для каждого запроса, в том числе упавшего с необработанной ошибкой"""
    started = time.perf_counter()
    status_code = 500
    try:
        response = await call_next(request)
        status_code = response.status_code
        if response.headers.get("content-type", "").startswith("application/json"):
            response.headers["content-type"] = "application/json; charset=utf-8"
        return response
    finally:
        elapsed = time.perf_counter() - started
        endpoint = _route_template(request)
        http_requests_total.labels(method=request.method, endpoint=endpoint, status=status_code).inc()
        http_request_duration_seconds.labels(method=request.method, endpoint=endpoint).observe(elapsed)
        logger.info(
            "http_request",
            method=request.method,
            path=request.url.path,
            endpoint=endpoint,
            status_code=status_code,
            duration_ms=round(elapsed * 1000, 2),
        )


@app.on_event("startup")
def on_startup():
    logger.info("Starting tutoring service", version=__version__)
    Base.metadata.create_all(bind=engine)

    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Database connection established")


@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/metrics")
def metrics():
    """Prometheus metrics endpoint"""
    return metrics_endpoint()


app.include_router(users_router.router)
app.include_router(groups_router.router)
