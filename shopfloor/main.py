import time
import uuid
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.routing import APIRoute
from sqlmodel import Session
from starlette.middleware.base import BaseHTTPMiddleware

from shopfloor.api.main import api_router
from shopfloor.core.config import settings
from shopfloor.core.db import create_tables, engine, init_db
from shopfloor.core.observability import (
    REQUEST_COUNT,
    REQUEST_DURATION,
    get_logger,
    set_correlation_id,
    setup_metrics,
    setup_structured_logging,
)

logger = get_logger(__name__)


class ObservabilityMiddleware(BaseHTTPMiddleware):
    """Correlation ids, request logging and HTTP metrics."""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get("X-Correlation-ID") or str(uuid.uuid4())
        set_correlation_id(correlation_id)

        start_time = time.time()
        method = request.method
        path = request.url.path

        logger.info(
            "Request started",
            method=method,
            path=path,
            client_ip=request.client.host if request.client else None,
        )

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.time() - start_time
            if settings.ENABLE_METRICS:
                REQUEST_COUNT.labels(method=method, endpoint=path, status="500").inc()
                REQUEST_DURATION.labels(method=method, endpoint=path).observe(duration)
            logger.error(
                "Request failed",
                method=method,
                path=path,
                duration_seconds=duration,
                error=str(e),
                error_type=type(e).__name__,
                exc_info=True,
            )
            raise

        duration = time.time() - start_time
        status_code = response.status_code
        if settings.ENABLE_METRICS:
            REQUEST_COUNT.labels(
                method=method, endpoint=path, status=str(status_code)
            ).inc()
            REQUEST_DURATION.labels(method=method, endpoint=path).observe(duration)

        response.headers["X-Correlation-ID"] = correlation_id
        logger.info(
            "Request completed",
            method=method,
            path=path,
            status_code=status_code,
            duration_seconds=duration,
        )
        return response


def custom_generate_unique_id(route: APIRoute) -> str:
    return f"{route.tags[0]}-{route.name}"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    setup_structured_logging()
    setup_metrics()
    create_tables()
    with Session(engine) as session:
        init_db(session)

    logger.info(
        "Application started",
        project_name=settings.PROJECT_NAME,
        environment=settings.ENVIRONMENT,
        api_version=settings.API_V1_STR,
        resume_requires_inspection=settings.RESUME_REQUIRES_INSPECTION,
        emails_enabled=settings.emails_enabled,
        metrics_port=settings.METRICS_PORT if settings.ENABLE_METRICS else None,
    )
    yield
    logger.info("Shutting down application")


app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Shop-floor terminal service.

    Drives each terminal through setup, first-off inspection, running,
    pause and completion, records every activity in the job log, computes
    setup and run efficiency, and raises remanufacture requests when a run
    completes short.
    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    generate_unique_id_function=custom_generate_unique_id,
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

app.include_router(api_router, prefix=settings.API_V1_STR)
