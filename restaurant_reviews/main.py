"""
FastAPI Application - Restaurant Review Service
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from restaurant_reviews.api import admin, health, reviews, users
from restaurant_reviews.core.config import config
from restaurant_reviews.core.errors import ErrorResponse, error_response_handler, http_exception_handler
from restaurant_reviews.core.logger import logger
from restaurant_reviews.core.telemetry import instrument_app
from restaurant_reviews.db.mongodb import close_mongo_connection, connect_to_mongo, ensure_review_indexes
from restaurant_reviews.db.postgres import close_postgres_connection, connect_to_postgres
from restaurant_reviews.middleware import CorrelationIdMiddleware
from restaurant_reviews.services.pending_updates import PendingUpdateCache


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info("Starting Restaurant Review Service...")
    await connect_to_mongo()
    await ensure_review_indexes()
    await connect_to_postgres()
    app.state.pending_updates = PendingUpdateCache(config.pending_update_ttl_seconds)

    logger.info(
        "Restaurant Review Service started successfully",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    yield

    logger.info("Shutting down Restaurant Review Service...")
    app.state.pending_updates.clear()
    await close_postgres_connection()
    await close_mongo_connection()


async def validation_exception_handler(request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Validation error", "details": exc.errors()}
    )


def create_app() -> FastAPI:
    app = FastAPI(
        title="Restaurant Review Service",
        description="Restaurant reviews with rating stats kept in sync across stores",
        version=config.service_version,
        lifespan=lifespan
    )

    instrument_app(app)

    app.add_exception_handler(ErrorResponse, error_response_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.add_middleware(CorrelationIdMiddleware, header_name=config.correlation_id_header)

    app.include_router(health.router, tags=["health"])
    app.include_router(reviews.router, prefix="/api", tags=["reviews"])
    app.include_router(users.router, prefix="/api/users", tags=["users"])
    app.include_router(admin.router, prefix="/api/admin", tags=["admin"])

    return app


app = create_app()
