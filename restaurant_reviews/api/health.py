"""
Health and operational API endpoints
"""

import asyncio
import time
from datetime import datetime, timezone
from typing import Any, Dict, List

import psutil
from fastapi import APIRouter
from fastapi.responses import JSONResponse
from sqlalchemy import text

from restaurant_reviews.core.config import config
from restaurant_reviews.core.logger import logger
from restaurant_reviews.db.mongodb import get_database
from restaurant_reviews.db.postgres import get_session_factory

router = APIRouter()

# Track service start time
start_time = time.time()


@router.get("/health")
def health_check():
    """Basic health check endpoint"""
    return {
        "status": "healthy",
        "service": config.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": config.api_version,
    }


@router.get("/health/ready")
async def readiness_check():
    """Readiness probe - both stores must answer"""
    checks = await perform_health_checks()
    failed_checks = [check for check in checks if check["status"] == "unhealthy"]

    if not failed_checks:
        return {
            "status": "ready",
            "service": config.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
        }

    logger.warning(
        f"Readiness check failed - {len(failed_checks)} checks failed",
        metadata={
            "failed_checks": [check["name"] for check in failed_checks],
            "event": "readiness_check_failed"
        }
    )
    return JSONResponse(
        status_code=503,
        content={
            "status": "not ready",
            "service": config.service_name,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "checks": checks,
            "errors": [f"{check['name']}: {check.get('error', 'Unknown error')}" for check in failed_checks],
        },
    )


@router.get("/health/live")
def liveness_check():
    """Liveness probe - check if the app is running"""
    return {
        "status": "alive",
        "service": config.service_name,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": time.time() - start_time,
    }


async def perform_health_checks() -> List[Dict[str, Any]]:
    results = await asyncio.gather(
        check_mongodb_health(),
        check_postgres_health(),
        check_system_resources(),
    )
    return list(results)


async def _timed_check(name: str, probe) -> Dict[str, Any]:
    check_start = time.time()
    try:
        await probe()
        return {
            "name": name,
            "status": "healthy",
            "response_time_ms": round((time.time() - check_start) * 1000, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
    except Exception as e:
        logger.error(
            f"{name} health check failed: {e}",
            metadata={"error": str(e), "event": f"health_check_{name}_failed"}
        )
        return {
            "name": name,
            "status": "unhealthy",
            "error": str(e),
            "response_time_ms": round((time.time() - check_start) * 1000, 2),
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


async def check_mongodb_health() -> Dict[str, Any]:
    """Check MongoDB connectivity"""
    async def probe():
        database = await get_database()
        await database.command("ping")
    return await _timed_check("mongodb", probe)


async def check_postgres_health() -> Dict[str, Any]:
    """Check PostgreSQL connectivity"""
    async def probe():
        session_factory = await get_session_factory()
        async with session_factory() as session:
            await session.execute(text("SELECT 1"))
    return await _timed_check("postgres", probe)


async def check_system_resources() -> Dict[str, Any]:
    """Check process memory and host disk usage"""
    process = psutil.Process()
    system_memory = psutil.virtual_memory()
    disk_usage = psutil.disk_usage('/')

    warnings = []
    if system_memory.percent > 90:
        warnings.append(f"High system memory usage: {system_memory.percent:.1f}%")
    if disk_usage.percent > 85:
        warnings.append(f"High disk usage: {disk_usage.percent:.1f}%")

    result = {
        "name": "system_resources",
        "status": "healthy" if not warnings else "degraded",
        "metrics": {
            "process_memory_mb": round(process.memory_info().rss / 1024 / 1024, 2),
            "system_memory_percent": round(system_memory.percent, 2),
            "disk_usage_percent": round(disk_usage.percent, 2),
            "uptime_seconds": round(time.time() - start_time, 2),
        },
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    if warnings:
        result["warnings"] = warnings
    return result
