"""
Entrypoint for running the Restaurant Review Service with uvicorn
"""

# Load environment variables from .env file FIRST before any other imports
from dotenv import load_dotenv
load_dotenv()

import uvicorn

from restaurant_reviews.core.config import config
from restaurant_reviews.core.logger import logger
from restaurant_reviews.main import app  # noqa: F401


if __name__ == "__main__":
    logger.info(
        f"Starting {config.service_name} on port {config.port}",
        metadata={
            "service_name": config.service_name,
            "version": config.service_version,
            "environment": config.environment,
            "port": config.port
        }
    )

    uvicorn.run(
        "restaurant_reviews.main:app",
        host=config.host,
        port=config.port,
        reload=config.environment == "development"
    )
