"""
OpenTelemetry spans for inbound requests and MongoDB commands
Exporting is left to the deployment's collector setup
"""

from fastapi import FastAPI
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.pymongo import PymongoInstrumentor

from restaurant_reviews.core.config import config
from restaurant_reviews.core.logger import logger


def instrument_app(app: FastAPI) -> None:
    """Instrument the app and the MongoDB driver; probes matching otel_excluded_urls get no spans"""
    if not config.otel_enabled:
        logger.info("OpenTelemetry instrumentation disabled", metadata={"event": "otel_disabled"})
        return

    try:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=config.otel_excluded_urls)

        # Driver instrumentation is process-wide; create_app may run more than once
        pymongo_instrumentor = PymongoInstrumentor()
        if not pymongo_instrumentor.is_instrumented_by_opentelemetry:
            pymongo_instrumentor.instrument()

        logger.info(
            "OpenTelemetry instrumentation complete",
            metadata={"event": "otel_instrumented", "excluded_urls": config.otel_excluded_urls}
        )
    except Exception as e:
        logger.error(f"Failed to instrument application: {e}", error=e)
