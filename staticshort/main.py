"""
staticshort - declarative HTTP redirect server.

Features:
- Redirect rules loaded once from SR_REDIR_* environment variables
- Header redirects or meta-refresh HTML pages, optionally keeping the query
- Structured logging with correlation IDs
- Optional Prometheus metrics and liveness endpoints
"""
from typing import Mapping

from fastapi import FastAPI, Request
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
import uvicorn

from . import __version__
from .config import Settings, environ_snapshot, get_settings
from .health import HealthChecker
from .logging import get_logger, setup_logging
from .metrics import Metrics
from .middleware import CorrelationIdMiddleware, MetricsMiddleware
from .router import LiteralRoute, get_routers
from .rules.errors import RuleConfigError

SERVICE_NAME = "staticshort"

logger = get_logger()


async def empty_error_response(request: Request, exc: StarletteHTTPException) -> Response:
    """Answer router errors (404 for unknown paths, 405, ...) with an empty body."""
    return Response(status_code=exc.status_code, headers=exc.headers)


def create_app(environ: Mapping[str, str] | None = None, settings: Settings | None = None) -> FastAPI:
    """
    Build the redirect application.

    Args:
        environ: Configuration snapshot holding the rule keys; defaults to
            a copy of the process environment taken now.
        settings: Server settings; defaults to ``get_settings()``.

    Raises:
        RuleConfigError: A rule is missing a key or has a malformed one.
            No application is built in that case.
    """
    if environ is None:
        environ = environ_snapshot()
    if settings is None:
        settings = get_settings()

    metrics = Metrics(service_name=SERVICE_NAME, version=__version__)
    redirects = get_routers(environ, metrics=metrics)

    # Built-in docs and trailing-slash redirects would shadow configured paths
    app = FastAPI(
        title="staticshort",
        version=__version__,
        description="Declarative HTTP redirect server",
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        redirect_slashes=False,
    )
    app.router.route_class = LiteralRoute
    app.add_exception_handler(StarletteHTTPException, empty_error_response)

    # Added last runs first: correlation ID is bound before metrics logs
    app.add_middleware(MetricsMiddleware, metrics=metrics, metrics_path=settings.METRICS_PATH)
    app.add_middleware(CorrelationIdMiddleware)

    if settings.HEALTH_PATH:
        health_checker = HealthChecker(
            service_name=SERVICE_NAME, version=__version__, routes=len(redirects.routes)
        )

        async def health():
            """Liveness probe."""
            logger.debug("health.liveness")
            return health_checker.liveness()

        app.add_api_route(settings.HEALTH_PATH, health, methods=["GET"], include_in_schema=False)

    if settings.METRICS_PATH:

        async def prometheus_metrics():
            """Prometheus exposition of the service metrics."""
            return Response(generate_latest(metrics.registry), media_type=CONTENT_TYPE_LATEST)

        app.add_api_route(settings.METRICS_PATH, prometheus_metrics, methods=["GET"], include_in_schema=False)

    app.include_router(redirects)

    app.state.metrics = metrics
    return app


def main() -> int:
    """
    Load the rules and serve them until interrupted.

    Returns a non-zero status, without binding a listener, when the
    configuration is invalid.
    """
    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging(service_name=SERVICE_NAME)
        logger.error("config.invalid", error=str(e))
        return 1

    setup_logging(json_output=settings.LOG_JSON, level=settings.LOG_LEVEL, service_name=SERVICE_NAME)

    try:
        host, port = settings.bind_address()
        app = create_app(environ_snapshot(), settings)
    except RuleConfigError as e:
        logger.error("config.invalid", error=e.message, key=e.key)
        return 1
    except ValueError as e:
        logger.error("config.invalid", error=str(e))
        return 1

    logger.info("service_starting", version=__version__, host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_config=None)
    logger.info("service_stopping")
    return 0
