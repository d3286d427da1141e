"""Startup-time logging of the effective payment service configuration."""

from sqlalchemy.engine import make_url

from orderpay.common.config import Settings
from orderpay.common.logging import logger


def startup_summary(settings: Settings) -> dict[str, object]:
    """Resolved settings worth seeing at boot, with database credentials masked."""

    return {
        "service": settings.service_name,
        "log_level": settings.log_level,
        "database": make_url(settings.database_dsn).render_as_string(hide_password=True),
        "gateway": settings.gateway_name,
        "currencies": sorted(settings.supported_currencies),
        "decline_rate": settings.gateway_decline_rate,
        "tracing": settings.otel_exporter_otlp_endpoint or "disabled",
    }


def log_startup_config(settings: Settings) -> None:
    logger.info("startup_config=%s", startup_summary(settings))
