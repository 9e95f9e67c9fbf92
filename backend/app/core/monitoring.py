import sentry_sdk

from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def configure_error_monitoring() -> None:
    if not settings.sentry_dsn:
        return
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.env,
        release=f"payroll-engine@{settings.tax_table_version}",
        traces_sample_rate=0.2,
    )
    logger.info("error_monitoring_enabled", env=settings.env)
