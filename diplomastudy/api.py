import logging

import sentry_sdk
import uvicorn

from diplomastudy.app_factory import create_app
from diplomastudy.config import get_settings

logger = logging.getLogger(__name__)

# Global settings object
settings = get_settings()

# ---------------------------------------------------------------------------
# Initialize Sentry
# ---------------------------------------------------------------------------

if settings.SENTRY_DSN:
    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.ENVIRONMENT,
        release=settings.VERSION,
        send_default_pii=True,
        traces_sample_rate=1.0,
    )
else:
    logger.warning("SENTRY_DSN is not set, skipping Sentry initialization")

# ---------------------------------------------------------------------------
# Application instance
# ---------------------------------------------------------------------------

app = create_app(settings)


if __name__ == "__main__":
    uvicorn.run("diplomastudy.api:app", host=settings.HOST, port=settings.PORT, reload=settings.RELOAD)
