import logging
from logging.config import dictConfig
from typing import Any, Dict

from pnl_app.core.config import settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "multipart", "python_multipart", "celery.redirected")


def build_logging_config(level: str) -> Dict[str, Any]:
    """dictConfig payload: one console handler, app loggers at `level`, noisy libraries at WARNING."""
    level = level.upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "default",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            "pnl_app": {"level": level},
            **{name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        },
    }


def configure_logging(level: str | None = None) -> None:
    """
    Configure logging for the API, the celery worker and alembic runs.

    Import and metrics services log row counts at INFO and skipped or
    ambiguous data at WARNING, so INFO is the useful production level.
    """
    level = (level or settings.LOG_LEVEL).upper()
    dictConfig(build_logging_config(level))
    logging.getLogger(__name__).info("Logging configured at %s (env=%s)", level, settings.ENVIRONMENT)
