import logging.handlers
from pathlib import Path

import arrow
import sentry_sdk
from colorlog import ColoredFormatter
from sentry_sdk.integrations.asyncio import AsyncioIntegration
from sentry_sdk.integrations.logging import LoggingIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from src.core import settings

FORMAT = "%(asctime)s - %(name)s %(levelname)s: %(message)s"
DATE_FORMAT = "%H:%M:%S"

# Loggers of libraries that are too chatty at our level.
QUIET_LOGGERS = {
    "discord": logging.INFO,
    "discord.gateway": logging.ERROR,
    "discord.http": logging.WARNING,
    "asyncio": logging.ERROR,
    "sqlalchemy.engine": logging.WARNING,
    "asyncmy": logging.WARNING,
}

settings.ROOT = Path(__file__).parent.parent


def setup_logging(root: Path) -> None:
    """Log to the console in colour and to a daily file under `root`/logs."""
    log_dir = root / "logs"
    log_dir.mkdir(exist_ok=True)
    log_file = log_dir / f"{settings.bot.NAME.lower()}_{arrow.utcnow().format('DD-MM-YYYY')}.log"

    # Rotate at 5 MB, keeping ten files.
    file_handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=5 * (2 ** 20), backupCount=10, encoding="utf-8"
    )
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(fmt=FORMAT, datefmt=DATE_FORMAT))

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.DEBUG if settings.DEBUG else settings.LOG_LEVEL)
    console_handler.setFormatter(ColoredFormatter(fmt=f"%(log_color)s{FORMAT}", datefmt=DATE_FORMAT))

    for name, level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(level)

    logging.basicConfig(level=logging.DEBUG, handlers=[console_handler, file_handler], force=True)


def setup_sentry() -> None:
    """Report errors to Sentry outside of debug runs."""
    if not settings.SENTRY_DSN or settings.DEBUG:
        return

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.bot.ENVIRONMENT or "local",
        release=settings.VERSION,
        integrations=[
            SqlalchemyIntegration(),
            AsyncioIntegration(),
            LoggingIntegration(level=logging.INFO, event_level=logging.ERROR),
        ],
    )


setup_logging(settings.ROOT)
setup_sentry()
