import logging

from prometheus_client import start_http_server

from src.bot import bot
from src.core import settings
from src.database.session import create_tables
from src.utils.extensions import walk_extensions

logger = logging.getLogger(__name__)

# Load all cogs extensions.
for ext in walk_extensions():
    bot.load_extension(ext)

if __name__ == "__main__":
    if settings.START_METRICS_SERVER:
        logger.debug(f"Starting metrics server listening on port: {settings.METRICS_PORT}")
        start_http_server(settings.METRICS_PORT)

    logger.info("Starting bot")
    bot.loop.run_until_complete(create_tables())
    bot.run(settings.bot.TOKEN)
