"""Main entry point for the quiz bot."""
import asyncio
import logging
import signal

from rangequiz.app import QuizBot
from rangequiz.config import ensure_directories, settings
from rangequiz.logging_config import setup_logging
from rangequiz.monitoring import start_monitoring

logger = logging.getLogger("rangequiz")


async def main() -> None:
    """Run the bot until a termination signal arrives."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    # Add signal handlers
    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, stop_event.set)

    bot = QuizBot()
    try:
        logger.info("Starting bot...")
        await bot.start()
        await stop_event.wait()
        logger.info("Received exit signal, shutting down...")
    finally:
        logger.info("Cleaning up...")
        await bot.stop()


def run() -> None:
    ensure_directories()
    setup_logging("Starting Preflop Range Quiz ...")
    settings.validate()

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)
        logger.info(f"Metrics available on port {settings.monitoring.port}")

    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    run()
