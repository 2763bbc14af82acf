"""Main application entry point."""
import logging
from typing import Optional

from telegram.ext import Application, CallbackQueryHandler, CommandHandler

from rangequiz.bot import handle_callback, handle_start
from rangequiz.config import settings
from rangequiz.models.base import init_db


class QuizBot:
    """Main application class."""

    def __init__(self):
        """Initialize the application."""
        self.application: Optional[Application] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    async def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        try:
            # Initialize database
            init_db()
            self.logger.info("Database initialized")

            # Create application
            self.application = Application.builder().token(settings.bot.token).build()
            self.logger.info("Application created")

            self.application.add_handler(CommandHandler("start", handle_start))
            self.application.add_handler(CallbackQueryHandler(handle_callback))
            self.logger.info("Handlers added")

            # Start application
            await self.application.initialize()
            await self.application.start()
            await self.application.updater.start_polling()
            self.logger.info("Application started")

            self.running = True

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            await self.stop(force=True)
            raise

    async def stop(self, force: bool = False) -> None:
        """Stop the application."""
        if not self.running and not force:
            return

        try:
            if self.application:
                if self.application.updater and self.application.updater.running:
                    await self.application.updater.stop()
                if self.application.running:
                    await self.application.stop()
                await self.application.shutdown()
                self.logger.info("Application stopped")
        except Exception as e:
            self.logger.error("Error while stopping application: %s", str(e))
            raise
        finally:
            self.application = None
            self.running = False
