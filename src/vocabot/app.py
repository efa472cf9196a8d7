"""Main application entry point."""
import logging
from typing import Optional

from telegram.ext import Application

from vocabot.bot import BOT_COMMANDS, register_handlers
from vocabot.config import settings
from vocabot.models.base import SessionLocal, init_db
from vocabot.monitoring import start_monitoring
from vocabot.services.import_service import WordImportService
from vocabot.services.message_service import MessageService
from vocabot.services.notification_service import NotificationService
from vocabot.services.scheduler_service import SchedulerService


class VocaBot:
    """Main application class."""

    def __init__(self):
        """Initialize the application."""
        self.application: Optional[Application] = None
        self.scheduler: Optional[SchedulerService] = None
        self.running = False
        self.logger = logging.getLogger(__name__)

    def import_words(self) -> int:
        """Seed the vocabulary from the configured CSV file."""
        if not settings.importer.csv_path:
            self.logger.info("WORDS_CSV_PATH is not set, skipping vocabulary import")
            return 0

        db = SessionLocal()
        try:
            return WordImportService(db).import_from_csv(settings.importer.csv_path)
        finally:
            db.close()

    async def start(self) -> None:
        """Start the application."""
        if self.running:
            return

        try:
            # Initialize database
            init_db()
            self.logger.info("Database initialized")
            self.import_words()

            if settings.monitoring.metrics_port:
                start_monitoring(settings.monitoring.metrics_port)
                self.logger.info("Metrics exposed on port %d", settings.monitoring.metrics_port)

            # Create application
            self.application = Application.builder().token(settings.bot.token).build()
            register_handlers(self.application)
            self.logger.info("Application created")

            # Create scheduler service
            self.scheduler = SchedulerService(
                NotificationService(self.application.bot),
                MessageService(),
            )

            # Start application
            await self.application.initialize()
            await self.application.bot.set_my_commands(BOT_COMMANDS)
            await self.application.start()
            if settings.bot.webhook_url:
                await self.application.updater.start_webhook(
                    listen=settings.bot.webhook_listen,
                    port=settings.bot.webhook_port,
                    webhook_url=settings.bot.webhook_url,
                )
                self.logger.info("Webhook started on port %d", settings.bot.webhook_port)
            else:
                await self.application.updater.start_polling()
                self.logger.info("Polling started")

            await self.scheduler.start()
            self.logger.info("Scheduler service started")

            self.running = True

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            self.running = True
            await self.stop()
            raise

    async def stop(self) -> None:
        """Stop the application."""
        if not self.running:
            return

        try:
            # Stop scheduler first so no flow is left half-done by a closed bot
            if self.scheduler:
                await self.scheduler.stop()
                self.scheduler = None
                self.logger.info("Scheduler service stopped")

            if self.application:
                if self.application.updater and self.application.updater.running:
                    await self.application.updater.stop()
                if self.application.running:
                    await self.application.stop()
                await self.application.shutdown()
                self.application = None
                self.logger.info("Application stopped")

        except Exception as e:
            self.logger.error("Error while stopping application: %s", str(e))
            self.application = None
            self.scheduler = None
            raise
        finally:
            self.running = False
