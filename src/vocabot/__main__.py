"""Main entry point for the bot."""
import asyncio
import logging
import signal

from vocabot.app import VocaBot
from vocabot.logging_config import setup_logging

logger = logging.getLogger("vocabot")


async def run() -> None:
    """Run the bot until SIGINT or SIGTERM."""
    loop = asyncio.get_running_loop()
    stop_event = asyncio.Event()

    def request_shutdown(sig: signal.Signals) -> None:
        logger.info("Received exit signal %s...", sig.name)
        stop_event.set()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, request_shutdown, sig)

    bot = VocaBot()
    try:
        logger.info("Starting bot...")
        await bot.start()
        await stop_event.wait()
    finally:
        logger.info("Cleaning up...")
        await bot.stop()


def main() -> None:
    """Console script entry point."""
    setup_logging("Starting vocabot ...")

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    main()
