"""Main application - polls DB for tokens needing media and sends them to SQS."""
import signal
import sys
import threading

from media_producer.logging_conf import logger
from media_producer import settings
from media_producer.db import WorkItemRepository
from media_producer.poller import MediaPoller
from media_producer.queue.sqs_producer import SqsProducer
from media_producer.worker import Scheduler, SingleFlightGuard


class Application:
    """Main application that wires the poller to its schedule."""

    def __init__(self, repository=None, producer=None):
        self.repository = repository or WorkItemRepository()
        self.producer = producer or SqsProducer()
        self.poller = MediaPoller(self.repository, self.producer)
        self.guard = SingleFlightGuard(self.poller.poll_once, settings.SKIPPING_COUNTER_LIMIT)
        self.scheduler = Scheduler(self.guard, settings.POLL_INTERVAL)
        self.running = False
        self._stopped = threading.Event()

    def start(self):
        """Start the application."""
        logger.info("=" * 50)
        logger.info("NFT Media Producer")
        logger.info("=" * 50)
        logger.info(f"Source: {settings.SOURCE}")
        logger.info(f"Queue: {settings.SQS_QUEUE_URL}")
        logger.info(f"Poll interval: {settings.POLL_INTERVAL}s, fetch mode: {settings.FETCH_MODE}")
        logger.info(f"Skipping counter limit: {settings.SKIPPING_COUNTER_LIMIT}")
        logger.info("=" * 50)

        settings.validate_config()
        self.running = True
        self._stopped.clear()
        self.scheduler.start()
        logger.info("Started - watching for pending tokens")

    def stop(self):
        """Stop the application."""
        if not self.running:
            return
        self.running = False
        self.scheduler.stop()
        self.repository.close()
        self._stopped.set()
        logger.info("Stopped")

    def run(self):
        """Start and block until stopped."""
        self.start()
        try:
            while not self._stopped.wait(1):
                pass
        except KeyboardInterrupt:
            pass
        self.stop()


def main():
    """Entry point."""
    app = Application()

    def signal_handler(sig, frame):
        logger.info(f"Received signal {sig}")
        app.stop()
        sys.exit(0)

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    try:
        app.run()
    except ValueError as e:
        logger.error(f"Configuration error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
