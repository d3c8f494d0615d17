"""Poll pending tokens, send them for media processing, mark them sent."""
from datetime import datetime, timezone
from typing import Dict, List, Optional

from media_producer import settings
from media_producer.dispatcher import build_message
from media_producer.errors import TransportError
from media_producer.logging_conf import logger
from media_producer.models import WorkItem


class MediaPoller:
    """
    Runs one poll-dispatch-mark cycle per call to poll_once().

    Every item that was attempted is marked as sent, whether or not SQS
    accepted it, so a problematic token is never dispatched twice.
    """

    def __init__(self, repository, sender, source: Optional[str] = None,
                 batch_size: Optional[int] = None, fetch_mode: Optional[str] = None):
        self.repository = repository
        self.sender = sender
        self.source = source or settings.SOURCE
        self.batch_size = batch_size or settings.BATCH_SIZE
        self.fetch_mode = fetch_mode or settings.FETCH_MODE

    def poll_once(self) -> Dict[str, int]:
        """
        Perform one cycle.

        Returns:
            Counts: {"fetched": N, "sent": N, "failed": N, "marked": N}
        """
        stats = {"fetched": 0, "sent": 0, "failed": 0, "marked": 0}

        items = self._fetch()
        stats["fetched"] = len(items)
        if not items:
            logger.debug(f"No pending tokens for source {self.source}")
            return stats

        logger.info(f"[Media Producer] Got {len(items)} to process")

        processed: List[WorkItem] = []
        for item in items:
            if self._dispatch(item):
                stats["sent"] += 1
            else:
                stats["failed"] += 1
            processed.append(item)

        stats["marked"] = self._mark(processed)
        logger.info(
            f"[Media Producer] Completed producing batch: "
            f"{stats['sent']} sent, {stats['failed']} failed, {stats['marked']} marked"
        )
        return stats

    def _fetch(self) -> List[WorkItem]:
        if self.fetch_mode == "priority":
            item = self.repository.find_pending_one(self.source)
            return [item] if item else []
        return list(self.repository.find_pending(self.source, self.batch_size))

    def _dispatch(self, item: WorkItem) -> bool:
        """Send one item. Failures are logged and reported, never raised."""
        message = build_message(item)
        extra = {"contract_address": item.contract_address, "token_id": item.token_id}
        try:
            self.sender.send(message)
            logger.debug(f"Sent {message.id} with {len(message.body.media_files)} media file(s)", extra=extra)
            return True
        except TransportError as e:
            logger.error(
                f"[Media Producer] Error processing {item.contract_address} - {item.token_id}: {e}",
                extra=extra
            )
        except Exception as e:
            logger.error(
                f"[Media Producer] Unexpected error processing {item.contract_address} - {item.token_id}: {e}",
                exc_info=True, extra=extra
            )
        return False

    def _mark(self, processed: List[WorkItem]) -> int:
        if not processed:
            logger.info("[Media Producer] Nothing attempted, skipping mark")
            return 0

        keys = list(dict.fromkeys(item.key for item in processed))
        # One timestamp for the whole batch
        sent_at = datetime.now(timezone.utc)
        return self.repository.mark_processed_batch(keys, sent_at)
