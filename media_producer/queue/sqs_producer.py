"""SQS FIFO producer for media processing messages."""
from typing import List, Optional, Sequence, Union

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from media_producer import settings
from media_producer.errors import TransportError
from media_producer.logging_conf import logger
from media_producer.queue.models import QueueMessage

# SendMessageBatch accepts at most 10 entries
MAX_BATCH_ENTRIES = 10


class SqsProducer:
    """Sends queue messages to an SQS FIFO queue."""

    def __init__(self, queue_url: Optional[str] = None, client=None):
        self.queue_url = queue_url or settings.SQS_QUEUE_URL
        self.client = client or boto3.client(
            "sqs",
            region_name=settings.AWS_REGION,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY,
        )

    def send(self, payload: Union[QueueMessage, Sequence[QueueMessage]]) -> List[str]:
        """
        Send one message or a sequence of messages.

        Args:
            payload: a QueueMessage or a sequence of them

        Returns:
            Ids of the messages SQS accepted

        Raises:
            TransportError if SQS is unreachable or rejects any message
        """
        messages = [payload] if isinstance(payload, QueueMessage) else list(payload)
        sent: List[str] = []
        for start in range(0, len(messages), MAX_BATCH_ENTRIES):
            sent.extend(self._send_batch(messages[start:start + MAX_BATCH_ENTRIES]))
        return sent

    def _send_batch(self, messages: List[QueueMessage]) -> List[str]:
        entries = [message.to_entry() for message in messages]
        ids = [entry["Id"] for entry in entries]
        try:
            response = self.client.send_message_batch(QueueUrl=self.queue_url, Entries=entries)
        except (ClientError, BotoCoreError) as e:
            raise TransportError(f"SQS send_message_batch failed: {e}", ids) from e

        failed = response.get("Failed") or []
        if failed:
            failed_ids = [entry.get("Id") for entry in failed]
            reasons = "; ".join(
                f"{entry.get('Id')}: {entry.get('Code')} {entry.get('Message', '')}".strip()
                for entry in failed
            )
            raise TransportError(f"SQS rejected {len(failed)} message(s): {reasons}", failed_ids)

        successful = [entry["Id"] for entry in response.get("Successful") or []]
        logger.debug(f"Sent {len(successful)} message(s) to SQS")
        return successful
