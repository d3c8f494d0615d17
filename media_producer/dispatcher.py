"""Build queue messages for work items."""
from typing import Any, List, Optional

from media_producer.models import WorkItem
from media_producer.queue.models import MessageBody, QueueMessage

# SQS caps batch entry ids and FIFO group/dedup ids at 80 characters;
# a 42 character contract address leaves room for 30 of the token id.
TOKEN_ID_KEY_LENGTH = 30


def message_id(contract_address: str, token_id: str) -> str:
    """Deterministic message id, also used as the group and dedup id."""
    return f"{contract_address}-{token_id[:TOKEN_ID_KEY_LENGTH]}"


def media_files(metadata: Optional[Any]) -> List[str]:
    """Media URLs to process: image first, then animation."""
    if not isinstance(metadata, dict):
        return []

    files = []
    if metadata.get("image"):
        files.append(metadata["image"])
    if metadata.get("animation_url"):
        files.append(metadata["animation_url"])
    return files


def build_message(item: WorkItem) -> QueueMessage:
    """Build the queue message for a work item. Items without media still get one."""
    msg_id = message_id(item.contract_address, item.token_id)
    return QueueMessage(
        id=msg_id,
        body=MessageBody(
            contract_address=item.contract_address,
            token_id=item.token_id,
            media_files=media_files(item.metadata),
        ),
        group_id=msg_id,
        deduplication_id=msg_id,
    )
