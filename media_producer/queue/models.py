"""Queue data models."""
import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union


@dataclass
class MessageBody:
    """Payload read by the media processing workers."""

    contract_address: str
    token_id: str
    media_files: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "contractAddress": self.contract_address,
            "tokenId": self.token_id,
            "mediaFiles": list(self.media_files),
        }


@dataclass
class QueueMessage:
    """A message bound for the SQS FIFO queue."""

    id: str
    body: Union[MessageBody, str]
    group_id: str
    deduplication_id: str

    def serialized_body(self) -> str:
        if isinstance(self.body, str):
            return self.body
        return json.dumps(self.body.to_dict())

    def to_entry(self) -> Dict[str, str]:
        """Render as a SendMessageBatch request entry."""
        return {
            "Id": self.id,
            "MessageBody": self.serialized_body(),
            "MessageGroupId": self.group_id,
            "MessageDeduplicationId": self.deduplication_id,
        }
