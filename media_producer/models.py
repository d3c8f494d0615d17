"""Work item model."""
import json
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Mapping, Optional, Tuple


@dataclass
class WorkItem:
    """A token record awaiting media-file dispatch."""

    contract_address: str
    token_id: str
    source: str
    metadata: Optional[Dict[str, Any]] = None
    sent_for_media_at: Optional[datetime] = None
    need_to_refresh_media_files: bool = True
    priority: Optional[int] = None

    @property
    def key(self) -> Tuple[str, str]:
        return self.contract_address, self.token_id

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "WorkItem":
        """Build a WorkItem from a database row (dict-like)."""
        metadata = row.get("metadata")
        if isinstance(metadata, (str, bytes)):
            metadata = json.loads(metadata)
        return cls(
            contract_address=row["contract_address"],
            token_id=row["token_id"],
            source=row.get("source"),
            metadata=metadata,
            sent_for_media_at=row.get("sent_for_media_at"),
            need_to_refresh_media_files=bool(row.get("need_to_refresh_media_files", True)),
            priority=row.get("priority"),
        )
