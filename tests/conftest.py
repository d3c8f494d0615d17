"""Shared test fixtures for the media producer."""
from typing import List, Optional

import pytest

from media_producer.errors import RepositoryError, TransportError
from media_producer.models import WorkItem

CONTRACT = "0x06012c8cf97bead5deae237070f9587f8e7a266d"


class FakeRepository:
    """In-memory stand-in for WorkItemRepository."""

    def __init__(self, items: Optional[List[WorkItem]] = None, fail_on: Optional[str] = None):
        self.items = list(items or [])
        self.fail_on = fail_on
        self.find_pending_calls = []
        self.find_pending_one_calls = []
        self.mark_calls = []

    def _maybe_fail(self, op):
        if self.fail_on == op:
            raise RepositoryError(f"{op} failed")

    def find_pending(self, source, limit):
        self.find_pending_calls.append((source, limit))
        self._maybe_fail("find_pending")
        pending = [i for i in self.items if i.source == source and i.sent_for_media_at is None]
        return pending[:limit]

    def find_pending_one(self, source):
        self.find_pending_one_calls.append(source)
        self._maybe_fail("find_pending_one")
        pending = [i for i in self.items if i.source == source and i.sent_for_media_at is None]
        pending.sort(key=lambda i: i.priority or 0, reverse=True)
        return pending[0] if pending else None

    def mark_processed_batch(self, keys, sent_at=None):
        keys = list(keys)
        self.mark_calls.append((keys, sent_at))
        self._maybe_fail("mark_processed_batch")
        updated = 0
        for item in self.items:
            if item.key in keys:
                item.sent_for_media_at = sent_at
                item.need_to_refresh_media_files = False
                updated += 1
        return updated


class FakeSender:
    """Records sent messages; fails for token ids listed in `fail_tokens`."""

    def __init__(self, fail_tokens=()):
        self.fail_tokens = set(fail_tokens)
        self.sent = []

    def send(self, message):
        if message.body.token_id in self.fail_tokens:
            raise TransportError("broker rejected message", [message.id])
        self.sent.append(message)
        return [message.id]


def make_item(token_id="1", metadata=None, source="opensea", priority=None,
              contract_address=CONTRACT) -> WorkItem:
    return WorkItem(
        contract_address=contract_address,
        token_id=token_id,
        source=source,
        metadata=metadata,
        priority=priority,
    )


@pytest.fixture
def item_factory():
    return make_item
