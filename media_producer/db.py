"""Database operations for NFT tokens awaiting media processing."""
import psycopg2
from psycopg2.extras import Json, RealDictCursor, execute_values
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from media_producer import settings
from media_producer.errors import RepositoryError
from media_producer.logging_conf import logger
from media_producer.models import WorkItem

ITEM_COLUMNS = """
    contract_address,
    token_id,
    metadata,
    source,
    sent_for_media_at,
    need_to_refresh_media_files,
    priority
"""


class WorkItemRepository:
    """Database connection and operations for the nft_tokens table."""

    def __init__(self, database_url: Optional[str] = None):
        self.database_url = database_url or settings.DATABASE_URL
        self._conn = None

    @property
    def conn(self):
        """Get or create database connection."""
        if self._conn is None or self._conn.closed:
            try:
                self._conn = psycopg2.connect(self.database_url)
            except psycopg2.Error as e:
                raise RepositoryError(f"Cannot connect to database: {e}") from e
        return self._conn

    def close(self):
        """Close database connection."""
        if self._conn and not self._conn.closed:
            self._conn.close()
            self._conn = None

    @contextmanager
    def cursor(self):
        """Context manager for cursor with auto-commit/rollback."""
        conn = self.conn
        cur = conn.cursor(cursor_factory=RealDictCursor)
        try:
            yield cur
            conn.commit()
        except psycopg2.Error as e:
            self._rollback(conn)
            raise RepositoryError(str(e).strip() or e.__class__.__name__) from e
        except Exception:
            self._rollback(conn)
            raise
        finally:
            cur.close()

    def _rollback(self, conn):
        """Roll back, tolerating a connection the server already dropped."""
        if conn.closed:
            return
        try:
            conn.rollback()
        except psycopg2.Error as e:
            logger.warning(f"Rollback failed, connection will be reopened: {e}")

    def find_pending(self, source: str, limit: int = 100) -> List[WorkItem]:
        """Fetch up to `limit` tokens of `source` that still need media dispatch."""
        with self.cursor() as cur:
            cur.execute(f"""
                SELECT {ITEM_COLUMNS}
                FROM nft_tokens
                WHERE source = %s
                  AND sent_for_media_at IS NULL
                  AND need_to_refresh_media_files = TRUE
                ORDER BY updated_at ASC
                LIMIT %s
            """, (source, limit))
            rows = cur.fetchall()
        return [WorkItem.from_row(row) for row in rows]

    def find_pending_one(self, source: str) -> Optional[WorkItem]:
        """Fetch the highest-priority pending token of `source`, if any."""
        with self.cursor() as cur:
            cur.execute(f"""
                SELECT {ITEM_COLUMNS}
                FROM nft_tokens
                WHERE source = %s
                  AND sent_for_media_at IS NULL
                  AND need_to_refresh_media_files = TRUE
                ORDER BY priority DESC NULLS LAST, updated_at ASC
                LIMIT 1
            """, (source,))
            row = cur.fetchone()
        return WorkItem.from_row(row) if row else None

    def mark_processed(self, contract_address: str, token_id: str,
                       sent_at: Optional[datetime] = None) -> None:
        """Mark a single token as sent for media processing."""
        self.mark_processed_batch([(contract_address, token_id)], sent_at)

    def mark_processed_batch(self, keys: Iterable[Tuple[str, str]],
                             sent_at: Optional[datetime] = None) -> int:
        """
        Mark tokens as sent for media processing in one statement.

        Args:
            keys: (contract_address, token_id) pairs; duplicates are collapsed
            sent_at: timestamp written to every row, defaults to now (UTC)

        Returns:
            Number of rows updated
        """
        unique_keys = list(dict.fromkeys(keys))
        if not unique_keys:
            return 0

        sent_at = sent_at or datetime.now(timezone.utc)
        rows = [(contract_address, token_id, sent_at) for contract_address, token_id in unique_keys]
        with self.cursor() as cur:
            # Single page so the whole batch is one UPDATE statement
            execute_values(cur, """
                UPDATE nft_tokens AS t
                SET sent_for_media_at = k.sent_at,
                    need_to_refresh_media_files = FALSE,
                    updated_at = NOW()
                FROM (VALUES %s) AS k (contract_address, token_id, sent_at)
                WHERE t.contract_address = k.contract_address
                  AND t.token_id = k.token_id
            """, rows, page_size=len(rows))
            updated = cur.rowcount
        logger.info(f"Marked {updated}/{len(unique_keys)} tokens as sent for media")
        return updated

    def request_media_refresh(self, contract_address: str, token_id: str,
                              metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Put a token back into the pending set, optionally with new metadata."""
        with self.cursor() as cur:
            if metadata is None:
                cur.execute("""
                    UPDATE nft_tokens
                    SET sent_for_media_at = NULL,
                        need_to_refresh_media_files = TRUE,
                        updated_at = NOW()
                    WHERE contract_address = %s AND token_id = %s
                    RETURNING token_id
                """, (contract_address, token_id))
            else:
                cur.execute("""
                    UPDATE nft_tokens
                    SET sent_for_media_at = NULL,
                        need_to_refresh_media_files = TRUE,
                        metadata = %s,
                        updated_at = NOW()
                    WHERE contract_address = %s AND token_id = %s
                    RETURNING token_id
                """, (Json(metadata), contract_address, token_id))
            matched = cur.fetchone() is not None
        if matched:
            logger.info(f"Requested media refresh: {contract_address} - {token_id}")
        else:
            logger.warning(f"Media refresh requested for unknown token: {contract_address} - {token_id}")
        return matched
