# competitor_email/db/intelligence_store.py
"""
Read-only accessor over the competitor intelligence collections.

Both lookups are scoped by (org_id, entity_id, entity_type="competitor").
The underlying AsyncMongoClient owns a bounded connection pool that is
shared by all in-flight requests.
"""

import logging
from typing import Any, Optional

from pymongo import ASCENDING, AsyncMongoClient
from pymongo.errors import PyMongoError

from competitor_email.core.config import Settings
from competitor_email.core.exceptions import RetrievalError
from competitor_email.db.models import (
    ENTITY_TYPE_COMPETITOR,
    KnowledgeChunk,
    SignalsRecord,
)

logger = logging.getLogger(__name__)

KNOWLEDGE_CHUNK_LIMIT = 5


def competitor_filter(org_id: str, competitor_id: str) -> dict[str, str]:
    return {
        "org_id": org_id,
        "entity_id": competitor_id,
        "entity_type": ENTITY_TYPE_COMPETITOR,
    }


class IntelligenceStore:
    """Signals and knowledge chunk lookups. Performs no retries."""

    def __init__(
        self,
        client: AsyncMongoClient,
        database_name: str,
        signals_collection: str = "website_signals",
        chunks_collection: str = "knowledge_chunks",
    ):
        self._client = client
        db = client[database_name]
        self.signals = db[signals_collection]
        self.knowledge_chunks = db[chunks_collection]

    @classmethod
    def from_settings(cls, settings: Settings) -> "IntelligenceStore":
        """Create a store with its own pooled client. Connects lazily on first query."""
        client = AsyncMongoClient(
            settings.MONGODB_URI,
            maxPoolSize=settings.MONGODB_MAX_POOL_SIZE,
            minPoolSize=settings.MONGODB_MIN_POOL_SIZE,
            serverSelectionTimeoutMS=settings.MONGODB_SERVER_SELECTION_TIMEOUT_MS,
            socketTimeoutMS=settings.MONGODB_SOCKET_TIMEOUT_MS,
        )
        logger.info(
            f"Intelligence store configured: db={settings.MONGODB_DATABASE} "
            f"pool={settings.MONGODB_MIN_POOL_SIZE}-{settings.MONGODB_MAX_POOL_SIZE}"
        )
        return cls(
            client,
            settings.MONGODB_DATABASE,
            signals_collection=settings.SIGNALS_COLLECTION,
            chunks_collection=settings.KNOWLEDGE_CHUNKS_COLLECTION,
        )

    async def find_signals(
        self, org_id: str, competitor_id: str
    ) -> Optional[SignalsRecord]:
        """Return the signals record for a competitor, or None if none was collected yet."""
        try:
            doc: Optional[dict[str, Any]] = await self.signals.find_one(
                competitor_filter(org_id, competitor_id)
            )
        except PyMongoError as e:
            logger.error(
                f"Signals lookup failed for org_id={org_id} competitor_id={competitor_id}: {e}"
            )
            raise RetrievalError("signals lookup", message=str(e)) from e

        if doc is None:
            return None
        return SignalsRecord.from_document(doc)

    async def find_knowledge_chunks(
        self,
        org_id: str,
        competitor_id: str,
        limit: int = KNOWLEDGE_CHUNK_LIMIT,
    ) -> list[KnowledgeChunk]:
        """
        Return at most `limit` knowledge chunks for a competitor.

        Chunks come back in insertion (`_id`) order so the selection is
        stable for a given store state. No relevance ranking is applied.
        """
        if limit < 1:
            raise ValueError("limit must be at least 1")

        try:
            cursor = (
                self.knowledge_chunks.find(competitor_filter(org_id, competitor_id))
                .sort("_id", ASCENDING)
                .limit(limit)
            )
            docs = await cursor.to_list(length=limit)
        except PyMongoError as e:
            logger.error(
                f"Knowledge chunk lookup failed for org_id={org_id} competitor_id={competitor_id}: {e}"
            )
            raise RetrievalError("knowledge chunk lookup", message=str(e)) from e

        return [KnowledgeChunk.from_document(doc) for doc in docs[:limit]]

    async def ping(self) -> bool:
        try:
            await self._client.admin.command("ping")
            return True
        except PyMongoError as e:
            logger.warning(f"Intelligence store ping failed: {e}")
            return False

    async def close(self) -> None:
        await self._client.close()
        logger.info("Intelligence store connection closed")
