"""Reconciliation sessions stored in Redis.

A session holds what one user has uploaded and the result of their last
comparison. The engine never sees sessions; callers pass tables in and
save the session back after changing it.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4

import redis.asyncio as redis

from walletrecon.cells import Table
from walletrecon.config import SLOTS, settings
from walletrecon.models.recon import ReconciliationResult
from walletrecon.services.codec import decode_result, decode_table, encode_result, encode_table
from walletrecon.services.reconcile import ReconciliationEngine

logger = logging.getLogger(__name__)


@dataclass
class LoadedTable:
    """A decoded upload."""

    filename: str
    table: Table


@dataclass
class ReconciliationSession:
    """Tables and last result owned by one caller."""

    id: str
    created_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    tables: dict[str, LoadedTable] = field(default_factory=dict)
    result: ReconciliationResult | None = None

    def load(self, slot: str, filename: str, table: Table) -> None:
        """Store a decoded table in a slot, replacing any previous upload."""
        if slot not in SLOTS:
            raise ValueError(f"Unknown slot: {slot}")
        self.tables[slot] = LoadedTable(filename=filename, table=table)

    def filename(self, slot: str) -> str | None:
        loaded = self.tables.get(slot)
        return loaded.filename if loaded else None

    def table(self, slot: str) -> Table | None:
        loaded = self.tables.get(slot)
        return loaded.table if loaded else None

    @property
    def has_source(self) -> bool:
        return "source" in self.tables

    @property
    def has_wallet(self) -> bool:
        return "wallet1" in self.tables or "wallet2" in self.tables

    @property
    def ready(self) -> bool:
        """Bank sheet plus at least one wallet loaded."""
        return self.has_source and self.has_wallet

    def run(self, engine: ReconciliationEngine) -> ReconciliationResult:
        """Compare the loaded tables, replacing the previous result."""
        self.result = engine.reconcile(
            self.table("source"),
            self.table("wallet1"),
            self.table("wallet2"),
        )
        return self.result

    def to_json(self) -> str:
        return json.dumps(
            {
                "id": self.id,
                "created_at": self.created_at.isoformat(),
                "tables": {
                    slot: {"filename": loaded.filename, "table": encode_table(loaded.table)}
                    for slot, loaded in self.tables.items()
                },
                "result": encode_result(self.result) if self.result is not None else None,
            }
        )

    @classmethod
    def from_json(cls, data: str) -> "ReconciliationSession":
        raw = json.loads(data)
        return cls(
            id=raw["id"],
            created_at=datetime.fromisoformat(raw["created_at"]),
            tables={
                slot: LoadedTable(filename=item["filename"], table=decode_table(item["table"]))
                for slot, item in raw["tables"].items()
            },
            result=decode_result(raw["result"]) if raw["result"] is not None else None,
        )


class SessionStore:
    """Redis-backed session storage.

    Each session is one JSON value under SESSION_PREFIX. Every read or
    write resets its TTL, so sessions expire after a period of inactivity.
    """

    SESSION_PREFIX = "recon:session:"

    def __init__(
        self,
        client: redis.Redis | None = None,
        ttl_seconds: int | None = None,
    ):
        """Initialize store.

        Args:
            client: Redis client; one is built from settings when omitted
            ttl_seconds: Idle time after which a session is dropped
        """
        self.ttl = ttl_seconds if ttl_seconds is not None else settings.session_ttl_seconds
        self._client = client

    @property
    def client(self) -> redis.Redis:
        if self._client is None:
            self._client = redis.Redis(
                host=settings.redis_host,
                port=settings.redis_port,
                password=settings.redis_password or None,
                db=settings.redis_db,
                decode_responses=True,
            )
        return self._client

    def _key(self, session_id: str) -> str:
        return f"{self.SESSION_PREFIX}{session_id}"

    async def create(self) -> ReconciliationSession:
        session = ReconciliationSession(id=uuid4().hex)
        await self.save(session)
        logger.info(f"Created session {session.id}")
        return session

    async def get(self, session_id: str) -> ReconciliationSession | None:
        data = await self.client.getex(self._key(session_id), ex=self.ttl)
        if data is None:
            return None
        return ReconciliationSession.from_json(data)

    async def save(self, session: ReconciliationSession) -> None:
        await self.client.setex(self._key(session.id), self.ttl, session.to_json())

    async def delete(self, session_id: str) -> bool:
        removed = await self.client.delete(self._key(session_id))
        if removed:
            logger.info(f"Deleted session {session_id}")
        return bool(removed)

    async def count(self) -> int:
        """Number of live sessions."""
        count = 0
        async for _ in self.client.scan_iter(match=f"{self.SESSION_PREFIX}*"):
            count += 1
        return count

    async def ping(self) -> bool:
        return await self.client.ping()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Process-wide store used by the API
session_store = SessionStore()
