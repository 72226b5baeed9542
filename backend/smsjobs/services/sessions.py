"""
Search Session Store - Short-Lived Memory for Claim Replies

After a search or digest, the jobs sent to a phone number are remembered so
that a follow-up "3" or "claim 3" can be resolved to a job.

Lifecycle:
    - set() on every successful search/digest, overwriting any prior entry
    - get() on claim; entries are never removed on read
    - sweep() at the start of every inbound message drops entries older
      than the TTL (10 minutes) across all phones

Backends:
    - InMemorySessionStore: process-local dict, expiry only via sweep()
    - RedisSessionStore: SETEX with the TTL so sessions are shared across
      instances; Redis expires keys itself and sweep() is a no-op

Concurrent writes for the same phone are last-write-wins.
"""

import json
import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Protocol

import redis.asyncio as redis

from smsjobs.config import Settings, get_settings
from smsjobs.schemas import JobSearchResult

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 10 * 60


@dataclass
class SearchSession:
    jobs: List[JobSearchResult] = field(default_factory=list)
    timestamp: float = 0.0


class SessionStore(Protocol):
    """Interface shared by the session backends."""

    async def get(self, phone: str) -> Optional[SearchSession]:
        ...

    async def set(self, phone: str, jobs: List[JobSearchResult]) -> None:
        ...

    async def sweep(self) -> int:
        """Drop expired sessions, returning how many were removed."""
        ...

    async def close(self) -> None:
        ...


class InMemorySessionStore:
    """Process-local session map with an injectable clock."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: Dict[str, SearchSession] = {}

    async def get(self, phone: str) -> Optional[SearchSession]:
        return self._sessions.get(phone)

    async def set(self, phone: str, jobs: List[JobSearchResult]) -> None:
        self._sessions[phone] = SearchSession(jobs=list(jobs), timestamp=self.clock())

    async def sweep(self) -> int:
        now = self.clock()
        expired = [
            phone for phone, session in self._sessions.items()
            if now - session.timestamp > self.ttl_seconds
        ]
        for phone in expired:
            del self._sessions[phone]
        return len(expired)

    async def close(self) -> None:
        self._sessions.clear()

    def __len__(self) -> int:
        return len(self._sessions)


class RedisSessionStore:
    """
    Redis-backed sessions shared between service instances.

    Degrades like the rest of the service: when Redis is unreachable,
    get() returns None (the contractor sees "no recent search") and set()
    is logged and skipped.
    """

    key_prefix = "sms_session:"

    def __init__(
        self,
        redis_url: str,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ):
        self.redis_url = redis_url
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self.redis: Optional[redis.Redis] = None

    async def _ensure_connected(self) -> Optional[redis.Redis]:
        if self.redis is None:
            try:
                self.redis = redis.from_url(
                    self.redis_url,
                    encoding="utf-8",
                    decode_responses=True
                )
            except Exception as e:
                logger.warning(f"Failed to connect to Redis: {e}")
                return None
        return self.redis

    def _key(self, phone: str) -> str:
        return f"{self.key_prefix}{phone}"

    async def get(self, phone: str) -> Optional[SearchSession]:
        try:
            client = await self._ensure_connected()
            if not client:
                return None

            cached = await client.get(self._key(phone))
            if not cached:
                return None

            data = json.loads(cached)
            return SearchSession(
                jobs=[JobSearchResult.model_validate(job) for job in data["jobs"]],
                timestamp=data["timestamp"],
            )
        except Exception as e:
            logger.warning(f"Redis get error (session): {e}")
            return None

    async def set(self, phone: str, jobs: List[JobSearchResult]) -> None:
        try:
            client = await self._ensure_connected()
            if not client:
                return

            data = {
                "jobs": [job.model_dump() for job in jobs],
                "timestamp": self.clock(),
            }
            await client.setex(self._key(phone), self.ttl_seconds, json.dumps(data))
        except Exception as e:
            logger.warning(f"Redis set error (session): {e}")

    async def sweep(self) -> int:
        return 0

    async def close(self) -> None:
        if self.redis:
            await self.redis.aclose()
            self.redis = None


def build_session_store(settings: Optional[Settings] = None) -> SessionStore:
    settings = settings or get_settings()
    if settings.session_backend == "redis":
        logger.info("Using Redis session store")
        return RedisSessionStore(settings.redis_url, ttl_seconds=settings.session_ttl_seconds)
    return InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
