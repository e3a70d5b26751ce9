"""Fetch orchestrator: resolve, serve from cache, dedup in-flight fetches, envelope failures."""

from __future__ import annotations

import asyncio
import logging
import time
from threading import Lock
from typing import Callable, Dict, Iterable, Optional

from config import get_cache_settings
from core import ErrorKind, FetchResult
from sources import SourceRegistry, build_registry
from sources.base import SourceDefinition
from storage import BaseCache, MemoryCache
from utils.exceptions import FetchError


logger = logging.getLogger(__name__)


class FetchOrchestrator:
    """
    Single entry point for fetching one source by public id.

    Cache and in-flight slots are keyed by the resolved definition name, so a
    redirect, its target and every alias of the target share one cache entry
    and at most one concurrent upstream fetch.
    """

    def __init__(
        self,
        registry: SourceRegistry,
        *,
        cache: Optional[BaseCache] = None,
        ttl: Optional[int] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        settings = get_cache_settings()
        self._registry = registry
        self._ttl = settings.ttl if ttl is None else int(ttl)
        self._clock = clock
        self._cache = cache or MemoryCache(ttl=self._ttl, max_size=settings.max_size, clock=clock)
        self._inflight: Dict[str, asyncio.Task] = {}

    @property
    def registry(self) -> SourceRegistry:
        return self._registry

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _ttl_for(self, source_id: str) -> int:
        declared = self._registry.freshness(source_id)
        return self._ttl if declared is None else int(declared)

    async def fetch(self, source_id: str) -> FetchResult:
        """Resolve ``source_id`` and return its envelope. Fetch failures never raise."""
        definition = self._registry.resolve(source_id)
        key = definition.name

        entry = self._cache.get(key)
        if entry is not None:
            logger.debug(f"[{key}] cache hit for '{source_id}'")
            return entry.result

        task = self._inflight.get(key)
        if task is None:
            ttl = self._ttl_for(source_id)
            task = asyncio.create_task(self._run(key, definition, ttl), name=f"fetch:{key}")
            self._inflight[key] = task
        else:
            logger.debug(f"[{key}] joining in-flight fetch for '{source_id}'")

        # a caller going away must not cancel the fetch other callers wait on
        return await asyncio.shield(task)

    async def _run(self, key: str, definition: SourceDefinition, ttl: int) -> FetchResult:
        try:
            result = await self._invoke(key, definition)
        finally:
            self._inflight.pop(key, None)
        if result.ok:
            self._cache.set(key, result, ttl)
        return result

    async def _invoke(self, key: str, definition: SourceDefinition) -> FetchResult:
        started = self._clock()
        try:
            items = await definition.fetch()
        except FetchError as exc:
            logger.error(f"[{key}] fetch failed ({exc.kind.value}): {exc}")
            return FetchResult.failure(exc.kind, exc.message, updated_at=self._now_ms())
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            logger.exception(f"[{key}] unexpected error while fetching")
            return FetchResult.failure(
                ErrorKind.UPSTREAM_PROTOCOL,
                f"{exc.__class__.__name__}: {exc}",
                updated_at=self._now_ms(),
            )

        logger.info(f"[{key}] fetched {len(items)} items in {self._clock() - started:.2f}s")
        return FetchResult.success(items, updated_at=self._now_ms())

    async def fetch_many(self, source_ids: Iterable[str]) -> Dict[str, FetchResult]:
        """Fetch several ids concurrently; each id gets its own envelope."""
        ids = list(dict.fromkeys(source_ids))
        for source_id in ids:
            self._registry.canonical_key(source_id)
        results = await asyncio.gather(*(self.fetch(source_id) for source_id in ids))
        return dict(zip(ids, results))

    def invalidate(self, source_id: str) -> None:
        """Drop the cached result so the next request fetches from upstream."""
        self._cache.delete(self._registry.resolve(source_id).name)

    def is_inflight(self, source_id: str) -> bool:
        return self._registry.resolve(source_id).name in self._inflight


_default_orchestrator: Optional[FetchOrchestrator] = None
_default_lock = Lock()


def get_default_orchestrator() -> FetchOrchestrator:
    """Process-wide orchestrator over the default registry."""
    global _default_orchestrator
    with _default_lock:
        if _default_orchestrator is None:
            _default_orchestrator = FetchOrchestrator(build_registry())
        return _default_orchestrator
