"""Singleflight document fetching on top of the document cache."""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Optional

from .cache import DocumentCache
from .errors import FetchError, ParseFailure, ProviderUnavailable
from .logging import key_fields, log_event
from .models import DocumentKey, FetchResult, ParsedDocument
from .parser import DocumentParser
from .providers import DocumentProvider
from .time_utils import elapsed_ms


@dataclass
class PendingFetch:
    key: DocumentKey
    waiters: list[asyncio.Future[FetchResult]] = field(default_factory=list)
    task: Optional[asyncio.Task[None]] = None


class FetchCoordinator:
    """Owns the document cache and the in-flight fetch table.

    ``get_or_fetch`` is the only entry point. Cache and pending-table
    reads and writes happen in synchronous stretches with no await in
    between, so on one event loop they form a single critical section.
    The provider call is awaited outside of it.
    """

    def __init__(
        self,
        provider: DocumentProvider,
        cache: Optional[DocumentCache] = None,
        parser: Optional[DocumentParser] = None,
    ) -> None:
        self.provider = provider
        self.cache = cache if cache is not None else DocumentCache()
        self.parser = parser if parser is not None else DocumentParser()
        self._pending: dict[DocumentKey, PendingFetch] = {}
        self.provider_calls = 0

    def is_pending(self, key: DocumentKey) -> bool:
        return key in self._pending

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    async def get_or_fetch(self, key: DocumentKey) -> FetchResult:
        """Return the document for key, fetching it at most once at a time.

        Errors are returned inside the FetchResult, never raised.
        """
        document = self.cache.get(key)
        if document is not None:
            return FetchResult(key, document)

        loop = asyncio.get_running_loop()
        waiter: asyncio.Future[FetchResult] = loop.create_future()
        pending = self._pending.get(key)
        if pending is not None:
            pending.waiters.append(waiter)
            log_event(
                "fetch_joined",
                level=logging.DEBUG,
                waiters=len(pending.waiters),
                **key_fields(key),
            )
        else:
            pending = PendingFetch(key, [waiter])
            self._pending[key] = pending
            pending.task = asyncio.create_task(self._run(pending))

        # shield: a cancelled waiter must not cancel the shared fetch
        return await asyncio.shield(waiter)

    async def _run(self, pending: PendingFetch) -> None:
        key = pending.key
        started = time.perf_counter()
        self.provider_calls += 1
        log_event("fetch_start", **key_fields(key))
        # Waiters are always resolved; cancellation leaves _cancelled(key)
        result = _cancelled(key)
        try:
            result = await self._produce(key)
            self._record(result, elapsed_ms(started, time.perf_counter()))
        except Exception as e:
            logging.error("Fetch failed for %s", key.describe(), exc_info=True)
            result = FetchResult(key, error=ProviderUnavailable(key, str(e) or type(e).__name__))
        finally:
            self._finish(pending, result)

    def _record(self, result: FetchResult, latency: float) -> None:
        key = result.key
        if result.document is not None and (
            result.error is None or isinstance(result.error, ParseFailure)
        ):
            self.cache.put(key, result.document)
            log_event(
                "fetch_complete",
                line_count=len(result.document),
                raw=result.document.raw,
                latency_ms=latency,
                **key_fields(key),
            )
        if result.error is not None:
            log_event(
                "fetch_error",
                level=logging.WARNING,
                error_type=result.error.kind,
                error=str(result.error),
                latency_ms=latency,
                **key_fields(key),
            )

    async def _produce(self, key: DocumentKey) -> FetchResult:
        try:
            raw = await self.provider.fetch(key)
        except FetchError as e:
            return FetchResult(key, error=e)
        except Exception as e:
            logging.error("Provider failed for %s", key.describe(), exc_info=True)
            return FetchResult(key, error=ProviderUnavailable(key, str(e) or type(e).__name__))

        try:
            document = self.parser.parse(raw, key.source)
        except Exception:
            logging.error("Parser failed for %s", key.describe(), exc_info=True)
            document = ParsedDocument.from_plain_text(raw, key.source, raw=True)
        if document.raw:
            return FetchResult(
                key,
                document,
                ParseFailure(key, f"Could not structure {key.describe()}; showing raw text"),
            )
        return FetchResult(key, document)

    def _finish(self, pending: PendingFetch, result: FetchResult) -> None:
        # Drop the pending entry before waking waiters so a waiter that
        # re-requests the key sees the cache, not a finished fetch.
        if self._pending.get(pending.key) is pending:
            del self._pending[pending.key]
        for waiter in pending.waiters:
            if not waiter.done():
                waiter.set_result(result)

    async def close(self) -> None:
        """Cancel fetches still in flight; their waiters get an error result."""
        pending = list(self._pending.values())
        tasks = [p.task for p in pending if p.task is not None]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        # A task cancelled before its first step never reaches _finish
        for entry in pending:
            self._finish(entry, _cancelled(entry.key))


def _cancelled(key: DocumentKey) -> FetchResult:
    return FetchResult(key, error=ProviderUnavailable(key, "Fetch cancelled"))
