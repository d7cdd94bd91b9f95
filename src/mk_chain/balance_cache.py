"""Balance oracle with a short TTL cache.

Cache-aside per (owner, token_id): hit -> snapshot; miss -> one upstream read
shared by every concurrent caller for the same key. Entries are snapshots
only; callers refresh them via `invalidate` after a confirmed submission.
"""
import asyncio
import logging
from collections.abc import Callable, Iterable

from src.mk_common.datetime_utils import monotonic_ms
from src.mk_order.domain.gateway import BalanceOracle
from src.mk_order.domain.models import Balance

logger = logging.getLogger(__name__)

_Key = tuple[str, int]


class CachedBalanceOracle:
    def __init__(
        self,
        upstream: BalanceOracle,
        ttl_seconds: float = 30.0,
        clock: Callable[[], float] = monotonic_ms,
    ) -> None:
        self._upstream = upstream
        self._ttl_ms = ttl_seconds * 1000
        self._clock = clock
        self._entries: dict[_Key, tuple[float, Balance]] = {}
        self._inflight: dict[_Key, asyncio.Future[Balance]] = {}

    async def get_balance(self, owner: str, token_id: int) -> int:
        return (await self.snapshot(owner, token_id)).balance

    async def snapshot(self, owner: str, token_id: int) -> Balance:
        key = (owner.lower(), token_id)
        cached = self._entries.get(key)
        if cached is not None and self._clock() - cached[0] < self._ttl_ms:
            return cached[1]

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future: asyncio.Future[Balance] = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            raw = await self._upstream.get_balance(owner, token_id)
            balance = Balance(token_id=token_id, balance=max(int(raw), 0))
            self._entries[key] = (self._clock(), balance)
            future.set_result(balance)
            return balance
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited future doesn't log a warning
            future.exception()
            raise
        finally:
            del self._inflight[key]

    def invalidate(self, owner: str, token_ids: Iterable[int] | None = None) -> None:
        owner = owner.lower()
        if token_ids is None:
            stale = [k for k in self._entries if k[0] == owner]
        else:
            stale = [(owner, t) for t in token_ids]
        for key in stale:
            self._entries.pop(key, None)
        logger.debug("Invalidated %d cached balances for %s", len(stale), owner)
