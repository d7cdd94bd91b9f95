# src/mk_order/application/service.py
"""Batch order pipeline: rate-limit -> build -> approve -> submit.

Pre-network rejections (rate limit, oversized batch, bad owner) raise
AppError. Once the pipeline has touched the chain, every terminal state is
a TransactionResult.
"""
import logging
from collections.abc import Sequence
from dataclasses import dataclass

from src.mk_chain.approval import ApprovalManager
from src.mk_chain.submitter import BatchSubmitter
from src.mk_common.errors import ApprovalFailedError, NoValidOrdersError, RateLimitError
from src.mk_order.application.schemas import TransactionResult
from src.mk_order.domain.builder import OrderBatchBuilder
from src.mk_order.domain.gateway import BalanceCache
from src.mk_order.domain.models import DroppedOrder, OrderRequest
from src.mk_security.rate_limiter import SlidingWindowRateLimiter

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitRule:
    max_requests: int = 5
    window_ms: int = 60_000


@dataclass(frozen=True)
class BatchOutcome:
    result: TransactionResult
    dropped: list[DroppedOrder]


class OrderPipeline:
    def __init__(
        self,
        rate_limiter: SlidingWindowRateLimiter,
        builder: OrderBatchBuilder,
        approvals: ApprovalManager,
        submitter: BatchSubmitter,
        operator: str,
        balance_cache: BalanceCache | None = None,
        rate_limit: RateLimitRule | None = None,
    ) -> None:
        self._rate_limiter = rate_limiter
        self._builder = builder
        self._approvals = approvals
        self._submitter = submitter
        self._operator = operator
        self._balance_cache = balance_cache
        self._rate_limit = rate_limit or RateLimitRule()

    async def place_batch(self, requests: Sequence[OrderRequest], owner: str) -> BatchOutcome:
        decision = self._rate_limiter.check_and_admit(
            f"batch-orders-{owner.lower()}",
            self._rate_limit.max_requests,
            self._rate_limit.window_ms,
        )
        if not decision.allowed:
            raise RateLimitError(decision.reset_time_seconds or 0)

        prepared = await self._builder.prepare(requests, owner)
        if prepared.is_empty:
            err = NoValidOrdersError()
            logger.warning("Nothing to submit for %s (%d dropped)", owner, len(prepared.dropped))
            return BatchOutcome(TransactionResult.failed(err.message), prepared.dropped)

        try:
            await self._approvals.ensure_approved(owner, self._operator)
        except ApprovalFailedError as exc:
            logger.error("Approval failed for %s: %s", owner, exc.message)
            return BatchOutcome(TransactionResult.failed(exc.message), prepared.dropped)

        result = await self._submitter.submit(prepared.orders)
        if result.success and self._balance_cache is not None:
            self._balance_cache.invalidate(owner, [o.token_id for o in prepared.orders])
        return BatchOutcome(result, prepared.dropped)
