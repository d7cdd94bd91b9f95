"""Batch submitter — one limitOrders transaction per call, with retry and side fallback.

Attempt order for a batch:
  1. up to `max_retries` attempts with the orders as built (sell side)
  2. up to `max_retries` attempts with every order flipped to BUY
  3. give up: failed TransactionResult carrying the last error

Each attempt: estimate gas -> add buffer -> submit -> await receipt. A
reverted receipt (status 0) counts as a failed attempt. Nothing raised by the
gateway escapes `submit`; the outcome is always a TransactionResult.
"""
import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

from src.mk_common.enums import OrderSide
from src.mk_common.errors import SubmissionFailedError
from src.mk_order.application.schemas import FALLBACK_NOTE, TransactionResult
from src.mk_order.domain.gateway import MarketplaceGateway, Receipt
from src.mk_order.domain.models import ValidatedOrder

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransactionPolicy:
    gas_buffer_percent: int = 20
    max_retries: int = 3
    retry_delay_ms: int = 2000


def apply_gas_buffer(estimate: int, buffer_percent: int) -> int:
    """Integer gas limit: estimate * (100 + buffer) // 100."""
    return estimate * (100 + buffer_percent) // 100


class BatchSubmitter:
    def __init__(
        self,
        gateway: MarketplaceGateway,
        policy: TransactionPolicy | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._gateway = gateway
        self.policy = policy or TransactionPolicy()
        self._sleep = sleep

    async def submit(self, orders: Sequence[ValidatedOrder]) -> TransactionResult:
        if not orders:
            return TransactionResult.failed("No valid orders to create")

        receipt, last_error = await self._attempt_side(list(orders), "SELL")
        note = None
        if receipt is None:
            logger.warning(
                "Sell-side attempts exhausted (%d), falling back to buy orders",
                self.policy.max_retries,
            )
            buy_orders = [o.with_side(OrderSide.BUY) for o in orders]
            receipt, last_error = await self._attempt_side(buy_orders, "BUY")
            note = FALLBACK_NOTE

        if receipt is None:
            err = SubmissionFailedError(last_error or "Unknown error")
            logger.error("Batch of %d orders failed: %s", len(orders), err.message)
            return TransactionResult.failed(err.message)

        logger.info(
            "Batch of %d orders confirmed: tx=%s block=%d gas=%d",
            len(orders), receipt.tx_hash, receipt.block_number, receipt.gas_used,
        )
        return TransactionResult(
            success=True,
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number,
            gas_used=str(receipt.gas_used),
            orders_created=len(orders),
            note=note,
        )

    async def _attempt_side(
        self, orders: list[ValidatedOrder], label: str
    ) -> tuple[Receipt | None, str | None]:
        last_error: str | None = None
        for attempt in range(self.policy.max_retries):
            try:
                return await self._attempt_once(orders), None
            except Exception as exc:  # noqa: BLE001 -- every failure is retryable here
                last_error = str(exc) or type(exc).__name__
                logger.warning(
                    "%s batch attempt %d/%d failed: %s",
                    label, attempt + 1, self.policy.max_retries, last_error,
                )
            if attempt < self.policy.max_retries - 1:
                await self._sleep(self.policy.retry_delay_ms / 1000)
        return None, last_error

    async def _attempt_once(self, orders: list[ValidatedOrder]) -> Receipt:
        estimate = await self._gateway.estimate_gas(orders)
        gas_limit = apply_gas_buffer(estimate, self.policy.gas_buffer_percent)
        pending = await self._gateway.submit_batch(orders, gas_limit)
        receipt = await pending.wait()
        if not receipt.succeeded:
            raise RuntimeError(f"transaction {receipt.tx_hash} reverted")
        return receipt
