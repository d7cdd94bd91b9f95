"""Collaborator Protocols — interface contracts for the chain-facing layer.

The order pipeline only orchestrates; every network call goes through one of
these. `src.mk_chain.web3_gateway` provides the production implementations.
"""
from dataclasses import dataclass
from collections.abc import Iterable, Sequence
from typing import Protocol

from src.mk_order.domain.models import ValidatedOrder


@dataclass(frozen=True)
class Receipt:
    tx_hash: str
    block_number: int
    gas_used: int
    status: int = 1  # 0 = reverted

    @property
    def succeeded(self) -> bool:
        return self.status == 1


class PendingTransaction(Protocol):
    tx_hash: str

    async def wait(self) -> Receipt: ...


class BalanceOracle(Protocol):
    async def get_balance(self, owner: str, token_id: int) -> int: ...


class BalanceCache(Protocol):
    """Anything holding balance snapshots that go stale once orders are placed."""

    def invalidate(self, owner: str, token_ids: Iterable[int] | None = None) -> None: ...


class ApprovalGateway(Protocol):
    async def is_approved_for_all(self, owner: str, operator: str) -> bool: ...

    async def set_approval_for_all(
        self, owner: str, operator: str, approved: bool
    ) -> Receipt: ...


class MarketplaceGateway(Protocol):
    async def estimate_gas(self, orders: Sequence[ValidatedOrder]) -> int: ...

    async def submit_batch(
        self, orders: Sequence[ValidatedOrder], gas_limit: int
    ) -> PendingTransaction: ...

    async def get_lowest_ask(self, token_id: int) -> int: ...

    async def get_highest_bid(self, token_id: int) -> int: ...


class ChainGateway(BalanceOracle, ApprovalGateway, MarketplaceGateway, Protocol):
    """Everything the app wiring needs from one chain connection."""
