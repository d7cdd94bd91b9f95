"""web3.py implementation of the chain collaborators.

Transactions are sent from a node-managed account (`eth_sendTransaction`);
key management and signing stay with the node.
"""
import logging
from collections.abc import Sequence
from typing import Any

from web3 import AsyncHTTPProvider, AsyncWeb3

from src.mk_chain.abi import ERC1155_ABI, MARKETPLACE_ABI
from src.mk_order.domain.gateway import Receipt
from src.mk_order.domain.models import ValidatedOrder

logger = logging.getLogger(__name__)


def build_web3(rpc_url: str) -> AsyncWeb3:
    return AsyncWeb3(AsyncHTTPProvider(rpc_url))


def to_receipt(raw: Any) -> Receipt:
    return Receipt(
        tx_hash=AsyncWeb3.to_hex(raw["transactionHash"]),
        block_number=int(raw["blockNumber"]),
        gas_used=int(raw["gasUsed"]),
        status=int(raw["status"]),
    )


class Web3PendingTransaction:
    def __init__(self, w3: AsyncWeb3, tx_hash: str, timeout: float) -> None:
        self.tx_hash = tx_hash
        self._w3 = w3
        self._timeout = timeout

    async def wait(self) -> Receipt:
        raw = await self._w3.eth.wait_for_transaction_receipt(self.tx_hash, timeout=self._timeout)
        return to_receipt(raw)


class Web3ChainGateway:
    """BalanceOracle + ApprovalGateway + MarketplaceGateway over AsyncWeb3."""

    def __init__(
        self,
        w3: AsyncWeb3,
        marketplace_address: str,
        items_address: str,
        confirmation_timeout: float = 120.0,
    ) -> None:
        self._w3 = w3
        self._timeout = confirmation_timeout
        self.marketplace_address = AsyncWeb3.to_checksum_address(marketplace_address)
        self._marketplace = w3.eth.contract(address=self.marketplace_address, abi=MARKETPLACE_ABI)
        self._items = w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(items_address), abi=ERC1155_ABI
        )

    # --- BalanceOracle ---

    async def get_balance(self, owner: str, token_id: int) -> int:
        return int(
            await self._items.functions.balanceOf(
                AsyncWeb3.to_checksum_address(owner), token_id
            ).call()
        )

    # --- ApprovalGateway ---

    async def is_approved_for_all(self, owner: str, operator: str) -> bool:
        return bool(
            await self._items.functions.isApprovedForAll(
                AsyncWeb3.to_checksum_address(owner), AsyncWeb3.to_checksum_address(operator)
            ).call()
        )

    async def set_approval_for_all(self, owner: str, operator: str, approved: bool) -> Receipt:
        tx_hash = await self._items.functions.setApprovalForAll(
            AsyncWeb3.to_checksum_address(operator), approved
        ).transact({"from": AsyncWeb3.to_checksum_address(owner)})
        pending = Web3PendingTransaction(self._w3, AsyncWeb3.to_hex(tx_hash), self._timeout)
        return await pending.wait()

    # --- MarketplaceGateway ---

    def _limit_orders(self, orders: Sequence[ValidatedOrder]) -> Any:
        return self._marketplace.functions.limitOrders([o.as_wire() for o in orders])

    @staticmethod
    def _sender(orders: Sequence[ValidatedOrder]) -> str:
        owners = {o.user for o in orders}
        if len(owners) != 1:
            raise ValueError(f"Batch must have exactly one owner, got {len(owners)}")
        return AsyncWeb3.to_checksum_address(owners.pop())

    async def estimate_gas(self, orders: Sequence[ValidatedOrder]) -> int:
        return int(await self._limit_orders(orders).estimate_gas({"from": self._sender(orders)}))

    async def submit_batch(
        self, orders: Sequence[ValidatedOrder], gas_limit: int
    ) -> Web3PendingTransaction:
        tx_hash = await self._limit_orders(orders).transact(
            {"from": self._sender(orders), "gas": gas_limit}
        )
        hex_hash = AsyncWeb3.to_hex(tx_hash)
        logger.info("Submitted limitOrders tx=%s (%d orders, gas=%d)", hex_hash, len(orders), gas_limit)
        return Web3PendingTransaction(self._w3, hex_hash, self._timeout)

    async def get_lowest_ask(self, token_id: int) -> int:
        return int(await self._marketplace.functions.getLowestAsk(token_id).call())

    async def get_highest_bid(self, token_id: int) -> int:
        return int(await self._marketplace.functions.getHighestBid(token_id).call())
