"""Top-of-book lookups: lowest ask / highest bid per token, in ether."""
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from decimal import Decimal

from src.mk_common.wire import wei_to_ether
from src.mk_order.domain.gateway import MarketplaceGateway

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketQuote:
    token_id: int
    lowest_ask: Decimal | None
    highest_bid: Decimal | None


class QuoteService:
    def __init__(self, gateway: MarketplaceGateway) -> None:
        self._gateway = gateway

    async def get_quote(self, token_id: int) -> MarketQuote:
        return MarketQuote(
            token_id=token_id,
            lowest_ask=await self._lookup("lowest ask", self._gateway.get_lowest_ask, token_id),
            highest_bid=await self._lookup("highest bid", self._gateway.get_highest_bid, token_id),
        )

    @staticmethod
    async def _lookup(
        label: str, fetch: Callable[[int], Awaitable[int]], token_id: int
    ) -> Decimal | None:
        """A failed lookup is reported as no price rather than an error."""
        try:
            wei = await fetch(token_id)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to fetch %s for token %d: %s", label, token_id, exc)
            return None
        return wei_to_ether(wei)
