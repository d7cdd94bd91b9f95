"""Order domain models — pure dataclasses, no web3 dependency."""
from dataclasses import dataclass, field, replace
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.mk_common.datetime_utils import utc_now
from src.mk_common.enums import OrderSide
from src.mk_common.wire import side_code


@dataclass(frozen=True)
class OrderRequest:
    """Raw per-item user input; fields are validated by the batch builder."""

    token_id: Any
    price: Any  # ether
    quantity: Any
    user: str
    side: Any = OrderSide.SELL


@dataclass(frozen=True)
class ValidatedOrder:
    token_id: int
    side: OrderSide
    price: Decimal  # ether, as validated
    quantity: int
    user: str  # lower-cased address
    # Wire encoding (uint72 wei / uint24)
    price_wei: int
    wire_quantity: int

    @property
    def side_code(self) -> int:
        return side_code(self.side)

    def as_wire(self) -> tuple[int, int, int, int]:
        """(side, tokenId, price, quantity) in the marketplace's LimitOrder layout."""
        return (self.side_code, self.token_id, self.price_wei, self.wire_quantity)

    def with_side(self, side: OrderSide) -> "ValidatedOrder":
        return replace(self, side=side)


@dataclass(frozen=True)
class Balance:
    token_id: int
    balance: int
    last_updated: datetime = field(default_factory=utc_now)

    @property
    def has_balance(self) -> bool:
        return self.balance > 0

    def can_sell(self, quantity: int) -> bool:
        return 0 < quantity <= self.balance


@dataclass(frozen=True)
class DroppedOrder:
    """An input item excluded from the batch, with the reason why."""

    index: int
    token_id: Any
    reason: str


@dataclass(frozen=True)
class PreparedBatch:
    orders: list[ValidatedOrder]
    dropped: list[DroppedOrder]

    @property
    def is_empty(self) -> bool:
        return not self.orders
