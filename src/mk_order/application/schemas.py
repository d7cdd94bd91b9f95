# src/mk_order/application/schemas.py
from datetime import datetime
from typing import Any, Self

from pydantic import BaseModel, ConfigDict, Field, model_validator

from src.mk_common.datetime_utils import utc_now
from src.mk_order.domain.models import DroppedOrder, OrderRequest

FALLBACK_NOTE = "used buy-side fallback"


class TransactionResult(BaseModel):
    """Single outcome of one batch submission: success with a hash, or failure with an error."""

    model_config = ConfigDict(frozen=True)

    success: bool
    tx_hash: str | None = None
    block_number: int | None = None
    gas_used: str | None = None
    orders_created: int = 0
    error: str | None = None
    note: str | None = None
    timestamp: datetime = Field(default_factory=utc_now)

    @model_validator(mode="after")
    def success_xor_error(self) -> Self:
        if self.success and (self.tx_hash is None or self.error is not None):
            raise ValueError("successful result needs tx_hash and no error")
        if not self.success and (self.error is None or self.tx_hash is not None):
            raise ValueError("failed result needs error and no tx_hash")
        return self

    @classmethod
    def failed(cls, error: str) -> "TransactionResult":
        return cls(success=False, error=error)

    @property
    def error_message(self) -> str | None:
        if self.success:
            return None
        return self.error or "Unknown error occurred"

    def explorer_url(self, base: str) -> str | None:
        if not self.tx_hash:
            return None
        return f"{base}{self.tx_hash}"


# --- HTTP schemas ---

class OrderRequestIn(BaseModel):
    # Untyped on purpose: InputValidator owns parsing, so a malformed field
    # drops its own order instead of failing the request.
    token_id: Any = None
    price: Any = None
    quantity: Any = None
    side: Any = "sell"

    def to_domain(self, user: str) -> OrderRequest:
        return OrderRequest(
            token_id=self.token_id,
            price=self.price,
            quantity=self.quantity,
            user=user,
            side=self.side,
        )


class BatchOrderRequest(BaseModel):
    orders: list[OrderRequestIn]


class DroppedOrderResponse(BaseModel):
    index: int
    token_id: int | str | None
    reason: str

    @classmethod
    def from_domain(cls, dropped: DroppedOrder) -> "DroppedOrderResponse":
        token_id = dropped.token_id
        if isinstance(token_id, bool) or not isinstance(token_id, (int, str)):
            token_id = None
        return cls(index=dropped.index, token_id=token_id, reason=dropped.reason)


class BatchOrderResponse(BaseModel):
    result: TransactionResult
    dropped: list[DroppedOrderResponse]
    explorer_url: str | None = None
