"""Order batch builder: raw requests -> wire-ready ValidatedOrders.

Best-effort: an item failing validation, the wire-format range re-check or
the balance check is dropped on its own with a recorded reason; the rest
proceed in input order. Only an oversized batch or an invalid owner fails the
whole call, and either does so before any network contact.
"""
import asyncio
import logging
from collections.abc import Sequence
from decimal import Decimal

from src.mk_common.enums import OrderSide
from src.mk_common.errors import (
    AppError,
    BatchTooLargeError,
    InsufficientBalanceError,
    ValidationError,
)
from src.mk_common.wire import MAX_UINT24, ether_to_wei, fits_uint24, fits_uint72
from src.mk_order.domain.gateway import BalanceOracle
from src.mk_order.domain.models import (
    DroppedOrder,
    OrderRequest,
    PreparedBatch,
    ValidatedOrder,
)
from src.mk_security.validator import InputValidator

logger = logging.getLogger(__name__)

DEFAULT_MAX_BATCH_SIZE = 50


def _parse_side(raw: object) -> OrderSide:
    try:
        return OrderSide(raw.strip().lower() if isinstance(raw, str) else raw)
    except ValueError:
        raise ValidationError("side", ['Order side must be either "buy" or "sell"']) from None


def encode_order(
    token_id: int, side: OrderSide, price: Decimal, quantity: int, user: str
) -> ValidatedOrder:
    """Encode to wire units and re-verify the uint72/uint24 widths.

    Runs after input validation on purpose: configured limits may be wider
    than what the protocol can carry.
    """
    try:
        price_wei = ether_to_wei(price)
    except ValueError as exc:
        raise ValidationError("price", [str(exc)]) from exc
    if price_wei <= 0:
        raise ValidationError("price", ["Price must be greater than 0"])
    if not fits_uint72(price_wei):
        raise ValidationError("price", ["Price exceeds maximum allowed value"])
    if quantity <= 0:
        raise ValidationError("quantity", ["Quantity must be greater than 0"])
    if not fits_uint24(quantity):
        raise ValidationError("quantity", [f"Quantity exceeds maximum allowed value ({MAX_UINT24})"])
    return ValidatedOrder(
        token_id=token_id,
        side=side,
        price=price,
        quantity=quantity,
        user=user,
        price_wei=price_wei,
        wire_quantity=quantity,
    )


class OrderBatchBuilder:
    def __init__(
        self,
        validator: InputValidator,
        balances: BalanceOracle,
        max_batch_size: int = DEFAULT_MAX_BATCH_SIZE,
    ) -> None:
        self._validator = validator
        self._balances = balances
        self.max_batch_size = max_batch_size

    async def prepare(self, requests: Sequence[OrderRequest], owner: str) -> PreparedBatch:
        if len(requests) > self.max_batch_size:
            raise BatchTooLargeError(len(requests), self.max_batch_size)
        owner = self._validator.validate_address(owner).unwrap("owner")

        dropped: list[DroppedOrder] = []
        candidates: list[tuple[int, ValidatedOrder]] = []
        for index, request in enumerate(requests):
            try:
                candidates.append((index, self._sanitize(request, owner)))
            except AppError as exc:
                dropped.append(self._drop(index, request.token_id, exc.message))

        # Balance reads are independent pure reads; gather keeps input order.
        checked = await asyncio.gather(
            *(self._check_balance(index, order, owner) for index, order in candidates)
        )
        orders: list[ValidatedOrder] = []
        for outcome in checked:
            if isinstance(outcome, DroppedOrder):
                dropped.append(outcome)
            else:
                orders.append(outcome)

        dropped.sort(key=lambda d: d.index)
        logger.info(
            "Prepared batch for %s: %d accepted, %d dropped", owner, len(orders), len(dropped)
        )
        return PreparedBatch(orders=orders, dropped=dropped)

    def _sanitize(self, request: OrderRequest, owner: str) -> ValidatedOrder:
        token_id = self._validator.validate_token_id(request.token_id).unwrap("tokenId")
        side = _parse_side(request.side)
        price = self._validator.validate_price(request.price).unwrap("price")
        quantity = self._validator.validate_quantity(request.quantity).unwrap("quantity")
        user = self._validator.validate_address(request.user).unwrap("user")
        if user != owner:
            raise ValidationError("user", [f"Order user {user} does not match owner {owner}"])
        return encode_order(token_id, side, price, quantity, user)

    async def _check_balance(
        self, index: int, order: ValidatedOrder, owner: str
    ) -> ValidatedOrder | DroppedOrder:
        try:
            balance = await self._balances.get_balance(owner, order.token_id)
        except Exception as exc:  # noqa: BLE001 -- one failed read drops one item
            return self._drop(index, order.token_id, f"Balance lookup failed: {exc}")
        if order.quantity > balance:
            err = InsufficientBalanceError(order.token_id, order.quantity, balance)
            return self._drop(index, order.token_id, err.message)
        return order

    @staticmethod
    def _drop(index: int, token_id: object, reason: str) -> DroppedOrder:
        logger.warning("Order %d (token %s) dropped: %s", index, token_id, reason)
        return DroppedOrder(index=index, token_id=token_id, reason=reason)
