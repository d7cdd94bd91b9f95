"""Wire-format helpers for the on-chain order book.

The marketplace encodes each limit order as (side: uint8, tokenId: uint256,
price: uint72, quantity: uint24). Prices travel as wei (18 decimals), so all
conversions use Decimal and never float.
"""

from decimal import Decimal, Inexact, InvalidOperation, localcontext

from src.mk_common.enums import OrderSide

WEI_PER_ETHER = Decimal(10) ** 18

MAX_UINT24 = (1 << 24) - 1  # 16_777_215
MAX_UINT72 = (1 << 72) - 1

SIDE_CODES: dict[OrderSide, int] = {
    OrderSide.SELL: 0,
    OrderSide.BUY: 1,
}


def side_code(side: OrderSide) -> int:
    return SIDE_CODES[side]


def ether_to_wei(amount: Decimal) -> int:
    """Convert an ether amount to integer wei, rejecting sub-wei precision.

    The product is computed exactly: precision is widened to fit every digit
    of `amount`, so long inputs are never rounded into a whole wei.
    """
    if not amount.is_finite():
        raise ValueError(f"Cannot convert {amount!r} to wei")
    with localcontext() as ctx:
        ctx.prec = max(ctx.prec, len(amount.as_tuple().digits) + 19)
        ctx.traps[Inexact] = True
        try:
            wei = amount * WEI_PER_ETHER
        except (Inexact, InvalidOperation) as exc:
            raise ValueError(f"Cannot convert {amount!r} to wei") from exc
    if wei != wei.to_integral_value():
        raise ValueError(f"Amount {amount} has more than 18 decimals")
    return int(wei)


def wei_to_ether(wei: int) -> Decimal:
    """Convert integer wei to an ether Decimal: 1500000000000000000 -> Decimal('1.5')."""
    value = (Decimal(wei) / WEI_PER_ETHER).normalize()
    # normalize() turns 10 into 1E+1
    return value.quantize(Decimal(1)) if value == value.to_integral_value() else value


def fits_uint72(value: int) -> bool:
    return 0 <= value <= MAX_UINT72


def fits_uint24(value: int) -> bool:
    return 0 <= value <= MAX_UINT24
