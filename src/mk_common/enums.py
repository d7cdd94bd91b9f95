"""Global enums shared across contexts."""

from enum import Enum


class OrderSide(str, Enum):
    """Order side as chosen by the user; wire encoding lives in mk_common.wire."""
    SELL = "sell"
    BUY = "buy"


class ValidationKind(str, Enum):
    PRICE = "price"
    QUANTITY = "quantity"
    TOKEN_ID = "tokenId"
    ADDRESS = "address"
    TEXT = "text"


class WalletEvent(str, Enum):
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"
    NETWORK_CHANGED = "network_changed"
    WRONG_NETWORK = "wrong_network"
    ACCOUNT_CHANGED = "account_changed"
