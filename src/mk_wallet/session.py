"""Wallet connection state with explicit transitions and subscriber callbacks.

Provider events (account / chain changes, connect, disconnect) are fed in by
whoever owns the provider; subscribers are told about each transition.
"""
import logging
from collections import defaultdict
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from src.mk_common.datetime_utils import utc_now
from src.mk_common.enums import WalletEvent
from src.mk_common.errors import WalletNotConnectedError, WrongNetworkError
from src.mk_security.validator import InputValidator

logger = logging.getLogger(__name__)

Listener = Callable[["WalletConnection"], None]


@dataclass(frozen=True)
class WalletConnection:
    address: str | None = None
    is_connected: bool = False
    chain_id: int | None = None
    wallet_type: str = "unknown"
    last_connected: str | None = None

    @property
    def short_address(self) -> str:
        if not self.address:
            return ""
        return f"{self.address[:6]}...{self.address[-4:]}"


class WalletSession:
    def __init__(self, expected_chain_id: int, validator: InputValidator | None = None) -> None:
        self.expected_chain_id = expected_chain_id
        self._validator = validator or InputValidator()
        self._connection = WalletConnection()
        self._listeners: dict[WalletEvent, list[Listener]] = defaultdict(list)

    @property
    def connection(self) -> WalletConnection:
        return self._connection

    @property
    def is_on_correct_network(self) -> bool:
        return self._connection.chain_id == self.expected_chain_id

    # --- subscriptions ---

    def subscribe(self, event: WalletEvent, callback: Listener) -> None:
        self._listeners[event].append(callback)

    def unsubscribe(self, event: WalletEvent, callback: Listener) -> None:
        if callback in self._listeners[event]:
            self._listeners[event].remove(callback)

    def _notify(self, event: WalletEvent) -> None:
        for callback in list(self._listeners[event]):
            try:
                callback(self._connection)
            except Exception:  # noqa: BLE001 -- one bad listener must not break the others
                logger.exception("Wallet listener for %s failed", event.value)

    # --- transitions ---

    def connect(self, address: str, chain_id: int, wallet_type: str = "unknown") -> WalletConnection:
        sanitized = self._validator.validate_address(address).unwrap("address")
        self._connection = WalletConnection(
            address=sanitized,
            is_connected=True,
            chain_id=chain_id,
            wallet_type=wallet_type,
            last_connected=utc_now().isoformat(),
        )
        logger.info("Wallet %s connected on chain %d", self._connection.short_address, chain_id)
        self._notify(WalletEvent.CONNECTED)
        if not self.is_on_correct_network:
            self._notify(WalletEvent.WRONG_NETWORK)
        return self._connection

    def disconnect(self) -> None:
        self._connection = WalletConnection()
        logger.info("Wallet disconnected")
        self._notify(WalletEvent.DISCONNECTED)

    def change_chain(self, chain_id: int) -> None:
        if not self._connection.is_connected:
            return
        self._connection = WalletConnection(
            address=self._connection.address,
            is_connected=True,
            chain_id=chain_id,
            wallet_type=self._connection.wallet_type,
            last_connected=self._connection.last_connected,
        )
        self._notify(WalletEvent.NETWORK_CHANGED)
        if not self.is_on_correct_network:
            self._notify(WalletEvent.WRONG_NETWORK)

    def change_accounts(self, accounts: Sequence[str]) -> None:
        """No accounts means the wallet was locked or disconnected."""
        if not accounts:
            self.disconnect()
            return
        if not self._connection.is_connected:
            return
        new_address = self._validator.validate_address(accounts[0]).unwrap("address")
        if new_address == self._connection.address:
            return
        self.connect(new_address, self._connection.chain_id or 0, self._connection.wallet_type)
        self._notify(WalletEvent.ACCOUNT_CHANGED)

    def require_ready(self) -> str:
        """Owner address for order placement, or raise 3003 / 3004."""
        if not self._connection.is_connected or not self._connection.address:
            raise WalletNotConnectedError()
        if not self.is_on_correct_network:
            raise WrongNetworkError(self._connection.chain_id, self.expected_chain_id)
        return self._connection.address
