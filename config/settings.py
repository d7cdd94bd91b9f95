from decimal import Decimal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Chain (defaults target Sonic mainnet)
    RPC_URL: str = "https://rpc.soniclabs.com"
    CHAIN_ID: int = 146
    EXPLORER_TX_URL: str = "https://sonicscan.org/tx/"

    # Contracts
    MARKETPLACE_ADDRESS: str = "0x0D6D3794C858B512716e77e05588D4f1Fc264319"
    ITEMS_ADDRESS: str = "0x8970c63da309d5359a579c2f53bfd64f72b7b706"
    # Node-managed account used as tx sender; unset = wallet not connected
    SENDER_ADDRESS: str | None = None

    # Transaction policy
    TX_GAS_BUFFER_PERCENT: int = 20
    TX_MAX_RETRIES: int = 3
    TX_RETRY_DELAY_MS: int = 2000
    TX_MAX_BATCH_SIZE: int = 50
    TX_CONFIRMATION_TIMEOUT_SECONDS: float = 120.0

    # Validation limits
    PRICE_MIN: Decimal = Decimal("0.000001")
    PRICE_MAX: Decimal = Decimal("1000000")
    QUANTITY_MIN: int = 1
    QUANTITY_MAX: int = 16_777_215  # uint24 max
    TOKEN_ID_MIN: int = 1
    TOKEN_ID_MAX: int = 2**53 - 1
    MAX_INPUT_LENGTH: int = 1000

    # Admission control
    BATCH_RATE_LIMIT_MAX_REQUESTS: int = 5
    BATCH_RATE_LIMIT_WINDOW_MS: int = 60_000
    BALANCE_CACHE_TTL_SECONDS: float = 30.0

    # App
    APP_NAME: str = "Estfor Marketplace Batch Orders"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"


settings = Settings()
