"""FastAPI application entry point.

Run with: uvicorn src.main:app --reload --port 8000
"""

# ruff: noqa: E402  -- uvloop.install() must run before other imports

import uvloop

uvloop.install()

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from config.settings import Settings, settings
from src.mk_chain.approval import ApprovalManager
from src.mk_chain.balance_cache import CachedBalanceOracle
from src.mk_chain.submitter import BatchSubmitter, TransactionPolicy
from src.mk_chain.web3_gateway import Web3ChainGateway, build_web3
from src.mk_common.errors import AppError, RateLimitError
from src.mk_common.response import error_response
from src.mk_gateway.middleware.request_log import RequestLogMiddleware
from src.mk_market.api.router import router as market_router
from src.mk_market.quotes import QuoteService
from src.mk_order.api.router import router as order_router
from src.mk_order.application.service import OrderPipeline, RateLimitRule
from src.mk_order.domain.builder import OrderBatchBuilder
from src.mk_order.domain.gateway import ChainGateway
from src.mk_security.rate_limiter import SlidingWindowRateLimiter
from src.mk_security.validator import InputValidator, ValidationLimits
from src.mk_wallet.api.router import router as wallet_router
from src.mk_wallet.session import WalletSession

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)


def wire_components(app: FastAPI, gateway: ChainGateway, cfg: Settings) -> None:
    """Build every pipeline component from settings and park them on app.state."""
    validator = InputValidator(
        ValidationLimits(
            price_min=cfg.PRICE_MIN,
            price_max=cfg.PRICE_MAX,
            quantity_min=cfg.QUANTITY_MIN,
            quantity_max=cfg.QUANTITY_MAX,
            token_id_min=cfg.TOKEN_ID_MIN,
            token_id_max=cfg.TOKEN_ID_MAX,
            max_input_length=cfg.MAX_INPUT_LENGTH,
        )
    )
    balances = CachedBalanceOracle(gateway, ttl_seconds=cfg.BALANCE_CACHE_TTL_SECONDS)
    policy = TransactionPolicy(
        gas_buffer_percent=cfg.TX_GAS_BUFFER_PERCENT,
        max_retries=cfg.TX_MAX_RETRIES,
        retry_delay_ms=cfg.TX_RETRY_DELAY_MS,
    )
    app.state.order_pipeline = OrderPipeline(
        rate_limiter=SlidingWindowRateLimiter(),
        builder=OrderBatchBuilder(validator, balances, max_batch_size=cfg.TX_MAX_BATCH_SIZE),
        approvals=ApprovalManager(gateway),
        submitter=BatchSubmitter(gateway, policy),
        operator=cfg.MARKETPLACE_ADDRESS,
        balance_cache=balances,
        rate_limit=RateLimitRule(
            max_requests=cfg.BATCH_RATE_LIMIT_MAX_REQUESTS,
            window_ms=cfg.BATCH_RATE_LIMIT_WINDOW_MS,
        ),
    )
    app.state.quote_service = QuoteService(gateway)
    app.state.wallet_session = WalletSession(cfg.CHAIN_ID, validator)
    app.state.explorer_tx_url = cfg.EXPLORER_TX_URL


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Startup: build the web3 gateway, wire components, connect the sender account."""
    w3 = build_web3(settings.RPC_URL)
    gateway = Web3ChainGateway(
        w3,
        marketplace_address=settings.MARKETPLACE_ADDRESS,
        items_address=settings.ITEMS_ADDRESS,
        confirmation_timeout=settings.TX_CONFIRMATION_TIMEOUT_SECONDS,
    )
    wire_components(app, gateway, settings)
    if settings.SENDER_ADDRESS:
        chain_id = await w3.eth.chain_id
        app.state.wallet_session.connect(settings.SENDER_ADDRESS, chain_id, wallet_type="node")
    else:
        logger.warning("SENDER_ADDRESS not set: order placement disabled until a wallet connects")
    yield


app = FastAPI(
    title=settings.APP_NAME,
    version="0.1.0",
    lifespan=lifespan,
)


app.add_middleware(RequestLogMiddleware)


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    resp = error_response(exc.code, exc.message, getattr(request.state, "request_id", None))
    headers = None
    if isinstance(exc, RateLimitError):
        headers = {"Retry-After": str(exc.reset_time_seconds)}
    return JSONResponse(
        status_code=exc.http_status,
        content=resp.model_dump(),
        headers=headers,
    )


app.include_router(order_router, prefix="/api/v1")
app.include_router(market_router, prefix="/api/v1")
app.include_router(wallet_router, prefix="/api/v1")


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok", "version": "0.1.0"}
