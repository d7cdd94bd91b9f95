"""FastAPI dependency providers.

Components are built once in the app lifespan and parked on app.state;
routers only ever reach them through these functions, so tests can swap any
of them with `app.dependency_overrides`.

Usage:
    @router.post("/orders/batch")
    async def place(pipeline: OrderPipeline = Depends(get_order_pipeline)):
        ...
"""

from fastapi import Depends, Request

from src.mk_market.quotes import QuoteService
from src.mk_order.application.service import OrderPipeline
from src.mk_wallet.session import WalletSession


def get_order_pipeline(request: Request) -> OrderPipeline:
    return request.app.state.order_pipeline


def get_quote_service(request: Request) -> QuoteService:
    return request.app.state.quote_service


def get_wallet_session(request: Request) -> WalletSession:
    return request.app.state.wallet_session


def get_explorer_tx_url(request: Request) -> str:
    return request.app.state.explorer_tx_url


def get_request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def get_owner_address(wallet: WalletSession = Depends(get_wallet_session)) -> str:
    """Connected owner on the expected chain; raises 3003 / 3004 otherwise."""
    return wallet.require_ready()
