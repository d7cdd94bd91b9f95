"""mk_wallet REST endpoints.

GET /wallet   — current connection state as seen by the order pipeline
"""

from dataclasses import asdict
from typing import Annotated

from fastapi import APIRouter, Depends

from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.dependencies import get_request_id, get_wallet_session
from src.mk_wallet.session import WalletSession

router = APIRouter(prefix="/wallet", tags=["wallet"])


@router.get("")
async def get_wallet(
    wallet: Annotated[WalletSession, Depends(get_wallet_session)],
    request_id: Annotated[str | None, Depends(get_request_id)],
) -> ApiResponse:
    data = asdict(wallet.connection)
    data["short_address"] = wallet.connection.short_address
    data["is_on_correct_network"] = wallet.is_on_correct_network
    data["expected_chain_id"] = wallet.expected_chain_id
    return success_response(data, request_id=request_id)
