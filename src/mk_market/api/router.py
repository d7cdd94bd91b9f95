"""mk_market REST endpoints.

GET /markets/{token_id}/quote   — lowest ask / highest bid in ether
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path

from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.dependencies import get_quote_service, get_request_id
from src.mk_market.quotes import QuoteService

router = APIRouter(prefix="/markets", tags=["markets"])


@router.get("/{token_id}/quote")
async def get_quote(
    token_id: Annotated[int, Path(ge=1)],
    quotes: Annotated[QuoteService, Depends(get_quote_service)],
    request_id: Annotated[str | None, Depends(get_request_id)],
) -> ApiResponse:
    quote = await quotes.get_quote(token_id)
    data = {
        "token_id": quote.token_id,
        "lowest_ask": str(quote.lowest_ask) if quote.lowest_ask is not None else None,
        "highest_bid": str(quote.highest_bid) if quote.highest_bid is not None else None,
    }
    return success_response(data, request_id=request_id)
