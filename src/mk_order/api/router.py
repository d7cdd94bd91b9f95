# src/mk_order/api/router.py
"""mk_order REST endpoints.

POST /orders/batch  — validate, approve and submit a batch of limit orders
"""
from typing import Annotated

from fastapi import APIRouter, Depends

from src.mk_common.response import ApiResponse, success_response
from src.mk_gateway.dependencies import (
    get_explorer_tx_url,
    get_order_pipeline,
    get_owner_address,
    get_request_id,
)
from src.mk_order.application.schemas import (
    BatchOrderRequest,
    BatchOrderResponse,
    DroppedOrderResponse,
)
from src.mk_order.application.service import OrderPipeline

router = APIRouter(prefix="/orders", tags=["orders"])


@router.post("/batch")
async def place_batch_orders(
    req: BatchOrderRequest,
    owner: Annotated[str, Depends(get_owner_address)],
    pipeline: Annotated[OrderPipeline, Depends(get_order_pipeline)],
    explorer_tx_url: Annotated[str, Depends(get_explorer_tx_url)],
    request_id: Annotated[str | None, Depends(get_request_id)],
) -> ApiResponse:
    outcome = await pipeline.place_batch([o.to_domain(owner) for o in req.orders], owner)
    body = BatchOrderResponse(
        result=outcome.result,
        dropped=[DroppedOrderResponse.from_domain(d) for d in outcome.dropped],
        explorer_url=outcome.result.explorer_url(explorer_tx_url),
    )
    return success_response(body.model_dump(mode="json"), request_id=request_id)
