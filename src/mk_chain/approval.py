"""Approval manager: make sure the marketplace may move the owner's items."""
import logging

from src.mk_common.errors import ApprovalFailedError
from src.mk_order.domain.gateway import ApprovalGateway

logger = logging.getLogger(__name__)


class ApprovalManager:
    def __init__(self, gateway: ApprovalGateway) -> None:
        self._gateway = gateway

    async def ensure_approved(self, owner: str, operator: str) -> None:
        """Idempotent: issues setApprovalForAll only when not already granted.

        Raises ApprovalFailedError(3001) if the check or the authorization
        transaction fails. No retries here; the caller decides.
        """
        try:
            if await self._gateway.is_approved_for_all(owner, operator):
                return
            logger.info("Approving operator %s for owner %s", operator, owner)
            receipt = await self._gateway.set_approval_for_all(owner, operator, True)
        except Exception as exc:  # noqa: BLE001 -- any chain error is an approval failure
            raise ApprovalFailedError(str(exc)) from exc

        if not receipt.succeeded:
            raise ApprovalFailedError(f"approval transaction {receipt.tx_hash} reverted")
        logger.info(
            "Approval confirmed: tx=%s block=%d", receipt.tx_hash, receipt.block_number
        )
