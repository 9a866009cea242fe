"""FastAPI dependency functions for request gating."""

import logging
from typing import Callable

from fastapi import Depends, HTTPException, Request, status

from ..config import Settings, get_settings
from ..services.operations import Operation

logger = logging.getLogger(__name__)

PAYMENT_HEADER = "X-PAYMENT"


def payment_requirements(operation: Operation, settings: Settings) -> dict:
    """Describe what a client must pay to invoke ``operation``."""
    return {
        "scheme": "exact",
        "network": settings.payments_network,
        "maxAmountRequired": str(operation.price),
        "resource": f"{settings.agent_url.rstrip('/')}/api/entrypoints/{operation.key}/invoke",
        "description": operation.description,
        "payTo": settings.payments_receivable_address,
        "facilitator": settings.payments_facilitator_url,
    }


def require_payment(operation: Operation) -> Callable:
    """
    Build a dependency that gates a priced operation behind the payment header.

    The header's proof is verified and settled by the facilitator in front of
    this service; here we only refuse calls that carry none. Free operations
    and deployments with PAYMENTS_ENABLED unset pass straight through.

    Usage:
        @app.post("/api/entrypoints/lookup/invoke", dependencies=[Depends(require_payment(op))])
    """

    async def dependency(request: Request, settings: Settings = Depends(get_settings)) -> None:
        if not settings.payments_enabled or not operation.is_paid:
            return

        if not request.headers.get(PAYMENT_HEADER):
            logger.info(f"Rejecting unpaid call to '{operation.key}' ({operation.price_usd})")
            raise HTTPException(
                status_code=status.HTTP_402_PAYMENT_REQUIRED,
                detail={
                    "error": "PaymentRequired",
                    "message": f"'{operation.key}' costs {operation.price_usd} per call",
                    "accepts": [payment_requirements(operation, settings)],
                },
            )

    return dependency
