from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse
from services.storefront.app.config import Settings, get_settings
from services.storefront.app.db.database import db_session
from services.storefront.app.db.deps import get_db
from services.storefront.app.models.checkout import (
    CheckoutErrorResponse,
    CheckoutRequest,
    CheckoutResponse,
)
from services.storefront.app.services.auth_base import bearer_token
from services.storefront.app.services.auth_factory import get_auth_verifier
from services.storefront.app.services.checkout import CheckoutOrchestrator
from services.storefront.app.services.email_factory import get_email_sender
from services.storefront.app.services.errors import CheckoutError
from services.storefront.app.services.gateway_factory import get_payment_gateway
from services.storefront.app.services.log_sink import DbLogSink
from services.storefront.app.services.store import OrderStore
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

router = APIRouter()

CHECKOUT_PATH = "/functions/v1/create-checkout"

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


def _error_response(message: str) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content=CheckoutErrorResponse(error=message).model_dump(),
        headers=CORS_HEADERS,
    )


@router.options(CHECKOUT_PATH)
def create_checkout_preflight() -> Response:
    return Response(status_code=200, headers=CORS_HEADERS)


@router.post(
    CHECKOUT_PATH,
    response_model=CheckoutResponse,
    responses={500: {"model": CheckoutErrorResponse}},
)
def create_checkout(
    payload: CheckoutRequest,
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> Response:
    log_sink = DbLogSink(db_session)

    try:
        orchestrator = CheckoutOrchestrator(
            settings=settings,
            auth=get_auth_verifier(settings),
            gateway=get_payment_gateway(settings),
            store=OrderStore(db),
            mailer=get_email_sender(settings),
            log_sink=log_sink,
        )
    except CheckoutError as e:
        logger.error("Checkout unavailable (%s): %s", e.kind, e.message)
        log_sink.record(e.kind, e.message)
        return _error_response(e.message)
    except ValueError as e:
        logger.error("Checkout misconfigured: %s", e)
        log_sink.record("configuration_error", str(e))
        return _error_response(str(e))

    try:
        result = orchestrator.process_checkout(
            auth_token=bearer_token(request.headers.get("authorization")),
            cart_items=payload.cart_items,
            shipping_address=payload.shipping_address,
            origin_url=request.headers.get("origin") or settings.site_url,
        )
    except CheckoutError as e:
        return _error_response(e.message)
    except Exception:
        # Already logged and recorded by the orchestrator.
        return _error_response("Internal Server Error")

    body = CheckoutResponse(
        url=result.payment_url,
        order_id=result.order_id,
        tracking_number=result.tracking_number,
    )
    return JSONResponse(status_code=200, content=body.model_dump(by_alias=True), headers=CORS_HEADERS)
