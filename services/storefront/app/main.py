"""Storefront API service entrypoint."""

import logging

from fastapi import FastAPI, Request, Response
from fastapi.exception_handlers import request_validation_exception_handler
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.concurrency import run_in_threadpool

from services.storefront.app.config import get_settings
from services.storefront.app.db.database import db_session
from services.storefront.app.db.init_db import init_db
from services.storefront.app.logging_setup import setup_logging
from services.storefront.app.routers.admin import router as admin_router
from services.storefront.app.routers.catalog import router as catalog_router
from services.storefront.app.routers.checkout import CHECKOUT_PATH, CORS_HEADERS
from services.storefront.app.routers.checkout import router as checkout_router
from services.storefront.app.routers.tracking import router as tracking_router
from services.storefront.app.services.log_sink import DbLogSink

logger = logging.getLogger(__name__)

app = FastAPI(title="Storefront API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=[h.strip() for h in CORS_HEADERS["Access-Control-Allow-Headers"].split(",")],
)

app.include_router(checkout_router)
app.include_router(tracking_router)
app.include_router(admin_router)
app.include_router(catalog_router)


@app.exception_handler(RequestValidationError)
async def _request_validation_error(request: Request, exc: RequestValidationError) -> Response:
    response = await request_validation_exception_handler(request, exc)
    if request.url.path == CHECKOUT_PATH:
        # Schema failures never reach the orchestrator, so record them here.
        fields = [".".join(str(p) for p in err.get("loc", ())) for err in exc.errors()]
        logger.warning("Rejected checkout request: invalid %s", ", ".join(fields))
        await run_in_threadpool(
            DbLogSink(db_session).record,
            "invalid_request",
            "Invalid checkout request body",
            {"fields": fields},
        )
        response.headers.update(CORS_HEADERS)
    return response


@app.on_event("startup")
def _startup() -> None:
    setup_logging(get_settings())
    init_db()


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}
