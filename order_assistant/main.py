# order_assistant/main.py
from __future__ import annotations

import logging
from typing import AsyncIterator
from uuid import uuid4

import anthropic
from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from .auth import authorize_customer, create_token, optional_user_id, verify_password
from .config import Settings, get_settings, settings
from .db import Base, engine, get_db
from .errors import AuthorizationFailed, OrderAssistantError, RequestValidationFailed
from .models import User
from .ordering.brain import resolve_order_intent
from .ordering.context import build_order_context
from .ordering.gateway import build_client
from .schemas import LoginIn, ProcessOrderIn, ResolutionResult

if not logging.getLogger().handlers:
    logging.basicConfig(
        level=getattr(logging, settings.log_level, logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Order Assistant API",
    docs_url=None,
    redoc_url=None,
    openapi_url=None,
)

Base.metadata.create_all(bind=engine)


# -------------------
# Errors
# -------------------
def _describe_validation_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    first = errors[0]
    where = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
    msg = first.get("msg", "invalid value")
    return f"Invalid request body: {where}: {msg}" if where else f"Invalid request body: {msg}"


@app.exception_handler(OrderAssistantError)
async def order_assistant_error_handler(request: Request, exc: OrderAssistantError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": _describe_validation_error(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unexpected error in %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": "An unexpected error occurred"})


# -------------------
# Dependencies
# -------------------
async def get_generation_client(
    settings: Settings = Depends(get_settings),
) -> AsyncIterator[anthropic.AsyncAnthropic]:
    async with build_client(settings) as client:
        yield client


# -------------------
# Health
# -------------------
@app.get("/")
def root():
    return {"ok": True, "service": "order-assistant"}


# -------------------
# Auth
# -------------------
@app.post("/auth/login")
def login(payload: LoginIn, db: Session = Depends(get_db)):
    u = db.query(User).filter(User.email == payload.email).first()
    if not u or not verify_password(payload.password, u.password_hash):
        raise AuthorizationFailed("Bad credentials")
    return {"token": create_token(u.id), "customer_id": u.customer_id}


# -------------------
# Order assistant
# -------------------
@app.post("/api/ai/process-order", response_model=ResolutionResult)
async def process_order(
    payload: ProcessOrderIn,
    user_id: int | None = Depends(optional_user_id),
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
    client: anthropic.AsyncAnthropic = Depends(get_generation_client),
):
    request_id = uuid4().hex

    message = (payload.message or "").strip()
    customer_id = (payload.customer_id or "").strip()
    if not message or not customer_id:
        logger.info("request_id=%s stage=validate outcome=rejected", request_id)
        raise RequestValidationFailed("Missing message or customerId")

    try:
        authorize_customer(db, user_id, customer_id)
    except OrderAssistantError as e:
        logger.info("request_id=%s stage=authorize outcome=rejected status=%d", request_id, e.status_code)
        raise

    context = build_order_context(db, customer_id, request_id=request_id)

    result = await resolve_order_intent(
        message,
        payload.chat_history,
        context,
        settings=settings,
        client=client,
        request_id=request_id,
    )
    return ResolutionResult.model_validate(result)
