import logging
import sys
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse

from relay.adapters.base import BaseModelAdapter
from relay.adapters.openrouter import OpenRouterAdapter
from relay.config import Settings, get_settings
from relay.errors import InvalidInput, RelayError, StartupMisconfiguration
from relay.middleware.request_logging import RequestLoggingMiddleware
from relay.models.api import ChatPayload, ChatResponse, ErrorResponse
from relay.models.dispatch import FallbackOrder, ModelRegistry
from relay.services.dispatcher import Dispatcher
from relay.services.logger import LoggingService
from relay.services.tester_page import render_tester_page
from relay.services.validator import validate_chat_request

logger = logging.getLogger("relay")


def error_response(exc: RelayError) -> JSONResponse:
    body = ErrorResponse(error=exc.message, details=exc.details)
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True),
    )


def build_dispatcher(settings: Settings, adapter: Optional[BaseModelAdapter] = None) -> Dispatcher:
    registry = ModelRegistry(settings.MODELS)
    fallback_order = FallbackOrder.build(settings.FALLBACK_ORDER, registry)
    if adapter is None:
        adapter = OpenRouterAdapter(
            api_key=settings.OPENROUTER_API_KEY,
            base_url=settings.OPENROUTER_BASE_URL,
            timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        )
    return Dispatcher(
        adapter=adapter,
        registry=registry,
        fallback_order=fallback_order,
        timeout=settings.UPSTREAM_TIMEOUT_SECONDS,
        strict_reply_shape=settings.STRICT_REPLY_SHAPE,
    )


def create_app(
    settings: Optional[Settings] = None,
    adapter: Optional[BaseModelAdapter] = None,
) -> FastAPI:
    """
    Application factory. Settings are resolved here, so a missing API key
    raises StartupMisconfiguration before the server accepts traffic.
    """
    if settings is None:
        settings = get_settings()
    LoggingService.configure(settings.LOG_LEVEL)
    dispatcher = build_dispatcher(settings, adapter)
    tester_page = render_tester_page(dispatcher.registry.keys())

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"NGAI relay ready: {len(dispatcher.registry)} models, "
            f"fallback order={list(dispatcher.fallback_order.keys)}, "
            f"timeout={dispatcher.timeout:g}s"
        )
        yield

    app = FastAPI(
        title="NGAI Chat Relay",
        description="Relays chat messages to OpenRouter models with ordered fallback.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestLoggingMiddleware)

    @app.exception_handler(RequestValidationError)
    async def invalid_body_handler(request: Request, exc: RequestValidationError):
        # Missing or non-object JSON bodies are reported like a missing message
        return error_response(InvalidInput())

    @app.exception_handler(RelayError)
    async def relay_error_handler(request: Request, exc: RelayError):
        if exc.status_code >= 500:
            logger.error(f"{request.url.path} failed: {exc.message} ({exc.details})")
        return error_response(exc)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception):
        logger.exception(f"Unexpected error while handling {request.url.path}: {exc}")
        return error_response(RelayError())

    @app.get("/", response_class=HTMLResponse)
    async def tester():
        return tester_page

    @app.get("/health")
    async def health_check():
        return {"status": "ok"}

    @app.post(
        "/chat",
        response_model=ChatResponse,
        responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    )
    async def chat_endpoint(payload: ChatPayload):
        chat_request = validate_chat_request(
            payload.message,
            payload.model,
            dispatcher.registry,
            max_length=settings.MAX_MESSAGE_LENGTH,
        )
        result = await dispatcher.dispatch(chat_request)
        return ChatResponse(reply=result.reply, used=result.served_by)

    return app


def run() -> None:
    """Console entry point: validate config, then serve."""
    try:
        settings = get_settings()
    except StartupMisconfiguration as e:
        LoggingService.configure()
        logger.critical(f"❌ {e.message}; refusing to start (is OPENROUTER_API_KEY set?)")
        sys.exit(1)

    app = create_app(settings)
    logger.info(f"🚀 NGAI relay starting on {settings.HOST}:{settings.PORT}")
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())


if __name__ == "__main__":
    run()
