from __future__ import annotations

import time
from contextlib import asynccontextmanager

import httpx
from fastapi import FastAPI, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from travel_agent_loop.bootstrap import AppRuntime
from travel_agent_loop.errors import AmadeusApiError, AmadeusAuthError, TurnFailedError
from travel_agent_loop.schemas import (
    ChatRequest,
    ChatResponse,
    GenerateTitleRequest,
    GenerateTitleResponse,
    HealthResponse,
    SessionOut,
    SessionSummaryOut,
)
from travel_agent_loop.tools.amadeus.flight_inspiration import search_flight_destinations

CHAT_FAILED_MESSAGE = "An error occurred while processing your request."
MODEL_UNAVAILABLE_MESSAGE = "AI Model not initialized. Check server logs for API Key issues."


def _error(status_code: int, message: str, **extra) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


def create_app(runtime: AppRuntime) -> FastAPI:
    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        logger.info(
            f"Travel assistant started (provider: {runtime.provider_name if runtime.agent else 'none'}, "
            f"tools: {len(runtime.registry)})"
        )
        yield
        logger.info("Travel assistant shutting down")
        await runtime.aclose()

    app = FastAPI(title="Travel Agent Loop", lifespan=lifespan)
    app.state.runtime = runtime

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} in {duration_ms:.1f}ms")
        return response

    @app.exception_handler(RequestValidationError)
    async def invalid_request(_request: Request, exc: RequestValidationError):
        logger.warning(f"Rejected request body: {exc.errors()}")
        return _error(400, "Invalid request body")

    @app.get("/health", response_model=HealthResponse)
    async def health():
        return HealthResponse(
            status="ok" if runtime.agent is not None else "degraded",
            provider=runtime.provider_name if runtime.agent is not None else None,
            tools=runtime.registry.names,
        )

    @app.post("/sessions", response_model=SessionOut)
    async def create_session():
        session = runtime.sessions.create_session()
        return SessionOut.from_session(session)

    @app.get("/sessions", response_model=list[SessionSummaryOut])
    async def list_sessions():
        return [SessionSummaryOut.from_summary(s) for s in runtime.sessions.list_sessions()]

    @app.get("/sessions/{session_id}", response_model=SessionOut, response_model_exclude_none=True)
    async def get_session(session_id: str):
        session = runtime.sessions.get_session(session_id)
        if session is None:
            return _error(404, "Session not found")
        return SessionOut.from_session(session)

    @app.post("/chat", response_model=ChatResponse, response_model_exclude_none=True)
    async def chat(body: ChatRequest):
        message = (body.message or "").strip()
        session_id = (body.session_id or "").strip()
        if not message or not session_id:
            return _error(400, "Message and sessionId are required")
        if runtime.agent is None:
            return _error(503, MODEL_UNAVAILABLE_MESSAGE)

        try:
            reply = await runtime.agent.run(session_id, message, client_history=body.history)
        except TurnFailedError as ex:
            logger.error(f"Turn failed for session {session_id}: {ex.kind}: {ex}")
            return _error(500, CHAT_FAILED_MESSAGE)
        except Exception as ex:
            logger.exception(f"Chat failed for session {session_id}: {type(ex).__name__}: {ex}")
            return _error(500, CHAT_FAILED_MESSAGE)

        return ChatResponse(
            type=reply.type,
            content=reply.text,
            data=reply.data,
            data_type=reply.data_type,
            session_id=reply.session_id,
            title=reply.title,
        )

    @app.post("/generate-title", response_model=GenerateTitleResponse)
    async def generate_title(body: GenerateTitleRequest):
        if body.history is None:
            return _error(400, "History is required")
        title = await runtime.title_generator.generate_title(body.history)
        return GenerateTitleResponse(title=title)

    @app.get("/search")
    async def search(
        origin: str | None = None,
        max_price: int | None = Query(default=None, alias="maxPrice"),
    ):
        if not origin or not origin.strip():
            return _error(400, "Origin is required")
        try:
            return await search_flight_destinations(runtime.amadeus, origin, max_price=max_price)
        except AmadeusApiError as ex:
            logger.error(f"Inspiration search failed: {ex}")
            return _error(500, "Failed to fetch flight destinations", details=ex.detail)
        except (AmadeusAuthError, httpx.HTTPError) as ex:
            logger.error(f"Inspiration search failed: {type(ex).__name__}: {ex}")
            return _error(500, "Failed to fetch flight destinations", details=str(ex))

    return app
