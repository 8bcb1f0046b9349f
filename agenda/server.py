"""FastAPI server for the scheduling assistant.

Run with:
    uvicorn agenda.server:app --reload --host 0.0.0.0 --port 8000
"""

from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from agenda.agent import create_orchestrator
from agenda.api.routes import router
from agenda.config import Settings, load_cors_origins
from agenda.services.appointment_store import AppointmentStore
from agenda.services.http_client import PublicAPIClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-8s %(name)s — %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(application: FastAPI):
    """Resolve settings and build the orchestrator once per process."""
    settings = Settings.from_env()
    store = AppointmentStore(settings.appointments_path)
    client = PublicAPIClient(timeout=settings.http_timeout_seconds)
    application.state.store = store
    application.state.orchestrator = create_orchestrator(settings, store=store, client=client)
    logger.info("Assistant ready (agenda file: %s)", settings.appointments_path)
    try:
        yield
    finally:
        client.close()
        logger.info("HTTP client closed")


app = FastAPI(
    title="Agenda Assistant",
    description="Natural-language scheduling assistant: check free slots and book them.",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=load_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next) -> Response:
    """Attach a request ID to every request and echo it in ``X-Request-ID``."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    request.state.request_id = request_id
    logger.info("[%s] %s %s", request_id, request.method, request.url.path)
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


app.include_router(router, prefix="/api")


@app.get("/")
async def root():
    return {
        "service": "Agenda Assistant",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    settings = Settings.from_env()
    logger.info("Starting Agenda Assistant on %s:%d", settings.server_host, settings.server_port)
    uvicorn.run(
        "agenda.server:app",
        host=settings.server_host,
        port=settings.server_port,
        reload=True,
    )
