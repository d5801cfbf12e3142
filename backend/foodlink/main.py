from __future__ import annotations

from typing import Any, Dict

import socketio
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from .database import db, settings
from .memory.seed import seed_demo_data
from .routers import auth, donation, volunteer
from .services.errors import (
    DonationError,
    InvalidTransition,
    NotFound,
    SafetyAlertPending,
    ValidationError,
    VolunteerUnavailable,
)
from .utils.logging import configure_logging, log_rejected_operation


class LiveUpdateHub:
    def __init__(self, sio_server: socketio.AsyncServer) -> None:
        self.sio = sio_server
        self.websockets: set[WebSocket] = set()

    async def connect(self, websocket: WebSocket) -> None:
        await websocket.accept()
        self.websockets.add(websocket)

    def disconnect(self, websocket: WebSocket) -> None:
        self.websockets.discard(websocket)

    async def notify(self, event: str, payload: Dict[str, Any]) -> None:
        message = {"event": event, "payload": payload}
        stale = []
        for connection in self.websockets:
            try:
                await connection.send_json(message)
            except Exception as exc:
                logger.debug("Dropping live-update connection after send failure: {}", exc)
                stale.append(connection)
        for connection in stale:
            self.disconnect(connection)
        await self.sio.emit(event, payload)


configure_logging(settings.log_level)

sio = socketio.AsyncServer(async_mode="asgi", cors_allowed_origins="*")
app = FastAPI(title="FoodLink API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

hub = LiveUpdateHub(sio)

donation.init_router(hub)

app.include_router(auth.router)
app.include_router(donation.router)
app.include_router(volunteer.router)


def _rejected(request: Request, exc: DonationError) -> None:
    log_rejected_operation(f"{request.method} {request.url.path}", exc)


@app.exception_handler(ValidationError)
async def handle_validation_error(request: Request, exc: ValidationError) -> JSONResponse:
    _rejected(request, exc)
    return JSONResponse({"detail": exc.message, "errors": exc.errors}, status_code=422)


@app.exception_handler(InvalidTransition)
async def handle_invalid_transition(request: Request, exc: InvalidTransition) -> JSONResponse:
    _rejected(request, exc)
    return JSONResponse(
        {"detail": exc.message, "current_status": exc.current_status, "target_status": exc.target_status},
        status_code=409,
    )


@app.exception_handler(SafetyAlertPending)
async def handle_safety_alert_pending(request: Request, exc: SafetyAlertPending) -> JSONResponse:
    logger.info("Submission paused for confirmation: {} alert(s)", len(exc.alerts))
    return JSONResponse(
        {"detail": exc.message, "alerts": exc.alerts, "safety_score": exc.safety_score},
        status_code=409,
    )


@app.exception_handler(NotFound)
async def handle_not_found(request: Request, exc: NotFound) -> JSONResponse:
    _rejected(request, exc)
    return JSONResponse({"detail": exc.message}, status_code=404)


@app.exception_handler(VolunteerUnavailable)
async def handle_volunteer_unavailable(request: Request, exc: VolunteerUnavailable) -> JSONResponse:
    _rejected(request, exc)
    return JSONResponse({"detail": exc.message}, status_code=409)


@app.get("/health")
async def healthcheck() -> Dict[str, str]:
    return {"status": "ok"}


@app.websocket("/ws/updates")
async def updates_websocket(websocket: WebSocket) -> None:
    await hub.connect(websocket)
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        hub.disconnect(websocket)


@sio.event
async def connect(sid, environ):  # pragma: no cover - socket handshake
    logger.debug("Socket.IO client connected: {}", sid)


@sio.event
async def disconnect(sid):  # pragma: no cover - socket handshake
    logger.debug("Socket.IO client disconnected: {}", sid)


socket_app = socketio.ASGIApp(sio, other_asgi_app=app)


@app.on_event("startup")
async def load_demo_data() -> None:
    if settings.seed_demo_data:
        seed_demo_data(db)
