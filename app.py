from contextlib import asynccontextmanager
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from routers.rooms import rooms_router
from broadcaster import broadcaster
from liveness import liveness_monitor
from errors import register_error_handlers
from schemas.rooms import HealthResponse
from constants import CORS_ORIGINS, LOG_FILE, LOG_LEVEL, SERVICE_NAME
from logging_config import get_logger, setup_logging

# Setup logging
setup_logging(log_level=LOG_LEVEL, log_file=LOG_FILE)
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    broadcaster.start()
    liveness_monitor.start()
    logger.info(f"{SERVICE_NAME} ready")
    yield
    await liveness_monitor.stop()
    await broadcaster.stop()
    logger.info(f"{SERVICE_NAME} shut down")


app = FastAPI(title=SERVICE_NAME, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_error_handlers(app)
app.include_router(rooms_router)

logger.info("FastAPI application initialized")


@app.get("/", response_model=HealthResponse)
async def health():
    return HealthResponse(status="ok", service=SERVICE_NAME)


@app.websocket("/rooms")
async def rooms_websocket(websocket: WebSocket):
    """Lobby feed: one room list on connect, then a fresh list after every change.

    Inbound frames are read only to detect the disconnect; their content is ignored.
    """
    await websocket.accept()
    client = websocket.client.host if websocket.client else "unknown"
    logger.info(f"Lobby WebSocket connected from {client}")
    try:
        await broadcaster.subscribe(websocket)
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Lobby WebSocket disconnected from {client}")
    except Exception as e:
        logger.error(f"Lobby WebSocket error for {client}: {e}", exc_info=True)
    finally:
        broadcaster.unsubscribe(websocket)
