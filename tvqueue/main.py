from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tvqueue.api.v1 import room, queue, search, websocket
from tvqueue.config import get_settings
from tvqueue.core.logging import setup_logging, get_logger
from tvqueue.dependencies import get_connection_registry

# Configure logging before anything else
setup_logging()
logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Application startup")
    key_count = len(settings.youtube_api_keys)
    if key_count:
        logger.info(f"YouTube search enabled with {key_count} API key(s)")
    else:
        logger.warning("No YouTube API key configured: search requests will fail")

    yield

    # Shutdown: close connections still joined to a room
    registry = get_connection_registry()
    connections = registry.all_connections()
    logger.info(f"Application shutdown: closing {len(connections)} WebSocket connection(s)...")
    for connection in connections:
        registry.leave(connection)
        try:
            await connection.close(code=1001)
        except Exception as e:
            logger.debug(f"Connection already closed during shutdown: {e}")


app = FastAPI(
    title="TV Queue Server",
    description="Shared TV playback queue for rooms joined from mobile devices",
    version="1.0.0",
    debug=settings.debug,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
    lifespan=lifespan
)

# CORS middleware for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(room.router, prefix=f"{settings.api_prefix}/rooms", tags=["Rooms"])
app.include_router(queue.router, prefix=f"{settings.api_prefix}/rooms", tags=["Queue"])
app.include_router(search.router, prefix=f"{settings.api_prefix}/youtube", tags=["Search"])
app.include_router(websocket.router, tags=["WebSocket"])


@app.get("/")
async def root():
    return {"message": "Welcome to TV Queue Server!", "status": "running"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
