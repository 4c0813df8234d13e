import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .config import get_settings
from .database.dynamodb import build_event_store
from .routers import events

settings = get_settings()

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One store for the life of the process; the backend keeps the data
    # across restarts, so there is nothing to tear down.
    store = build_event_store(get_settings())
    store.initialize()
    app.state.event_store = store
    logger.info("Event store ready (%s backend)", get_settings().EVENT_STORE_BACKEND)
    yield


app = FastAPI(
    title="Event Store API",
    version="1.0.0",
    description="Events with ownership, RSVPs and attendee reviews",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)

# Configure CORS for docs UI
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(events.router)


@app.get("/")
def read_root():
    return {"message": "Event Store API", "status": "running"}
