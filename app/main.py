import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from contextlib import asynccontextmanager

from app.config import settings
from app.database import create_tables
from app.exceptions import register_exception_handlers
from app.logging_utils import setup_logging, RequestLoggingMiddleware
from app.websocket_manager import ConnectionManager

setup_logging(settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    await create_tables()
    app.state.manager = ConnectionManager()
    logger.info("%s %s started", settings.APP_NAME, settings.VERSION)
    yield
    logger.info("%s shutting down", settings.APP_NAME)

app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    description="Social feed and direct messaging API",
    lifespan=lifespan
)

app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

from app.api import auth, posts, messages, users, websocket

app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(posts.router, prefix="/api/posts", tags=["posts"])
app.include_router(messages.router, prefix="/api/messages", tags=["messages"])
app.include_router(users.router, prefix="/api/users", tags=["users"])
app.include_router(websocket.router, tags=["websocket"])

@app.get("/")
async def root():
    return {"message": settings.APP_NAME, "version": settings.VERSION}

@app.get("/health")
async def health():
    return {"status": "ok"}
