from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.logging import configure_logging
from app.core.settings import get_app_settings
from app.db.session import engine
from app.models import Base
from app.routers.activity import router as activity_router
from app.routers.admin import router as admin_router
from app.routers.auth import router as auth_router
from app.routers.books import router as books_router
from app.routers.messages import router as messages_router
from app.routers.profile import router as profile_router
from app.routers.reports import router as reports_router
from app.routers.trades import router as trades_router

logger = logging.getLogger(__name__)

settings = get_app_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings)
    Base.metadata.create_all(bind=engine)
    logger.info("%s started", settings.app_name)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
def read_root():
    return {"message": "BookSwap API is running"}


app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(activity_router)
app.include_router(books_router)
app.include_router(trades_router)
app.include_router(messages_router)
app.include_router(reports_router)
app.include_router(admin_router)
