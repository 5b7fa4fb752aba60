# skillbridge/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from skillbridge.api import admin, goals, mentorship, ratings, reputation
from skillbridge.config import settings
from skillbridge.database import Base, engine
from skillbridge.services.scheduler import InactivityScheduler

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def _lifespan(app: FastAPI):
    scheduler = InactivityScheduler.from_settings()
    app.state.scheduler = scheduler
    if settings.SCHEDULER_ENABLED:
        scheduler.start()
    else:
        logger.info("Inactivity scheduler disabled (SCHEDULER_ENABLED=false)")
    try:
        yield
    finally:
        scheduler.stop()


# Initialize FastAPI app
app = FastAPI(title="SkillBridge API", lifespan=_lifespan)

# CORS Middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=[
        "http://0.0.0.0:8000",
        "http://localhost:8000",
        "http://127.0.0.1:8000",
    ],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# API routers
app.include_router(mentorship.router)   # /mentorships/*
app.include_router(goals.router)        # /goals/*
app.include_router(ratings.router)      # /ratings/*
app.include_router(reputation.router)   # /reputation/*
app.include_router(admin.router)        # /admin/*


@app.get("/health")
def health_check():
    return {
        "status": "healthy",
        "message": "SkillBridge API is running",
        "version": "1.0.0",
        "inactivity_signal": settings.INACTIVITY_SIGNAL,
    }
