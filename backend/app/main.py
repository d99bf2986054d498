import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from contextlib import asynccontextmanager
from app.core.config import settings
from app.core.database import engine, Base
from app.core.errors import register_exception_handlers
from app.core.scheduler import start_scheduler, stop_scheduler
from app.api.routes import auth, posts, profile, users
from app.storage.local_storage import IMAGE_URL_PREFIX, storage

# Import models so their tables are registered on Base.metadata
from app.models import post, user  # noqa: F401

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: Create missing tables, start background scheduler
    Shutdown: Stop background scheduler
    """
    # In production, use migrations instead of create_all
    Base.metadata.create_all(bind=engine)
    start_scheduler()
    yield
    stop_scheduler()


app = FastAPI(
    title="Social Feed API",
    description="Profiles and short posts for a small social network",
    version="1.0.0",
    lifespan=lifespan
)

register_exception_handlers(app)

# CORS middleware - allows the single-page client to call the API
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Public routes: directory and authentication
app.include_router(users.router, prefix="/api")
app.include_router(auth.router, prefix="/api")
# Token-protected routes
app.include_router(profile.router, prefix="/api")
app.include_router(posts.router, prefix="/api")

# Uploaded images are served as-is from the storage directory
app.mount(IMAGE_URL_PREFIX, StaticFiles(directory=storage.upload_dir), name="images")


@app.get("/")
async def root():
    """Root endpoint - API information"""
    return {"message": "Social Feed API", "version": "1.0.0"}


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=settings.PORT)
