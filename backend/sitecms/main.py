import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .database import engine
from .db_models import *  # noqa: F401,F403
from .config import settings
from .errors import register_exception_handlers
from .media.uploader import CloudinaryUploader
from .auth.router import router as auth_router
from .topics.router import router as topics_router
from .posts.router import router as posts_router
from .tips.router import router as tips_router

log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)
logging.basicConfig(
    level=log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)

logger = logging.getLogger(__name__)
logger.info(f"Application starting with log level: {settings.LOG_LEVEL} (environment={settings.ENVIRONMENT})")


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.uploader = CloudinaryUploader.from_settings()
    if not settings.CLOUDINARY_CLOUD_NAME:
        logger.warning("CLOUDINARY_CLOUD_NAME is not set; image uploads will fail")

    yield
    await engine.dispose()


app = FastAPI(title="sitecms", lifespan=lifespan)

# Cookies are sent cross-site, so origins must be explicit when credentials are allowed
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(topics_router)
app.include_router(posts_router)
app.include_router(tips_router)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}
