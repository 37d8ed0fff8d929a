# src/main.py

import logging

from contextlib import asynccontextmanager
import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from src.common.config import settings
from src.common.rate_limit import limiter
from src.router.routers import include_routers

# Centralized logging configuration
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

logger = logging.getLogger(__name__)

# Lifespan context manager for startup and shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.captcha_bypassed:
        logger.warning(
            "INSECURE MODE: RECAPTCHA_SECRET is not set, contact submissions are "
            "accepted without captcha verification. Never run like this in production."
        )
    if not settings.RATE_LIMIT_ENABLED:
        logger.warning("Rate limiting is disabled")
    logger.info("Contact routing table: %s", settings.DEPARTMENT_EMAILS)
    yield

def create_app() -> FastAPI:
    app = FastAPI(
        title="Contact Form API",
        description="Routes website contact form submissions to department mailboxes.",
        version="1.0.0",
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Middleware for CORS using allowed origins from settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    include_routers(app)

    # Health check endpoint
    @app.get("/health", tags=["Health"])
    async def health_check():
        return {"status": "ok", "message": "API is running"}

    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("src.main:app", host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
