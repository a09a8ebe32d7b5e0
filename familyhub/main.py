# familyhub/main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from familyhub.api.api import api_router
from familyhub.core.config import settings
from familyhub.core.error_handlers import register_exception_handlers
from familyhub.core.logging import setup_logging
from familyhub.core.middleware import register_middlewares
from familyhub.db.session import init_db
from familyhub.security.csrf import get_csrf_protector
from familyhub.services import register_services

# Set up the logger at the start
logger = setup_logging()


# Context manager for startup/shutdown events
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Family Hub API {app.version}")

    init_db()

    # Register services
    register_services()
    logger.info("Services registered")

    if settings.CSRF_ENABLED:
        get_csrf_protector()
    else:
        logger.warning("CSRF protection is disabled")

    yield

    logger.info("Shutting down application")


app = FastAPI(
    title="Family Hub API",
    description="Calendar, password and document sync for family records",
    version="0.1.0",
    lifespan=lifespan,
)

# Register custom exception handlers
register_exception_handlers(app)

# Register middleware
register_middlewares(app)

# Set up CORS middleware
if settings.BACKEND_CORS_ORIGINS:
    allowed_origins = [str(origin) for origin in settings.BACKEND_CORS_ORIGINS]
    logger.info(f"Setting up CORS with allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(api_router, prefix=settings.API_STR)


@app.get("/")
def root():
    return {"message": "Welcome to the Family Hub API"}


def create_app():
    return app


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
