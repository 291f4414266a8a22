"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from api import preferences
from api.helpers import preference_error_handler, request_validation_error_handler
from config import settings
from database import get_engine
from logging_config import setup_logging
from services.preference_errors import PreferenceServiceError
from services.preference_store import ensure_supported_dialect

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Refuse to start on a database without native upsert; log the deployment."""
    ensure_supported_dialect(get_engine().dialect.name)
    logger.info(
        "Preference service starting (environment=%s, deployment=%s)",
        settings.ENVIRONMENT,
        settings.DEPLOYMENT_ID,
    )
    yield


app = FastAPI(
    title="User Preferences",
    description="Per-user key/value preference storage",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["GET", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization", settings.USER_ID_HEADER],
)

app.add_exception_handler(PreferenceServiceError, preference_error_handler)
app.add_exception_handler(RequestValidationError, request_validation_error_handler)

app.include_router(preferences.router)


@app.get("/health")
def health_check():
    """Health check endpoint."""
    return {"status": "ok"}
