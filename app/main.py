# app/main.py
import os
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.openapi.utils import get_openapi
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import create_db_and_tables
from app.core.auth import (
    fastapi_users,
    auth_backend,
    UserRead,
    UserCreate,
)
from app import models  # noqa: F401  (registers every table on Base.metadata)
from app.api.v1.api import api_router
from app.api.v1.routes import auth
from app.workers import build_workers

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables (local/dev) and run the background workers for the app's lifetime."""
    try:
        await create_db_and_tables()
        logger.info("✅ Database tables ready")
    except Exception as e:
        logger.error(f"❌ Startup error while creating tables: {str(e)}")
        raise

    if settings.email_enabled:
        logger.info("✅ SendGrid configured for alert emails")
    else:
        logger.warning("⚠️ SENDGRID_API_KEY not configured - alerts are delivered in-app only")

    workers = build_workers() if settings.SCHEDULER_ENABLED else []
    for worker in workers:
        worker.start()
    app.state.workers = workers

    yield

    for worker in workers:
        await worker.stop()
    logger.info("Background workers stopped")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.VERSION,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Authentication", "description": "Registration, login and password reset"},
        {"name": "User Management", "description": "User profile operations"},
        {"name": "budgets", "description": "Monthly budgets with spending analytics"},
        {"name": "recurring transactions", "description": "Scheduled income and expenses"},
        {"name": "Notifications", "description": "Budget alerts and real-time notifications"},
    ],
)


def custom_openapi():
    if app.openapi_schema:
        return app.openapi_schema

    openapi_schema = get_openapi(
        title=app.title,
        version=app.version,
        description=app.description,
        routes=app.routes,
    )
    openapi_schema.setdefault("components", {})["securitySchemes"] = {
        "OAuth2PasswordBearer": {
            "type": "oauth2",
            "flows": {"password": {"tokenUrl": "/api/v1/auth/jwt/login", "scopes": {}}},
        },
        "BearerAuth": {"type": "http", "scheme": "bearer"},
    }
    app.openapi_schema = openapi_schema
    return app.openapi_schema

app.openapi = custom_openapi

# CORS Configuration
origins = [
    settings.FRONTEND_URL,
    "http://localhost:3000",
    "http://localhost:3001",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Log unhandled errors and return a generic 500"""
    if isinstance(exc, HTTPException):
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    logger.exception(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": "Internal server error"})

# ------------------------------------------------------------
# AUTHENTICATION ROUTES
# ------------------------------------------------------------
# Cookie-clearing logout; registered before the fastapi-users router that shares the path
app.include_router(auth.router, prefix="/api/v1/auth", tags=["Authentication"])

app.include_router(
    fastapi_users.get_auth_router(auth_backend),
    prefix="/api/v1/auth/jwt",
    tags=["Authentication"],
)
app.include_router(
    fastapi_users.get_register_router(UserRead, UserCreate),
    prefix="/api/v1/auth",
    tags=["Authentication"],
)
app.include_router(
    fastapi_users.get_reset_password_router(),
    prefix="/api/v1/auth",
    tags=["Password Reset"],
)

# ------------------------------------------------------------
# ROOT & HEALTH
# ------------------------------------------------------------
@app.get("/", tags=["Root"])
async def root():
    return {"message": f"{settings.APP_NAME} is running!", "version": settings.VERSION}

@app.get("/health", tags=["Health"])
async def health_check():
    workers = getattr(app.state, "workers", [])
    return {
        "status": "healthy",
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "workers": {w.name: w.running for w in workers},
    }

# ------------------------------------------------------------
# BUSINESS LOGIC ROUTES
# ------------------------------------------------------------
app.include_router(api_router, prefix="/api/v1")

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8000))
    uvicorn.run("app.main:app", host="0.0.0.0", port=port, reload=False)
