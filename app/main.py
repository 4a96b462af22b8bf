"""
Student Records API - Main Application

FastAPI backend with:
- MongoDB for users and students
- JWT authentication, admin / student roles
- One error format for every failure

Run: uvicorn app.main:app --reload
"""

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from pymongo.errors import PyMongoError

from app import __version__
from app.api.routes import api_router
from app.core.config import configure_logging, get_settings, validate_runtime_config
from app.core.errors import register_exception_handlers
from app.db.mongodb import close_mongo_client, init_mongo_indexes, test_mongo_connection
from app.services.auth_service import get_auth_service

settings = get_settings()
configure_logging(settings.log_level)

logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    REST backend for admin and student records.

    ## Features
    - **Authentication**: JWT login for admins, self-registration for students
    - **Admins**: CRUD over admin accounts (admin only)
    - **Students**: CRUD over student records; students manage their own record
    """,
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.on_event("startup")
def startup_event():
    """Check config, create indexes, seed the first admin."""
    validate_runtime_config(settings)
    try:
        init_mongo_indexes()
        if settings.bootstrap_admin_email:
            get_auth_service().ensure_bootstrap_admin(
                settings.bootstrap_admin_name,
                settings.bootstrap_admin_email,
                settings.bootstrap_admin_password,
            )
    except PyMongoError:
        logger.exception("MongoDB initialization failed. Check MONGODB_URI.")


@app.on_event("shutdown")
def shutdown_event():
    close_mongo_client()


@app.get("/", tags=["Health"])
def root():
    return {"status": "healthy", "app": settings.app_name}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    return {
        "status": "healthy",
        "mongodb": "connected" if test_mongo_connection() else "disconnected"
    }
