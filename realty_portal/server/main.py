"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware
(CORS, request logging), registers the exception handlers and includes all
API routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from realty_portal.auth.session_tokens import check_session_secret, mark_server_start
from realty_portal.core.database import init_db
from realty_portal.core.logging_config import get_logger, setup_logging
from realty_portal.core.monitoring import initialize_logfire

from .api.v1 import admin, auth, blog_posts, contact, health, listings, upload, users
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Refuses to start with the placeholder session secret against a real
    database, records the server start time (sessions issued before it are
    rejected when restart invalidation is on) and prepares the database.
    """
    check_session_secret()
    started = mark_server_start()
    logger.info(f"Starting up Realty Portal server (start time {started})...")
    try:
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    yield

    logger.info("Shutting down Realty Portal server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Realty Portal API

    Backend of a real-estate marketing site: public property and blog browsing,
    an authenticated dashboard for agents and writers to submit listings and
    blog posts, and an admin panel to approve content and manage users.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_STR}/openapi.json",
    docs_url=f"{constant.API_STR}/docs",
    redoc_url=f"{constant.API_STR}/redoc",
    lifespan=lifespan,
)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)
setup_exception_handlers(app)
initialize_logfire(app)


app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_STR}/auth")
app.include_router(listings.router, prefix=f"{constant.API_STR}/listings")
app.include_router(blog_posts.router, prefix=f"{constant.API_STR}/blog-posts")
app.include_router(blog_posts.delete_router, prefix=f"{constant.API_STR}/blogs")
app.include_router(admin.router, prefix=f"{constant.API_STR}/admin")
app.include_router(users.router, prefix=constant.API_STR)
app.include_router(upload.router, prefix=constant.API_STR)
app.include_router(contact.router, prefix=constant.API_STR)


def run() -> None:
    """Serve the application with uvicorn (``realty-portal`` console script)."""
    import uvicorn

    uvicorn.run(
        "realty_portal.server.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
    )
