"""
FastAPI application for Yelp social login.

This module wires dependencies and configures the application.
The login flow is in social_auth_yelp/oauth, settings and users in their
own packages.
"""

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime

# Configure logging FIRST, before other local imports
from social_auth_yelp.logging_config import setup_global_logging

setup_global_logging()

# Now import other modules (they will use the configured logging)
from fastapi import FastAPI, Request, status  # noqa: E402
from fastapi.responses import RedirectResponse  # noqa: E402
from starlette.middleware.sessions import SessionMiddleware  # noqa: E402

from social_auth_yelp.network.registry import get_network_registry  # noqa: E402
from social_auth_yelp.oauth import router as login_router  # noqa: E402
from social_auth_yelp.oauth.config import get_oauth_config  # noqa: E402
from social_auth_yelp.oauth.exceptions import ConfigurationError  # noqa: E402
from social_auth_yelp.oauth.session import flash  # noqa: E402
from social_auth_yelp.settings import router as settings_router  # noqa: E402
from social_auth_yelp.users import router as users_router  # noqa: E402
from social_auth_yelp.users.manager import LOGIN_PATH  # noqa: E402

logger = logging.getLogger(__name__)


# ============================================================================
# Application Lifecycle
# ============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Dependencies are lazy-loaded; startup only reports what is registered.
    """
    config = get_oauth_config()
    plugins = [d.id for d in get_network_registry().list_definitions()]
    logger.info(
        "Application starting up...",
        extra={"plugins": plugins, "base_url": config.base_url or "<request>"},
    )
    yield
    logger.info("Shutting down application...")


app = FastAPI(
    title="Social Auth Yelp",
    description="Log in to the site with a Yelp account",
    version="1.0.0",
    lifespan=lifespan,
)

# Session middleware holds the OAuth2 state, access token and logged-in user
SESSION_SECRET_KEY = os.getenv("SESSION_SECRET_KEY")
if not SESSION_SECRET_KEY:
    raise ValueError("SESSION_SECRET_KEY is not set in the environment.")
app.add_middleware(
    SessionMiddleware,
    secret_key=SESSION_SECRET_KEY,
    same_site="lax",
    https_only=get_oauth_config().base_url.startswith("https"),
)


# ============================================================================
# Centralized Exception Handlers
# ============================================================================


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """
    Handle a login attempt while Yelp credentials are missing.

    The user goes back to the login page with a generic message; details
    are only in the logs for the site administrator.
    """
    logger.error(
        "Yelp login attempted but the module is not configured",
        extra={"reason": exc.reason.value},
    )
    flash(request.session, str(exc), "error")
    return RedirectResponse(url=LOGIN_PATH, status_code=status.HTTP_302_FOUND)


# ============================================================================
# Health Check Endpoints
# ============================================================================


@app.get("/")
async def root():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "social-auth-yelp",
        "timestamp": datetime.now(UTC).isoformat(),
    }


@app.get("/health")
async def health():
    """Health check endpoint for Cloud Run."""
    return {"status": "healthy"}


# ============================================================================
# Include Routers
# ============================================================================

app.include_router(login_router.router)
app.include_router(users_router.router)
app.include_router(settings_router.router)


# ============================================================================
# Main Entry Point
# ============================================================================

if __name__ == "__main__":
    import uvicorn

    port = int(os.getenv("PORT", 8080))
    uvicorn.run(app, host="0.0.0.0", port=port)
