"""
@file: middleware.py
@description:
This module configures and centralizes middleware for the FastAPI application.

The middleware components include:
- CORS configuration: Controls which domains can access the API
- Request logging: Logs information about each request and its processing time
- HTTPS redirect: Ensures secure connections in production

@dependencies:
- fastapi: For CORSMiddleware
- starlette: For BaseHTTPMiddleware and RedirectResponse
- pitchside.core.config: For application settings
- pitchside.core.logger: For structured logging

@notes:
- CORS is configured differently for development vs. production environments
- Middleware is applied in the main FastAPI application
"""

import time
from typing import Callable, List

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import RedirectResponse

from pitchside.core.config import settings
from pitchside.core.logger import setup_logger, log_request_details

# Create a component-specific logger
logger = setup_logger("pitchside.core.middleware")

PRODUCTION_ORIGINS: List[str] = [
    "https://pitchside.app",
    "https://www.pitchside.app",
]

LOCAL_ORIGINS: List[str] = [
    "http://localhost",
    "http://localhost:3000",
    "http://localhost:5173",
    "http://localhost:8000",
]


def allowed_origins() -> List[str]:
    """
    Origins allowed by CORS for the current environment.

    Development allows all origins; production only the known frontends
    (plus localhost when DEBUG is on).
    """
    if settings.APP_ENV != "production":
        return ["*"]
    origins = list(PRODUCTION_ORIGINS)
    if settings.DEBUG:
        origins.extend(LOCAL_ORIGINS)
    return origins


def setup_cors(app: FastAPI) -> None:
    """
    Configure CORS middleware for the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    origins = allowed_origins()
    logger.info(f"Setting up CORS middleware with origins: {origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
        max_age=86400,  # 24 hours cache for preflight requests
    )


class HTTPSRedirectMiddleware(BaseHTTPMiddleware):
    """
    Middleware to redirect HTTP requests to HTTPS in production.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if settings.APP_ENV == "production" and request.url.scheme == "http":
            https_url = str(request.url).replace("http://", "https://", 1)
            logger.debug(f"Redirecting HTTP request to HTTPS: {https_url}")
            return RedirectResponse(https_url, status_code=301)
        return await call_next(request)


def setup_https_redirect(app: FastAPI) -> None:
    """
    Add HTTPS redirect middleware to the FastAPI application.

    This is only active in production mode.
    """
    if settings.APP_ENV == "production":
        logger.info("Setting up HTTPS redirect middleware for production")
        app.add_middleware(HTTPSRedirectMiddleware)
    else:
        logger.debug("HTTPS redirect middleware not added (not in production mode)")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for logging API requests and their processing time.

    This logs information about each request including:
    - HTTP method
    - URL path
    - Status code
    - Processing time
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Process each request and log details about it.

        Args:
            request: The incoming HTTP request
            call_next: The next middleware in the chain

        Returns:
            Response: The response from downstream middleware
        """
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time

        log_request_details(logger, request, process_time, response.status_code)
        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        return response


def setup_request_logging(app: FastAPI) -> None:
    """
    Add request logging middleware to the FastAPI application.
    """
    logger.info("Setting up request logging middleware")
    app.add_middleware(RequestLoggingMiddleware)


def setup_all_middleware(app: FastAPI) -> None:
    """
    Configure and add all middleware to the FastAPI application.

    Args:
        app: The FastAPI application instance
    """
    # Setup CORS first (outermost middleware)
    setup_cors(app)

    # Setup request logging
    setup_request_logging(app)

    # Setup HTTPS redirect for production
    setup_https_redirect(app)

    logger.info("All middleware initialized successfully")
