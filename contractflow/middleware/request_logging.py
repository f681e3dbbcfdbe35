# =====================================================
# FILE: contractflow/middleware/request_logging.py
# Middleware for request logging
# =====================================================

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp
from typing import Callable
import time
import logging

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Log method, path, status code and duration of API requests
    """

    # Endpoints to exclude from logging
    EXCLUDED_ENDPOINTS = [
        "/health",
        "/docs",
        "/redoc",
        "/openapi.json",
    ]

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable):
        start_time = time.time()

        response = await call_next(request)

        if self._should_log_request(request):
            duration_ms = int((time.time() - start_time) * 1000)
            message = f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms}ms)"
            if response.status_code >= 500:
                logger.error(message)
            elif response.status_code >= 400:
                logger.warning(message)
            else:
                logger.info(message)

        return response

    def _should_log_request(self, request: Request) -> bool:
        path = request.url.path
        for excluded in self.EXCLUDED_ENDPOINTS:
            if path.startswith(excluded):
                return False
        return True
