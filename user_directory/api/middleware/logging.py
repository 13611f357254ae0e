# 📄 File: user_directory/api/middleware/logging.py
# 🧭 Purpose (Layman Explanation):
# Keeps a diary of every request made to the directory: what was asked for, how long
# the answer took, and whether something went wrong.
# 🧪 Purpose (Technical Summary):
# Request logging middleware with request-id propagation (header, request.state and
# logging contextvars), response timing headers, and performance classification.
# 🔗 Dependencies:
# Starlette BaseHTTPMiddleware, user_directory.shared.utils.logging
# 🔄 Connected Modules / Calls From:
# user_directory.main (middleware registration)

import logging
import time
import uuid
from typing import Any, Dict

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from user_directory.shared.utils.logging import log_context

from . import should_exclude_path

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Request logging middleware for API monitoring.

    Features:
    - Structured request / response / error log entries
    - Request timing with X-Response-Time header
    - Request ID reuse or generation with X-Request-ID header
    - Slow request classification
    """

    request_id_header = "X-Request-ID"

    def __init__(self, app: ASGIApp, slow_request_threshold: float = 2.0):
        super().__init__(app)
        self.slow_request_threshold = slow_request_threshold
        self.very_slow_request_threshold = slow_request_threshold * 2.5

    async def dispatch(self, request: Request, call_next) -> Response:
        """
        Process and log an HTTP request.

        Args:
            request: HTTP request
            call_next: Next middleware or endpoint

        Returns:
            HTTP response
        """
        if should_exclude_path("logging", request.url.path):
            return await call_next(request)

        request_id = self._get_or_create_request_id(request)
        start_time = time.perf_counter()

        with log_context(request_id=request_id):
            logger.info(
                f"{request.method} {request.url.path}",
                extra={"extra_fields": self._request_log_data(request, request_id)},
            )

            try:
                response = await call_next(request)
            except Exception as e:
                processing_time = time.perf_counter() - start_time
                logger.error(
                    f"{request.method} {request.url.path} failed: {type(e).__name__}",
                    extra={"extra_fields": {
                        "event_type": "http_error",
                        "request_id": request_id,
                        "processing_time_ms": round(processing_time * 1000, 2),
                        "exception_type": type(e).__name__,
                        "exception_message": str(e),
                    }},
                )
                raise

            processing_time = time.perf_counter() - start_time
            response_data = self._response_log_data(request, response, request_id, processing_time)
            log_level = logging.WARNING if response_data["performance"] != "normal" else logging.INFO
            logger.log(
                log_level,
                f"{request.method} {request.url.path} -> {response.status_code}",
                extra={"extra_fields": response_data},
            )

        response.headers[self.request_id_header] = request_id
        response.headers["X-Response-Time"] = f"{processing_time * 1000:.2f}ms"
        return response

    def _get_or_create_request_id(self, request: Request) -> str:
        request_id = request.headers.get(self.request_id_header.lower()) or str(uuid.uuid4())
        request.state.request_id = request_id
        return request_id

    @staticmethod
    def _request_log_data(request: Request, request_id: str) -> Dict[str, Any]:
        return {
            "event_type": "http_request",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "query_params": dict(request.query_params),
            "client": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent", ""),
        }

    def _response_log_data(
        self, request: Request, response: Response, request_id: str, processing_time: float
    ) -> Dict[str, Any]:
        if processing_time > self.very_slow_request_threshold:
            performance = "very_slow"
        elif processing_time > self.slow_request_threshold:
            performance = "slow"
        else:
            performance = "normal"

        return {
            "event_type": "http_response",
            "request_id": request_id,
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "processing_time_ms": round(processing_time * 1000, 2),
            "performance": performance,
        }
