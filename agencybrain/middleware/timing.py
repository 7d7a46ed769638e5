"""
Request timing middleware for API paths.

Logs method, path, status code, total ms and response bytes for every
/api/ request, with optional DB query stats (AGENCYBRAIN_LOG_DB_TIMING=1).

Only logs paths starting with /api/ to avoid noise from static files, admin, etc.
"""

import logging
import os
import re
import time
from typing import Callable

from django.http import HttpRequest, HttpResponse

logger = logging.getLogger("agencybrain.timing")


class RequestTimingMiddleware:
    """Middleware that logs request timing for /api/ paths."""

    # Normalize path patterns so logs group by endpoint
    # e.g., /api/calls/abc-123/qa/ -> /api/calls/:id/qa/
    PATH_PATTERNS = [
        (re.compile(r"[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}", re.IGNORECASE), ":id"),
    ]

    def __init__(self, get_response: Callable[[HttpRequest], HttpResponse]):
        self.get_response = get_response
        self.log_db_timing = os.environ.get("AGENCYBRAIN_LOG_DB_TIMING", "0") == "1"

    def _normalize_path(self, path: str) -> str:
        """Normalize path by replacing UUIDs with placeholders."""
        for pattern, replacement in self.PATH_PATTERNS:
            path = pattern.sub(replacement, path)
        return path

    def __call__(self, request: HttpRequest) -> HttpResponse:
        # Only time /api/ paths
        if not request.path.startswith("/api/"):
            return self.get_response(request)

        start_time = time.perf_counter()

        db_queries_before = 0
        if self.log_db_timing:
            from django.db import connection
            db_queries_before = len(connection.queries)

        response = self.get_response(request)

        duration_ms = (time.perf_counter() - start_time) * 1000
        response_bytes = len(response.content) if hasattr(response, "content") else 0

        log_parts = [
            f"{request.method} {self._normalize_path(request.path)}",
            f"status={response.status_code}",
            f"ms={duration_ms:.1f}",
            f"bytes={response_bytes}",
        ]

        if self.log_db_timing:
            from django.db import connection
            new_queries = connection.queries[db_queries_before:]

            db_time_ms = 0.0
            for query in new_queries:
                try:
                    db_time_ms += float(query.get("time", 0)) * 1000
                except (ValueError, TypeError):
                    pass

            log_parts.append(f"queries={len(new_queries)}")
            log_parts.append(f"db_ms={db_time_ms:.1f}")

        logger.info(" | ".join(log_parts))

        response["X-Request-Time-Ms"] = f"{duration_ms:.1f}"
        return response
