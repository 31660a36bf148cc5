# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Request context middleware.

Binds a request id and the acting user id into the structlog context for
the duration of each request, so every log line emitted while serving it
carries both.
"""

from typing import Callable
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from registrar.utils.logging import bind_context, clear_context

REQUEST_ID_HEADER = "X-Request-ID"
ACTOR_HEADER = "X-Actor-Id"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Attach request_id and actor_id to request state and log context."""

    async def dispatch(
        self,
        request: Request,
        call_next: Callable[[Request], Response],
    ) -> Response:
        """Process the request with bound logging context.

        Args:
            request: Incoming HTTP request.
            call_next: Next middleware/handler.

        Returns:
            HTTP response carrying the request id header.
        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid4())
        actor_id = request.headers.get(ACTOR_HEADER)

        request.state.request_id = request_id
        request.state.actor_id = actor_id

        bind_context(request_id=request_id, actor_id=actor_id)
        try:
            response = await call_next(request)
        finally:
            clear_context()

        response.headers[REQUEST_ID_HEADER] = request_id
        return response
