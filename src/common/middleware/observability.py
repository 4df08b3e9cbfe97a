"""Observability middleware for context enrichment."""

import typing as t
import uuid

import structlog
from asgiref.sync import iscoroutinefunction, markcoroutinefunction
from django.http import HttpRequest, HttpResponse

from common.utils import get_client_ip


class StructlogContextMiddleware:
    """Enriches structlog context with request metadata.

    Binds request-level context (request_id, method, path, IP) to all log
    events during the request lifecycle. Works for both sync and async
    request handling.
    """

    sync_capable = True
    async_capable = True

    def __init__(self, get_response: t.Callable[[HttpRequest], t.Any]) -> None:
        """Initialize middleware.

        Args:
            get_response: Django middleware get_response callable
        """
        self.get_response = get_response
        if iscoroutinefunction(self.get_response):
            markcoroutinefunction(self)

    def __call__(self, request: HttpRequest) -> t.Any:
        """Process request and bind context."""
        if iscoroutinefunction(self):
            return self.__acall__(request)

        request_id = self._bind_context(request)
        try:
            response: HttpResponse = self.get_response(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response["X-Request-ID"] = request_id
        return response

    async def __acall__(self, request: HttpRequest) -> HttpResponse:
        """Async variant of __call__."""
        request_id = self._bind_context(request)
        try:
            response: HttpResponse = await self.get_response(request)
        finally:
            structlog.contextvars.clear_contextvars()
        response["X-Request-ID"] = request_id
        return response

    @staticmethod
    def _bind_context(request: HttpRequest) -> str:
        request_id = str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.path,
            ip_address=get_client_ip(request),
        )
        return request_id
