"""Tests for StructlogContextMiddleware."""

import pytest
import structlog
from asgiref.sync import iscoroutinefunction
from django.http import HttpRequest, HttpResponse
from django.test import RequestFactory

from common.middleware import StructlogContextMiddleware


def test_binds_request_context_and_sets_header(rf: RequestFactory) -> None:
    seen: dict[str, object] = {}

    def view(request: HttpRequest) -> HttpResponse:
        seen.update(structlog.contextvars.get_contextvars())
        return HttpResponse("ok")

    request = rf.get("/api/version", HTTP_X_FORWARDED_FOR="203.0.113.7")
    response = StructlogContextMiddleware(view)(request)

    assert seen["method"] == "GET"
    assert seen["path"] == "/api/version"
    assert seen["ip_address"] == "203.0.113.7"
    assert response["X-Request-ID"] == seen["request_id"]
    assert structlog.contextvars.get_contextvars() == {}


@pytest.mark.asyncio
async def test_async_chain(rf: RequestFactory) -> None:
    async def view(request: HttpRequest) -> HttpResponse:
        assert "request_id" in structlog.contextvars.get_contextvars()
        return HttpResponse("ok")

    middleware = StructlogContextMiddleware(view)
    response = await middleware(rf.get("/"))

    assert iscoroutinefunction(middleware)
    assert response.has_header("X-Request-ID")


def test_context_cleared_when_view_raises(rf: RequestFactory) -> None:
    def view(request: HttpRequest) -> HttpResponse:
        raise RuntimeError("boom")

    with pytest.raises(RuntimeError):
        StructlogContextMiddleware(view)(rf.get("/"))

    assert structlog.contextvars.get_contextvars() == {}
