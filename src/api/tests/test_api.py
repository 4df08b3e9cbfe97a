"""Tests for the API root endpoints, exception handlers and the OpenAPI dump."""

import json
import typing as t
from pathlib import Path

import pytest
from django.conf import settings
from django.core.management import call_command
from django.test.client import Client
from django.urls import reverse

from api.exception_handlers import obfuscate
from conftest import FakeRecordStore


class TestRootEndpoints:
    def test_version(self, client: Client) -> None:
        response = client.get(reverse("api:version"))

        assert response.status_code == 200
        assert response.json() == {"version": settings.VERSION}

    def test_healthcheck(self, client: Client) -> None:
        response = client.get(reverse("api:healthcheck"))

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_responses_carry_request_id(self, client: Client) -> None:
        assert client.get(reverse("api:version")).has_header("X-Request-ID")


class TestExceptionHandlers:
    def test_generation_exhausted(
        self,
        client: Client,
        record_store: FakeRecordStore,
        admin_headers: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        async def always_taken(code: str) -> bool:
            return True

        monkeypatch.setattr(record_store, "exists_guest_with_code", always_taken)

        response = client.get(reverse("api:admin_codes"), **admin_headers)  # type: ignore[arg-type]

        assert response.status_code == 500
        assert response.json() == {"detail": "Failed to generate a unique invite code."}

    def test_unexpected_error(
        self,
        client: Client,
        record_store: FakeRecordStore,
        admin_headers: dict[str, str],
        monkeypatch: pytest.MonkeyPatch,
        settings: t.Any,
    ) -> None:
        settings.DEBUG = False

        async def broken() -> None:
            raise ZeroDivisionError

        monkeypatch.setattr(record_store, "list_guests", broken)

        response = client.get(reverse("api:admin_list_guests"), **admin_headers)  # type: ignore[arg-type]

        assert response.status_code == 500
        assert response.json() == {"detail": "Internal Server Error."}


def test_obfuscate() -> None:
    headers = {"Authorization": "Bearer s3cret", "Cookie": "a=b", "Accept": "application/json"}

    result = obfuscate(headers)

    assert result == {"Authorization": "********", "Cookie": "********", "Accept": "application/json"}
    assert headers["Authorization"] == "Bearer s3cret"


def test_dump_openapi(tmp_path: Path) -> None:
    output = tmp_path / "schema" / "openapi.json"

    call_command("dump_openapi", output=output)

    schema = json.loads(output.read_text())
    assert schema["info"]["title"] == "Guestlist API"
    assert "/api/invites/validate" in schema["paths"]
    assert {"get", "post", "put"} <= set(schema["paths"]["/api/rsvp/"])
