"""Shared fixtures: a scripted LLM, a fake Supabase backend and form templates."""

from __future__ import annotations

import io
import json
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from core.exceptions import LLMError
from core.models import ComplaintInformation
from tools.supabase_client import SupabaseClient


class ScriptedLLM:
    """Replays queued responses; an ``Exception`` in the queue is raised instead."""

    def __init__(self, responses: list[str | Exception] | None = None) -> None:
        self.responses = list(responses or [])
        self.calls: list[dict[str, Any]] = []
        self.stub_mode = True

    def queue(self, *responses: str | Exception) -> None:
        self.responses.extend(responses)

    async def generate_text(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        attachments: list[Any] | None = None,
    ) -> str:
        self.calls.append(
            {
                "system_prompt": system_prompt,
                "user_prompt": user_prompt,
                "attachments": list(attachments or []),
            }
        )
        if not self.responses:
            raise LLMError("generation", "no scripted response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    async def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
        attachments: list[Any] | None = None,
        expect: type | tuple[type, ...] = dict,
    ) -> Any:
        from tools.json_parsing import parse_llm_json

        text = await self.generate_text(system_prompt, user_prompt, max_tokens, attachments)
        return parse_llm_json(text, expect=expect)


@pytest.fixture
def scripted_llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def complaint_payload() -> dict[str, Any]:
    return {
        "defendant": "Acme Corporation",
        "plaintiff": "Jane Smith",
        "caseNumber": "24STCV00001",
        "filingDate": "January 15, 2024",
        "chargeDescription": "Breach of written contract",
        "courtName": "Superior Court of California, County of Los Angeles",
        "court": {"county": "Los Angeles"},
        "case": {"shortTitle": "Smith v. Acme Corporation", "caseNumber": "24STCV00001"},
        "attorney": {
            "name": "Jane Counsel",
            "barNumber": "654321",
            "firm": "Counsel & Partners LLP",
            "address": {"street": "1 Main St", "city": "Los Angeles", "state": "CA", "zip": "90012"},
            "phone": "(213) 555-0100",
            "email": "jane@counsel.test",
            "attorneyFor": "Plaintiff Jane Smith",
        },
        "formParties": {"askingParty": "Jane Smith", "answeringParty": "Acme Corporation", "setNumber": "One"},
        "caseType": "Contract",
    }


@pytest.fixture
def complaint(complaint_payload: dict[str, Any]) -> ComplaintInformation:
    return ComplaintInformation.model_validate(complaint_payload)


# ----------------------------------------------------------------------
# Fake Supabase
# ----------------------------------------------------------------------


class FakeSupabase:
    """In-memory stand-in for PostgREST, storage and edge functions."""

    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = {}
        self.objects: dict[str, bytes] = {}
        self.search_results: list[dict[str, Any]] = []
        self.function_calls: list[dict[str, Any]] = []
        self.requests: list[httpx.Request] = []
        self.fail_with: int | None = None

    @staticmethod
    def _filters(request: httpx.Request) -> dict[str, str]:
        return {
            key: value.removeprefix("eq.")
            for key, value in request.url.params.items()
            if value.startswith("eq.")
        }

    @staticmethod
    def _matches(row: dict[str, Any], filters: dict[str, str]) -> bool:
        return all(str(row.get(key)) == value for key, value in filters.items())

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.fail_with is not None:
            return httpx.Response(self.fail_with, text="backend unavailable")

        path = request.url.path
        if path.startswith("/rest/v1/"):
            return self._rest(request, path.removeprefix("/rest/v1/"))
        if path.startswith("/storage/v1/object/"):
            key = path.removeprefix("/storage/v1/object/")
            if request.method == "POST":
                self.objects[key] = request.content
                return httpx.Response(200, json={"Key": key})
            if key in self.objects:
                return httpx.Response(200, content=self.objects[key])
            return httpx.Response(404, json={"message": "Object not found"})
        if path.startswith("/functions/v1/"):
            body = json.loads(request.content)
            self.function_calls.append(body)
            if body.get("action") == "search":
                return httpx.Response(200, json={"results": self.search_results})
            return httpx.Response(200, json={"success": True})
        return httpx.Response(404, text="unknown route")

    def _rest(self, request: httpx.Request, table: str) -> httpx.Response:
        rows = self.tables.setdefault(table, [])
        filters = self._filters(request)

        if request.method == "GET":
            matched = [row for row in rows if self._matches(row, filters)]
            order = request.url.params.get("order")
            if order:
                column, _, direction = order.partition(".")
                matched.sort(key=lambda row: str(row.get(column, "")), reverse=direction == "desc")
            limit = request.url.params.get("limit")
            if limit:
                matched = matched[: int(limit)]
            return httpx.Response(200, json=matched)

        if request.method == "POST":
            row = json.loads(request.content)
            key = request.url.params.get("on_conflict", "case_id")
            rows[:] = [existing for existing in rows if existing.get(key) != row.get(key)]
            rows.append(row)
            return httpx.Response(201, json=[row])

        if request.method == "PATCH":
            values = json.loads(request.content)
            updated = []
            for row in rows:
                if self._matches(row, filters):
                    row.update(values)
                    updated.append(row)
            return httpx.Response(200, json=updated)

        if request.method == "DELETE":
            rows[:] = [row for row in rows if not self._matches(row, filters)]
            return httpx.Response(204)

        return httpx.Response(405)


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture
def supabase_client(fake_supabase: FakeSupabase) -> SupabaseClient:
    return SupabaseClient(
        "https://project.supabase.test",
        "service-key",
        transport=httpx.MockTransport(fake_supabase.handler),
    )


# ----------------------------------------------------------------------
# PDF templates
# ----------------------------------------------------------------------


def _build_form(text_fields: list[str], checkboxes: list[str], pages: int = 1) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    for page in range(pages):
        pdf.drawString(72, 740, f"FORM INTERROGATORIES PAGE {page + 1}")
        if page == pages - 1:
            form = pdf.acroForm
            y = 700
            for name in text_fields:
                form.textfield(name=name, x=72, y=y, width=300, height=18, borderStyle="inset")
                y -= 26
            for name in checkboxes:
                form.checkbox(name=name, x=400, y=y, size=12, checked=False, buttonStyle="check")
                y -= 20
        pdf.showPage()
    pdf.save()
    return buffer.getvalue()


@pytest.fixture
def build_form() -> Callable[..., bytes]:
    """Factory for AcroForm PDFs with the given field names."""
    return _build_form


@pytest.fixture
def plain_pdf() -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=letter)
    pdf.drawString(72, 720, "No form fields here")
    pdf.showPage()
    pdf.save()
    return buffer.getvalue()
