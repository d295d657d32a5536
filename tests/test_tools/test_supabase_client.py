"""Tests for the Supabase HTTP wrapper and the vector store client."""

from __future__ import annotations

import httpx
import pytest

from core.config import Settings
from core.exceptions import StorageError
from tools.supabase_client import SupabaseClient
from tools.vector_store import IndexedDocument, VectorStoreClient


@pytest.mark.asyncio
async def test_upsert_sends_conflict_target_and_prefer_header(supabase_client, fake_supabase) -> None:
    await supabase_client.upsert("request_for_admissions", {"case_id": "case-1", "admissions": ["A"]})

    request = fake_supabase.requests[-1]
    assert request.method == "POST"
    assert request.url.params["on_conflict"] == "case_id"
    assert "merge-duplicates" in request.headers["Prefer"]
    assert request.headers["apikey"] == "service-key"
    assert request.headers["Authorization"] == "Bearer service-key"


@pytest.mark.asyncio
async def test_select_one_uses_eq_filters(supabase_client, fake_supabase) -> None:
    fake_supabase.tables["demand_letters"] = [
        {"case_id": "case-1", "body_text": "one"},
        {"case_id": "case-2", "body_text": "two"},
    ]

    row = await supabase_client.select_one("demand_letters", {"case_id": "case-2"})

    assert row == {"case_id": "case-2", "body_text": "two"}
    assert fake_supabase.requests[-1].url.params["case_id"] == "eq.case-2"


@pytest.mark.asyncio
async def test_select_latest_orders_descending(supabase_client, fake_supabase) -> None:
    fake_supabase.tables["documents"] = [
        {"case_id": "c", "type": "complaint", "path": "old.pdf", "created_at": "2024-01-01"},
        {"case_id": "c", "type": "complaint", "path": "new.pdf", "created_at": "2024-06-01"},
    ]

    row = await supabase_client.select_latest("documents", {"case_id": "c", "type": "complaint"})

    assert row["path"] == "new.pdf"
    assert fake_supabase.requests[-1].url.params["order"] == "created_at.desc"


@pytest.mark.asyncio
async def test_select_one_returns_none_when_missing(supabase_client) -> None:
    assert await supabase_client.select_one("demand_letters", {"case_id": "nope"}) is None


@pytest.mark.asyncio
async def test_upload_then_download_round_trip(supabase_client, fake_supabase) -> None:
    await supabase_client.upload("demand_letters/c/letter.pdf", b"%PDF-data", "application/pdf")

    assert fake_supabase.requests[-1].headers["x-upsert"] == "true"
    assert await supabase_client.download("demand_letters/c/letter.pdf") == b"%PDF-data"


def test_public_url_points_at_public_bucket(supabase_client) -> None:
    assert supabase_client.public_url("demand_letters/c/letter.pdf") == (
        "https://project.supabase.test/storage/v1/object/public/documents/demand_letters/c/letter.pdf"
    )


@pytest.mark.asyncio
async def test_http_error_status_becomes_storage_error(supabase_client, fake_supabase) -> None:
    fake_supabase.fail_with = 503

    with pytest.raises(StorageError) as excinfo:
        await supabase_client.select("request_for_productions", {"case_id": "c"})

    assert excinfo.value.details["status_code"] == 503


@pytest.mark.asyncio
async def test_transport_failure_becomes_storage_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = SupabaseClient("https://x.supabase.test", "k", transport=httpx.MockTransport(refuse))
    with pytest.raises(StorageError):
        await client.download("complaints/c/file.pdf")
    await client.close()


def test_from_settings_requires_configuration() -> None:
    with pytest.raises(StorageError):
        SupabaseClient.from_settings(Settings())


@pytest.mark.asyncio
async def test_vector_search_parses_results(supabase_client, fake_supabase) -> None:
    fake_supabase.search_results = [
        {"id": "d1", "score": 0.91, "metadata": {"page": 2}, "content": "The contract was signed."},
        {"id": "d2", "score": 0.5, "content": "Payment was late."},
    ]
    store = VectorStoreClient(supabase_client)

    results = await store.search("contract terms", "case-1", top_k=2)

    assert [result.id for result in results] == ["d1", "d2"]
    assert results[0].metadata == {"page": 2}
    assert fake_supabase.function_calls[-1] == {
        "action": "search",
        "data": {"query": "contract terms", "caseId": "case-1", "topK": 2},
    }


@pytest.mark.asyncio
async def test_vector_search_without_results_list_raises(supabase_client, fake_supabase) -> None:
    store = VectorStoreClient(supabase_client)
    fake_supabase.search_results = None  # serialised as null

    with pytest.raises(StorageError):
        await store.search("anything", "case-1")


@pytest.mark.asyncio
async def test_add_documents_sends_case_and_user(supabase_client, fake_supabase) -> None:
    store = VectorStoreClient(supabase_client)

    await store.add_documents(
        [IndexedDocument(id="doc-1", name="invoice.txt", content="Invoice 118 remains unpaid.")],
        "case-1",
        user_id="user-9",
    )

    assert fake_supabase.function_calls[-1] == {
        "action": "addDocuments",
        "data": {
            "documents": [
                {
                    "id": "doc-1",
                    "name": "invoice.txt",
                    "content": "Invoice 118 remains unpaid.",
                    "type": "demand_support",
                }
            ],
            "caseId": "case-1",
            "userId": "user-9",
        },
    }


@pytest.mark.asyncio
async def test_add_no_documents_skips_the_call(supabase_client, fake_supabase) -> None:
    await VectorStoreClient(supabase_client).add_documents([], "case-1")

    assert fake_supabase.function_calls == []


@pytest.mark.asyncio
async def test_delete_document(supabase_client, fake_supabase) -> None:
    await VectorStoreClient(supabase_client).delete_document("doc-1")

    assert fake_supabase.function_calls[-1] == {
        "action": "deleteDocument",
        "data": {"documentId": "doc-1"},
    }
