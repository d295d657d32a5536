"""Tests for the LLM client, its file attachments and the stub handler."""

from __future__ import annotations

import base64
import json

import pytest

from core.config import DEFAULT_MODEL, Settings
from core.exceptions import LLMError
from tools.llm_client import FilePart, LLMClient


@pytest.fixture
def stub_llm_client() -> LLMClient:
    """Create an LLM client in stub mode (no API key)."""
    return LLMClient(api_key=None)


class TestFilePart:
    def test_pdf_becomes_base64_document_block(self) -> None:
        block = FilePart(b"%PDF-1.4 fake", "application/pdf").to_content_block()

        assert block["type"] == "document"
        assert block["source"]["media_type"] == "application/pdf"
        assert base64.b64decode(block["source"]["data"]) == b"%PDF-1.4 fake"

    def test_jpg_is_normalised_to_jpeg_image(self) -> None:
        block = FilePart(b"\xff\xd8", "image/jpg").to_content_block()

        assert block["type"] == "image"
        assert block["source"]["media_type"] == "image/jpeg"

    def test_text_is_sent_as_plain_text_document(self) -> None:
        block = FilePart(b"Plaintiff: Jane", "text/plain").to_content_block()

        assert block["source"] == {"type": "text", "media_type": "text/plain", "data": "Plaintiff: Jane"}

    def test_unsupported_type_raises(self) -> None:
        with pytest.raises(LLMError):
            FilePart(b"PK", "application/msword").to_content_block()


class TestLLMClientStubMode:
    """Tests for stub mode behavior."""

    def test_stub_mode_enabled_without_api_key(self) -> None:
        client = LLMClient(api_key=None)
        assert client.stub_mode is True

    def test_stub_mode_disabled_with_api_key(self) -> None:
        client = LLMClient(api_key="test-key-123")
        assert client.stub_mode is False

    @pytest.mark.asyncio
    async def test_complaint_extraction_from_text_attachment(self, stub_llm_client: LLMClient) -> None:
        text = "Plaintiff: Jane Smith\nDefendant: Acme Corporation\nCase No. 24STCV00099\nbreach of the written agreement"
        result = await stub_llm_client.generate_structured(
            "You are a legal assistant extracting information from a complaint document.",
            "Extract the case information.",
            attachments=[FilePart(text.encode(), "text/plain")],
        )

        assert result["plaintiff"] == "Jane Smith"
        assert result["defendant"] == "Acme Corporation"
        assert result["caseNumber"] == "24STCV00099"
        assert result["caseType"] == "Contract"

    @pytest.mark.asyncio
    async def test_transcription_without_attachment_returns_sample(self, stub_llm_client: LLMClient) -> None:
        result = await stub_llm_client.generate_text(
            "You transcribe documents.",
            "Please extract all the text content from this document.",
        )
        assert "SUPERIOR COURT" in result

    @pytest.mark.asyncio
    async def test_edit_item_appends_instruction(self, stub_llm_client: LLMClient) -> None:
        result = await stub_llm_client.generate_text(
            "You edit legal documents.",
            "The user wants to edit a single admission.\n<current>Admit the contract.</current>\n"
            "<instruction>mention the date</instruction>",
        )
        assert result == "Admit the contract. (mention the date)"

    @pytest.mark.asyncio
    async def test_discovery_prompt_returns_items(self, stub_llm_client: LLMClient) -> None:
        case = json.dumps({"plaintiff": "Jane", "defendant": "Acme"})
        result = await stub_llm_client.generate_structured(
            "You draft discovery.",
            f'<case>{case}</case>\nRespond with {{"definitions": [...], "admissions": [...]}}',
        )
        assert result["definitions"]
        assert any("Jane" in item for item in result["admissions"])


class TestLLMClientConfiguration:
    """Tests for client configuration options."""

    def test_default_model(self) -> None:
        client = LLMClient(api_key=None)
        assert client.model == DEFAULT_MODEL

    def test_custom_model_configuration(self) -> None:
        client = LLMClient(api_key=None, model="claude-3-5-sonnet-20241022")
        assert client.model == "claude-3-5-sonnet-20241022"

    def test_prompt_caching_enabled_by_default(self) -> None:
        client = LLMClient(api_key=None)
        assert client.use_prompt_caching is True

    def test_from_settings(self) -> None:
        settings = Settings.from_env({"DISCOVERY_LLM_MODEL": "claude-test", "DISCOVERY_LLM_MAX_TOKENS": "1000"})
        client = LLMClient.from_settings(settings)

        assert client.stub_mode is True
        assert client.model == "claude-test"
        assert client.max_tokens == 1000
