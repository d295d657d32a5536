"""Plain text of supporting documents indexed for demand-letter context."""

from __future__ import annotations

import io
import logging

from pypdf import PdfReader
from pypdf.errors import PyPdfError

from extraction.complaint import ComplaintExtractor

logger = logging.getLogger("discovery.extraction.support")

# Below this many characters a PDF is treated as scanned and transcribed instead
MIN_TEXT_LAYER_CHARS = 100


def pdf_text_layer(data: bytes) -> str:
    """Text embedded in a PDF, or an empty string when it cannot be read."""
    try:
        reader = PdfReader(io.BytesIO(data))
        pages = [page.extract_text() or "" for page in reader.pages]
    except PyPdfError as e:
        logger.warning(f"Could not read PDF text layer: {e}")
        return ""
    return "\n".join(page for page in pages if page.strip())


async def support_document_text(extractor: ComplaintExtractor, data: bytes, mime_type: str) -> str:
    """Text to index for an uploaded supporting document.

    Text files are decoded and PDFs use their text layer. Scanned PDFs and
    images are transcribed by the LLM.

    Raises:
        ExtractionError: If transcription fails or returns nothing.
    """
    if mime_type.startswith("text/"):
        return data.decode("utf-8", errors="replace")

    if mime_type == "application/pdf":
        text = pdf_text_layer(data)
        if len(text.strip()) >= MIN_TEXT_LAYER_CHARS:
            return text
        logger.info("PDF has little or no text layer, transcribing it")

    return await extractor.extract_text_from_file(data, mime_type)
