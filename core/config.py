"""Process-wide configuration for the discovery pipeline.

Settings are read from the environment once at startup and passed to the
components that need them.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field

DEFAULT_MODEL = "claude-sonnet-4-20250514"
# Judicial Council of California, Form Interrogatories - General (DISC-001)
DEFAULT_TEMPLATE = "https://www.courts.ca.gov/documents/disc001.pdf"


@dataclass(slots=True)
class Settings:
    """Runtime configuration.

    Attributes:
        anthropic_api_key: API key for the LLM. ``None`` runs the stub client.
        llm_model: Model identifier used for every LLM call.
        llm_max_tokens: Token cap per LLM call.
        supabase_url: Base URL of the hosted backend.
        supabase_key: Service key sent as ``apikey`` and bearer token.
        storage_bucket: Bucket holding complaints and exported documents.
        form_interrogatories_template: Path or URL of the DISC-001 PDF.
        http_timeout_seconds: Timeout for storage and vector-search calls.
        cors_origins: Allowed origins for the HTTP API.
        log_level: Root log level name.
        log_format: ``text`` or ``json``.
        api_host: Interface the HTTP server binds to.
        api_port: Port the HTTP server listens on.
        pdf_font_path: TrueType font for PDF exports. Defaults to Times.
        pdf_bold_font_path: Bold face matching ``pdf_font_path``.
    """

    anthropic_api_key: str | None = None
    llm_model: str = DEFAULT_MODEL
    llm_max_tokens: int = 4096
    supabase_url: str | None = None
    supabase_key: str | None = None
    storage_bucket: str = "documents"
    form_interrogatories_template: str = DEFAULT_TEMPLATE
    http_timeout_seconds: float = 30.0
    cors_origins: list[str] = field(default_factory=list)
    log_level: str = "INFO"
    log_format: str = "text"
    api_host: str = "127.0.0.1"
    api_port: int = 8000
    pdf_font_path: str | None = None
    pdf_bold_font_path: str | None = None

    @property
    def storage_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_key)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        origins = [
            origin.strip()
            for origin in env.get("CORS_ORIGINS", "").split(",")
            if origin.strip()
        ]

        return cls(
            anthropic_api_key=env.get("ANTHROPIC_API_KEY") or None,
            llm_model=env.get("DISCOVERY_LLM_MODEL", DEFAULT_MODEL),
            llm_max_tokens=int(env.get("DISCOVERY_LLM_MAX_TOKENS", "4096")),
            supabase_url=(env.get("SUPABASE_URL") or "").rstrip("/") or None,
            supabase_key=env.get("SUPABASE_SERVICE_KEY") or None,
            storage_bucket=env.get("DISCOVERY_STORAGE_BUCKET", "documents"),
            form_interrogatories_template=env.get(
                "FORM_INTERROGATORIES_TEMPLATE", DEFAULT_TEMPLATE
            ),
            http_timeout_seconds=float(env.get("DISCOVERY_HTTP_TIMEOUT", "30")),
            cors_origins=origins,
            log_level=env.get("LOG_LEVEL", "INFO").upper(),
            log_format=env.get("LOG_FORMAT", "text").lower(),
            api_host=env.get("DISCOVERY_API_HOST", "127.0.0.1"),
            api_port=int(env.get("DISCOVERY_API_PORT", "8000")),
            pdf_font_path=env.get("DISCOVERY_PDF_FONT") or None,
            pdf_bold_font_path=env.get("DISCOVERY_PDF_BOLD_FONT") or None,
        )
