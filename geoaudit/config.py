"""
Run configuration.

Built once at process start from environment variables, then overridden
by CLI flags, and passed explicitly into the fetch and enrichment steps.

Environment variables:
    CRAWL_PROXY_SERVER     - Proxy server for the crawler (fetch credential)
    CRAWL_PROXY_USERNAME   - Proxy username
    CRAWL_PROXY_PASSWORD   - Proxy password
    OPENAI_API_KEY         - Enrichment credential (fallback: CHATGPT_KEY)
    ENRICHMENT_MODEL       - Chat model name (default: gpt-4o-mini)
    ENRICHMENT_HTML_LIMIT  - Max HTML characters sent for enrichment (default: 6000)
    MAX_PAGES              - Max pages to crawl (default: 1, single page)
    MAX_DEPTH              - Max crawl depth in multi-page mode (default: 2)
    GENERATE_HTML          - Write the HTML report, "1"/"true" (default: true)
    GENERATE_PDF           - Also render the HTML report to PDF, "1"/"true" (default: false)
    REPORTS_DIR            - Output directory (default: reports)
    FETCH_TIMEOUT_MS       - Page load timeout (default: 45000)
    LLM_TIMEOUT_SECONDS    - Enrichment request timeout (default: 60)
"""

import logging
import os
from typing import List, Mapping, Optional

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

_TRUTHY = ("1", "true", "yes", "on")


def _flag(value: Optional[str], default: bool) -> bool:
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUTHY


class AuditConfig(BaseModel):
    target_url: str = ""

    proxy_server: Optional[str] = None
    proxy_username: Optional[str] = None
    proxy_password: Optional[str] = None
    fetch_timeout_ms: int = Field(default=45000, gt=0)

    openai_api_key: Optional[str] = None
    enrichment_model: str = "gpt-4o-mini"
    enrichment_html_limit: int = Field(default=6000, ge=0)
    enrichment_enabled: bool = True
    llm_timeout_seconds: float = Field(default=60.0, gt=0)

    max_pages: int = Field(default=1, ge=1)
    max_depth: int = Field(default=2, ge=0)

    generate_html: bool = True
    generate_pdf: bool = False
    reports_dir: str = "reports"

    @property
    def multi_page(self) -> bool:
        return self.max_pages > 1

    @property
    def has_fetch_credential(self) -> bool:
        return bool(self.proxy_server)

    @property
    def can_enrich(self) -> bool:
        return self.enrichment_enabled and bool(self.openai_api_key)

    @classmethod
    def from_env(
        cls, target_url: str = "", environ: Optional[Mapping[str, str]] = None
    ) -> "AuditConfig":
        env = os.environ if environ is None else environ
        return cls(
            target_url=target_url,
            proxy_server=env.get("CRAWL_PROXY_SERVER") or None,
            proxy_username=env.get("CRAWL_PROXY_USERNAME") or None,
            proxy_password=env.get("CRAWL_PROXY_PASSWORD") or None,
            fetch_timeout_ms=int(env.get("FETCH_TIMEOUT_MS", "45000")),
            openai_api_key=env.get("OPENAI_API_KEY") or env.get("CHATGPT_KEY") or None,
            enrichment_model=env.get("ENRICHMENT_MODEL") or "gpt-4o-mini",
            enrichment_html_limit=int(env.get("ENRICHMENT_HTML_LIMIT", "6000")),
            llm_timeout_seconds=float(env.get("LLM_TIMEOUT_SECONDS", "60")),
            max_pages=int(env.get("MAX_PAGES", "1")),
            max_depth=int(env.get("MAX_DEPTH", "2")),
            generate_html=_flag(env.get("GENERATE_HTML"), True),
            generate_pdf=_flag(env.get("GENERATE_PDF"), False),
            reports_dir=env.get("REPORTS_DIR") or "reports",
        )

    def startup_warnings(self) -> List[str]:
        """Messages for missing optional credentials."""
        warnings = []
        if not self.has_fetch_credential:
            warnings.append("CRAWL_PROXY_SERVER not set; fetching without a proxy.")
        if self.enrichment_enabled and not self.openai_api_key:
            warnings.append("OPENAI_API_KEY not set; skipping AI enrichment.")
        return warnings

    def log_startup_warnings(self) -> None:
        for message in self.startup_warnings():
            logger.warning(message)
