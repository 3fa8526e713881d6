"""
geoaudit — SEO and local GEO readiness audit for web pages.

Usage:
    from geoaudit import GeoAuditor

    auditor = GeoAuditor()

    # Single page audit from raw HTML
    report = auditor.analyze_html(url, html)

    # Several fetched pages audited as one document
    report = auditor.analyze_pages([(url1, html1), (url2, html2)])

    report.rubric.summary.score   # 0-100, two decimals
    report.metrics.local_relevance.score

Fetching (crawl4ai) and enrichment (httpx) live in geoaudit.fetch and
geoaudit.enrichment; the command-line runner is geoaudit.cli.
"""

from .analyzer import GeoAuditor, build_enrichment_context, concatenate_pages
from .assembler import assemble_report, attach_enrichment, top_issues
from .extractor import extract_facts
from .heuristics import compute_metrics
from .rubric import DEFAULT_WEIGHTS, score_document
from .models import (
    Priority,
    CheckKey,
    EnrichmentStatus,
    DocumentFacts,
    ImageFacts,
    ParsedBlock,
    MalformedBlock,
    CheckResult,
    Suggestion,
    RubricSummary,
    RubricReport,
    Readability,
    ContentQuality,
    GeoBreakdown,
    GeoScore,
    HeuristicMetrics,
    Enrichment,
    IssueCount,
    AuditReport,
)

__all__ = [
    # Main entry points
    "GeoAuditor",
    "extract_facts",
    "score_document",
    "compute_metrics",
    "assemble_report",
    "attach_enrichment",
    "top_issues",
    "build_enrichment_context",
    "concatenate_pages",
    "DEFAULT_WEIGHTS",
    # Enums
    "Priority",
    "CheckKey",
    "EnrichmentStatus",
    # Document facts
    "DocumentFacts",
    "ImageFacts",
    "ParsedBlock",
    "MalformedBlock",
    # Rubric
    "CheckResult",
    "Suggestion",
    "RubricSummary",
    "RubricReport",
    # Metrics
    "Readability",
    "ContentQuality",
    "GeoBreakdown",
    "GeoScore",
    "HeuristicMetrics",
    # Report
    "Enrichment",
    "IssueCount",
    "AuditReport",
]
