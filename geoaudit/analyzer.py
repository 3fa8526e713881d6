"""
GeoAuditor — main orchestrator for GEO audits.

Runs the pure pipeline: extract facts, score the rubric, compute the
heuristic metrics and assemble the report. Multiple pages are audited as
one concatenated document, so page-level values such as <html lang> or
<title> come from whichever page appears first.
"""

import json
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .assembler import assemble_report
from .extractor import extract_facts
from .heuristics import compute_metrics
from .models import AuditReport, DocumentFacts, Enrichment, HeuristicMetrics, RubricReport
from .rubric import DEFAULT_WEIGHTS, score_document

PAGE_MARKER = "<!-- geoaudit:page {url} -->"
SINGLE_PAGE_ENTITY_LIMIT = 5
MULTI_PAGE_ENTITY_LIMIT = 10


def concatenate_pages(pages: Sequence[Tuple[str, str]]) -> str:
    """Join (url, html) pairs in order, each preceded by a page marker."""
    return "\n".join(f"{PAGE_MARKER.format(url=url)}\n{html}" for url, html in pages)


class GeoAuditor:
    """
    Stateless GEO audit pipeline.

    Usage — single page:
        auditor = GeoAuditor()
        report = auditor.analyze_html(url, html)

    Usage — several fetched pages:
        report = auditor.analyze_pages([(url1, html1), (url2, html2)])
    """

    def __init__(self, weights: Optional[Mapping[str, int]] = None):
        self.weights = dict(DEFAULT_WEIGHTS if weights is None else weights)

    def evaluate(
        self, html: str, entity_limit: int = SINGLE_PAGE_ENTITY_LIMIT
    ) -> Tuple[DocumentFacts, RubricReport, HeuristicMetrics]:
        """Extract, score and measure one document without building a report."""
        facts = extract_facts(html)
        rubric = score_document(facts, self.weights)
        metrics = compute_metrics(facts, rubric, entity_limit=entity_limit)
        return facts, rubric, metrics

    def analyze_html(
        self,
        url: str,
        html: str,
        enrichment: Optional[Enrichment] = None,
        scanned_at: Optional[str] = None,
    ) -> AuditReport:
        """Audit a single HTML document."""
        _, rubric, metrics = self.evaluate(html)
        return assemble_report(
            url, rubric, metrics, enrichment=enrichment, pages=[url], scanned_at=scanned_at
        )

    def analyze_pages(
        self,
        pages: Sequence[Tuple[str, str]],
        enrichment: Optional[Enrichment] = None,
        scanned_at: Optional[str] = None,
    ) -> AuditReport:
        """
        Audit several pages as one document.

        Args:
            pages: (url, html) pairs in crawl order. The first URL becomes
                the report target.
        """
        if not pages:
            raise ValueError("analyze_pages() needs at least one page")
        if len(pages) == 1:
            url, html = pages[0]
            return self.analyze_html(url, html, enrichment=enrichment, scanned_at=scanned_at)

        _, rubric, metrics = self.evaluate(
            concatenate_pages(pages), entity_limit=MULTI_PAGE_ENTITY_LIMIT
        )
        return assemble_report(
            pages[0][0],
            rubric,
            metrics,
            enrichment=enrichment,
            pages=[url for url, _ in pages],
            scanned_at=scanned_at,
        )


def build_enrichment_context(rubric: RubricReport, metrics: HeuristicMetrics) -> Dict[str, Any]:
    """JSON-safe context object handed to the enrichment collaborator."""
    return {
        "rubric": json.loads(rubric.model_dump_json()),
        "metrics": json.loads(metrics.model_dump_json()),
    }
