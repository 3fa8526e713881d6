"""
Report assembly.

Merges the rubric, the heuristic metrics and the optional enrichment into
one AuditReport, and builds the top-issue frequency table.
"""

from collections import Counter
from datetime import datetime, timezone
from typing import List, Optional

from .models import (
    AuditReport,
    Enrichment,
    HeuristicMetrics,
    IssueCount,
    RubricReport,
)


def top_issues(rubric: RubricReport, enrichment: Optional[Enrichment] = None) -> List[IssueCount]:
    """
    Count issue keys from the rubric suggestions and from any enrichment
    suggestions; most frequent first, first-seen order on ties.
    """
    keys = list(rubric.failing_keys)
    if enrichment is not None:
        for item in enrichment.suggestions:
            key = item.get("key")
            if key:
                keys.append(str(key))

    counts = Counter(keys)
    ordered = sorted(counts.items(), key=lambda kv: kv[1], reverse=True)
    return [IssueCount(key=key, count=count) for key, count in ordered]


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def assemble_report(
    url: str,
    rubric: RubricReport,
    metrics: HeuristicMetrics,
    enrichment: Optional[Enrichment] = None,
    pages: Optional[List[str]] = None,
    scanned_at: Optional[str] = None,
) -> AuditReport:
    """
    Build the final AuditReport.

    Args:
        url: Target identifier.
        rubric: Output of score_document().
        metrics: Output of compute_metrics().
        enrichment: Optional Enrichment; None means the step never ran.
        pages: URLs that went into the document, in order. Defaults to [url].
        scanned_at: ISO-8601 timestamp. Defaults to now (UTC).
    """
    return AuditReport(
        url=url,
        scanned_at=scanned_at or utc_timestamp(),
        pages=list(pages) if pages else [url],
        rubric=rubric,
        metrics=metrics,
        enrichment=enrichment,
        top_issues=top_issues(rubric, enrichment),
    )


def attach_enrichment(report: AuditReport, enrichment: Enrichment) -> AuditReport:
    """Return a copy of `report` carrying `enrichment`, with top issues recounted."""
    return report.model_copy(
        update={
            "enrichment": enrichment,
            "top_issues": top_issues(report.rubric, enrichment),
        }
    )
