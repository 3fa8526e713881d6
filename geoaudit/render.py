"""
Human-readable rendering of an AuditReport.

render_html() builds a self-contained HTML page that embeds the full JSON
report; summary_lines() produces the console summary printed after a run.
Presentation only: every number shown here is already in the report.
"""

import json
import re
from html import escape
from typing import Any, Dict, List

from .models import AuditReport, CheckKey, EnrichmentStatus
from .rubric import round_half_up

_STYLE = """
body{font-family:Inter,system-ui,Arial,Helvetica,sans-serif;margin:0;padding:20px;color:#111}
.container{max-width:1100px;margin:0 auto}
.header{display:flex;justify-content:space-between;align-items:center}
.brand{font-weight:800;font-size:20px}
.meta{color:#666}
.grid{display:grid;grid-template-columns:1fr 360px;gap:20px;margin-top:18px}
.card{background:#fff;border:1px solid #eee;padding:14px;border-radius:10px;margin-bottom:14px}
.section-title{font-weight:700;margin-bottom:8px}
.muted{color:#666;font-size:13px}
.small{font-size:12px;color:#555}
details{margin-bottom:8px}
pre{background:#f7f7f7;padding:10px;border-radius:6px;overflow:auto}
.score{display:flex;gap:12px;align-items:center}
.gauge{width:96px;height:96px;border-radius:50%;display:flex;align-items:center;justify-content:center;font-weight:800}
.high{background:linear-gradient(135deg,#e6f4ea,#c3eec7);color:#0b6a3a}
.mid{background:linear-gradient(135deg,#fff7e6,#ffefd5);color:#b36b00}
.low{background:linear-gradient(135deg,#fdecea,#ffd6d6);color:#a10b1b}
table{width:100%;border-collapse:collapse}
th,td{padding:8px;border-bottom:1px solid #f0f0f0;text-align:left}
.priority-HIGH{color:#b00020;font-weight:700}
.priority-MEDIUM{color:#ff8c00;font-weight:700}
.priority-LOW{color:#2e7d32;font-weight:700}
.copyBtn{background:#0b6a3a;color:white;border:none;padding:6px 8px;border-radius:6px;cursor:pointer}
.kpi{display:flex;gap:6px;align-items:center}
.badge{background:#f3f4f6;padding:6px 8px;border-radius:6px;font-weight:700}
"""

_SCRIPT = """
document.addEventListener('click', (e) => {
  if (e.target && e.target.matches('.copyBtn')) {
    const el = document.getElementById(e.target.getAttribute('data-target'));
    if (!el) return;
    navigator.clipboard.writeText(el.innerText).then(() => {
      e.target.innerText = 'Copied';
      setTimeout(() => { e.target.innerText = 'Copy'; }, 1200);
    });
  }
});
"""


def _gauge_class(score: float) -> str:
    if score >= 75:
        return "high"
    if score >= 45:
        return "mid"
    return "low"


def _fmt_score(score: float) -> str:
    return f"{score:g}%"


def _action_items(report: AuditReport) -> List[Dict[str, Any]]:
    """Enrichment suggestions when available, else the rubric suggestions."""
    if report.enrichment is not None and report.enrichment.suggestions:
        return report.enrichment.suggestions
    return [s.model_dump(mode="json") for s in report.rubric.suggestions]


def _priority(item: Dict[str, Any]) -> str:
    return str(item.get("priority") or "low").upper()


def _details(summary: str, body: str, open_: bool = False) -> str:
    flag = " open" if open_ else ""
    return (
        f"<details{flag}><summary>{summary}</summary>"
        f'<div class="small" style="margin-top:6px">{body}</div></details>'
    )


def _top_issues_table(report: AuditReport) -> str:
    if not report.top_issues:
        return '<div class="muted">No issues found.</div>'
    rows = "".join(
        f"<tr><td>{escape(issue.key)}</td><td>{issue.count}</td></tr>"
        for issue in report.top_issues[:10]
    )
    return f"<table><thead><tr><th>Issue</th><th>Occurrences</th></tr></thead><tbody>{rows}</tbody></table>"


def _action_plan_table(items: List[Dict[str, Any]]) -> str:
    if not items:
        return '<div class="muted">No action items.</div>'
    rows = []
    for item in items:
        key = escape(str(item.get("key") or "Issue"))
        fix = ""
        if item.get("example_fix"):
            target = "fix-" + re.sub(r"[^a-z0-9]", "", key, flags=re.IGNORECASE)
            fix = (
                f'<pre id="{target}">{escape(str(item["example_fix"]))}</pre>'
                f'<button class="copyBtn" data-target="{target}">Copy</button>'
            )
        priority = _priority(item)
        priority_class = re.sub(r"[^A-Z]", "", priority)
        rows.append(
            f"<tr><td><strong>{key}</strong>"
            f'<div class="small" style="margin-top:6px">{escape(str(item.get("advice") or ""))}</div>'
            f"{fix}</td>"
            f'<td class="priority-{priority_class}">{escape(priority)}</td>'
            f"<td>{escape(str(item.get('estimated_effort') or '30m'))}</td></tr>"
        )
    return (
        '<table><thead><tr><th style="width:60%">Fix</th><th>Priority</th><th>Effort</th></tr></thead>'
        f"<tbody>{''.join(rows)}</tbody></table>"
    )


def render_html(report: AuditReport) -> str:
    """Render the interactive HTML report for `report`."""
    rubric = report.rubric
    m = report.metrics
    seo, geo = report.seo_score, report.geo_score
    enriched = report.enrichment is not None and report.enrichment.status == EnrichmentStatus.OK
    alt_pct = round_half_up(m.accessibility.images_alt_ratio * 100)

    def detail(key: CheckKey, field: str, default: Any = "") -> Any:
        check = rubric.check(key)
        if check is None or not check.detail:
            return default
        return check.detail.get(field, default)

    local_ok = bool(rubric.check(CheckKey.LOCAL_SCHEMA) and rubric.check(CheckKey.LOCAL_SCHEMA).ok)
    json_ld_count = detail(CheckKey.JSON_LD, "count", 0)
    raw_json = report.model_dump_json(indent=2)
    pages = ", ".join(report.pages)

    technical = "".join([
        _details(
            f"<strong>Headings</strong> — {'Issues found' if m.heading_issues else 'No issues'}",
            escape("; ".join(m.heading_issues)) if m.heading_issues else "All heading levels look fine.",
        ),
        _details(
            f"<strong>Metadata</strong> — {escape(m.metadata_quality)}",
            f"Title: {escape(str(detail(CheckKey.TITLE, 'title') or '—'))}<br/>"
            f"Description length: {detail(CheckKey.DESCRIPTION, 'length', 0)}",
        ),
        _details(
            "<strong>Robots / Crawl</strong>",
            f"Robots meta: {escape(detail(CheckKey.ROBOTS, 'robots') or 'Not found')}<br/>"
            f"Robots.txt referenced in page HTML: {'Yes' if m.found_files.robots_txt else 'No'}",
        ),
    ])

    checklist = "".join([
        _details("<strong>Metadata Quality</strong>", escape(m.metadata_quality), open_=True),
        _details(
            "<strong>Data Structure &amp; Schema</strong>",
            "JSON-LD detected" if json_ld_count else "No JSON-LD detected",
        ),
        _details(
            "<strong>Canonical</strong>",
            f"Canonical: {escape(detail(CheckKey.CANONICAL, 'href') or 'Not found')}",
        ),
        _details("<strong>Hreflang</strong>", f"Count: {m.hreflang_count}"),
        _details("<strong>Local Schema</strong>", f"Local schema detected: {'Yes' if local_ok else 'No'}"),
        _details("<strong>Images Alt</strong>", f"Alt ratio: {alt_pct}%"),
        _details(
            "<strong>Content Readability</strong>",
            f"{escape(m.readability.label)} (Flesch {m.readability.flesch})",
        ),
    ])

    quality_details = _details(
        "Content quality details",
        f"Paragraphs: {m.content_quality.paragraph_count} · "
        f"Avg words/para: {m.content_quality.avg_words_per_paragraph} · "
        f"{escape(m.content_quality.label)}",
    )
    breakdown_details = _details(
        "Breakdown", f"<pre>{escape(m.local_relevance.breakdown.model_dump_json(indent=2))}</pre>"
    )
    raw_details = _details(
        "Download / copy",
        f'<pre id="rawjson">{escape(raw_json)}</pre>'
        '<button class="copyBtn" data-target="rawjson">Copy</button>',
    )
    entities = escape(", ".join(m.entities) or "—")

    json_ld_preview = (
        f"<pre>{escape(json.dumps(rubric.checks['json_ld'].detail, indent=2))}</pre>"
        if json_ld_count
        else '<div class="small muted">No JSON-LD parsed from the page.</div>'
    )

    return f"""<!doctype html>
<html>
  <head>
    <meta charset="utf-8"/>
    <meta name="viewport" content="width=device-width,initial-scale=1"/>
    <title>GEO Audit - {escape(report.url)}</title>
    <style>{_STYLE}</style>
  </head>
  <body>
    <div class="container">
      <div class="header">
        <div>
          <div class="brand">GEO Readiness Audit</div>
          <div class="meta">URL: {escape(report.url)} · Scanned: {escape(report.scanned_at)}</div>
          <div class="meta small">Pages: {escape(pages)}</div>
        </div>
        <div class="score">
          <div style="text-align:center">
            <div class="small muted">SEO Score</div>
            <div class="gauge {_gauge_class(seo)}">{_fmt_score(seo)}</div>
          </div>
          <div style="text-align:center">
            <div class="small muted">GEO Score</div>
            <div class="gauge {_gauge_class(geo)}">{_fmt_score(geo)}</div>
          </div>
        </div>
      </div>
      <div class="grid">
        <div>
          <div class="card">
            <div class="section-title">Executive summary</div>
            <div class="muted">Overall: <strong>{_fmt_score(seo)}</strong> · Type: <strong>{'AI Enhanced' if enriched else 'Static'}</strong>
              · Points: {rubric.total_awarded}/{rubric.total_possible}</div>
          </div>
          <div class="card">
            <div class="section-title">Top issues</div>
            {_top_issues_table(report)}
          </div>
          <div class="card">
            <div class="section-title">Technical &amp; Accessibility</div>
            <div class="kpi"><div class="badge">Images ALT {alt_pct}%</div><div class="badge">ARIA {'Yes' if m.accessibility.aria_present else 'No'}</div><div class="badge">Semantic {m.semantic_count}</div></div>
            {technical}
          </div>
          <div class="card">
            <div class="section-title">Data Structure &amp; Schema</div>
            <div class="muted">JSON-LD blocks detected: {m.json_ld_count}</div>
            {_details("JSON-LD preview", json_ld_preview)}
          </div>
          <div class="card">
            <div class="section-title">Content Readability &amp; Quality</div>
            <div class="small">Reading ease: {escape(m.readability.label)} (Flesch {m.readability.flesch}) · Words: {m.word_count} · Sentences: {m.sentence_count}</div>
            {quality_details}
            <div class="small">Entities: {entities}</div>
          </div>
        </div>
        <div>
          <div class="card">
            <div class="section-title">Quick checklist</div>
            {checklist}
          </div>
          <div class="card">
            <div class="section-title">Action plan</div>
            {_action_plan_table(_action_items(report))}
          </div>
          <div class="card">
            <div class="section-title">GEO Breakdown</div>
            <div class="small">GEO Score: <strong>{_fmt_score(geo)}</strong></div>
            {breakdown_details}
          </div>
          <div class="card">
            <div class="section-title">Raw JSON report</div>
            {raw_details}
          </div>
        </div>
      </div>
    </div>
    <script>{_SCRIPT}</script>
  </body>
</html>
"""


def summary_lines(report: AuditReport) -> List[str]:
    """Console summary of a finished audit."""
    rubric = report.rubric
    m = report.metrics
    canonical = rubric.check(CheckKey.CANONICAL)
    local = rubric.check(CheckKey.LOCAL_SCHEMA)

    canonical_href = (canonical.detail or {}).get("href") if canonical else None

    lines = [
        "---- GEO Audit Summary ----",
        f"URL: {report.url}",
        f"Scanned at: {report.scanned_at}",
        f"Pages: {len(report.pages)}",
        f"SEO Score (static): {_fmt_score(rubric.summary.score)}",
        f"GEO Score (calc): {_fmt_score(m.local_relevance.score)}",
        "Top checklist:",
        f"- Metadata: {m.metadata_quality}",
        f"- Data Structure & Schema: JSON-LD count = {m.json_ld_count}",
        f"- Robots.txt referenced in page HTML: {'Yes' if m.found_files.robots_txt else 'No'}",
        f"- Canonical: {canonical_href or 'Not found'}",
        f"- Hreflang count: {m.hreflang_count}",
        f"- Local schema (detected): {'Yes' if local and local.ok else 'No'}",
        f"- Images ALT ratio: {round_half_up(m.accessibility.images_alt_ratio * 100)}%",
        f"- Reading ease (Flesch): {m.readability.flesch} ({m.readability.label})",
    ]

    enrichment = report.enrichment
    if enrichment is not None and enrichment.status == EnrichmentStatus.OK:
        lines.append("AI Suggestions:")
        for i, item in enumerate(enrichment.suggestions[:10], start=1):
            lines.append(
                f"{i}. {item.get('key', '')} — {item.get('priority', '')} — "
                f"{item.get('impact', '')} — Effort: {item.get('estimated_effort', '')}"
            )
    elif enrichment is not None and enrichment.status == EnrichmentStatus.FAILED:
        lines.append(f"AI enrichment failed: {enrichment.error}")

    lines.append("---- End ----")
    return lines
