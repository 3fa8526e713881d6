"""
Fixed-weight rubric scoring.

Applies the twelve weighted pass/fail checks to DocumentFacts. Weights are
a plain mapping so an alternate rubric can be injected without code
changes; a key missing from the mapping is still evaluated but is worth
zero points.
"""

import math
import re
from typing import Any, Dict, List, Mapping, Optional

from .models import (
    CheckKey,
    CheckResult,
    DocumentFacts,
    Priority,
    RubricReport,
    RubricSummary,
    Suggestion,
)

DEFAULT_WEIGHTS: Dict[str, int] = {
    "lang": 5,
    "charset": 3,
    "viewport": 4,
    "title": 10,
    "description": 10,
    "h1": 6,
    "canonical": 8,
    "robots": 8,
    "json_ld": 12,
    "local_schema": 12,
    "images_alt": 6,
    "geo": 16,
}

# Title passes at 10 chars even though the advice asks for 30-60.
TITLE_MIN_LENGTH = 10
DESCRIPTION_MIN_LENGTH = 20
DESCRIPTION_IDEAL_RANGE = (50, 160)
IMAGES_ALT_MIN_RATIO = 0.8

LOCAL_TYPE_RE = re.compile(r"localbusiness|organization|place", re.IGNORECASE)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def round_ratio(value: float) -> float:
    """Two decimals, half up."""
    return round_half_up(value * 100) / 100


class _Scorecard:
    """Accumulates check results in execution order."""

    def __init__(self, weights: Mapping[str, int]):
        self.weights = weights
        self.report = RubricReport()

    def weight(self, key: CheckKey) -> int:
        return int(self.weights.get(key.value, 0))

    def add(
        self,
        key: CheckKey,
        ok: bool,
        points_if_ok: int,
        detail: Optional[Dict[str, Any]] = None,
        advice: Optional[str] = None,
        priority: Priority = Priority.LOW,
        points_if_failed: int = 0,
    ) -> None:
        max_points = self.weight(key)
        awarded = points_if_ok if ok else points_if_failed
        self.report.checks[key.value] = CheckResult(
            key=key,
            ok=bool(ok),
            points=awarded,
            max_points=max_points,
            detail=detail,
            advice=None if ok else advice,
            priority=priority,
        )
        self.report.total_awarded += awarded
        self.report.total_possible += max_points
        if not ok and advice:
            self.report.suggestions.append(
                Suggestion(key=key.value, priority=priority, advice=advice, detail=detail)
            )

    def finish(self) -> RubricReport:
        report = self.report
        denominator = report.total_possible or 1
        report.summary = RubricSummary(
            score=round_half_up(report.total_awarded / denominator * 10000) / 100,
            total_awarded=report.total_awarded,
            total_possible=report.total_possible,
        )
        report.suggestions = sorted(
            report.suggestions, key=lambda s: s.priority.weight, reverse=True
        )
        return report


# ─── Helpers ──────────────────────────────────────────────────────────


def _present(value: Any) -> bool:
    """Empty objects and arrays count as present; None, "", 0 and False do not."""
    if value is None or value is False or value == "":
        return False
    if isinstance(value, (int, float)) and value == 0:
        return False
    return True


def has_local_schema(blocks: List[Any]) -> bool:
    """
    True when any parsed JSON-LD node is typed LocalBusiness/Organization/
    Place (substring, any case) or carries an address or telephone.
    Only top-level objects and top-level arrays are inspected.
    """
    for block in blocks:
        if not isinstance(block, (dict, list)):
            continue
        nodes = block if isinstance(block, list) else [block]
        for node in nodes:
            if not isinstance(node, dict):
                continue
            node_type = node.get("@type") or node.get("type") or ""
            if isinstance(node_type, str) and LOCAL_TYPE_RE.search(node_type):
                return True
            if _present(node.get("address")) or _present(node.get("telephone")):
                return True
    return False


# ─── Scorer ───────────────────────────────────────────────────────────


def score_document(
    facts: DocumentFacts, weights: Optional[Mapping[str, int]] = None
) -> RubricReport:
    """
    Run the rubric against extracted facts.

    Args:
        facts: DocumentFacts from extract_facts().
        weights: check key -> max points. Defaults to DEFAULT_WEIGHTS.

    Returns:
        RubricReport with checks in fixed order, totals, score and the
        priority-sorted suggestion list.
    """
    card = _Scorecard(DEFAULT_WEIGHTS if weights is None else weights)
    w = card.weight

    card.add(
        CheckKey.LANG, bool(facts.lang), w(CheckKey.LANG),
        {"lang": facts.lang}, 'Add <html lang="..."> (BCP47)', Priority.LOW,
    )
    card.add(
        CheckKey.CHARSET, bool(facts.charset), w(CheckKey.CHARSET),
        {"charset": facts.charset}, 'Add <meta charset="utf-8">', Priority.LOW,
    )
    card.add(
        CheckKey.VIEWPORT, facts.has_viewport, w(CheckKey.VIEWPORT),
        None, "Add viewport meta", Priority.LOW,
    )

    title = facts.title
    card.add(
        CheckKey.TITLE, len(title) >= TITLE_MIN_LENGTH, w(CheckKey.TITLE),
        {"title": title, "length": len(title)}, "Keep title 30-60 chars", Priority.HIGH,
    )

    desc = facts.description
    lo, hi = DESCRIPTION_IDEAL_RANGE
    desc_points = w(CheckKey.DESCRIPTION)
    if not lo <= len(desc) <= hi:
        desc_points = round_half_up(desc_points / 2)
    card.add(
        CheckKey.DESCRIPTION, len(desc) >= DESCRIPTION_MIN_LENGTH, desc_points,
        {"description": desc, "length": len(desc)}, "Meta description 50-160 chars", Priority.HIGH,
    )

    h1_points = w(CheckKey.H1) if facts.h1_count == 1 else round_half_up(w(CheckKey.H1) * 0.5)
    card.add(
        CheckKey.H1, facts.h1_count >= 1, h1_points,
        {"h1_count": facts.h1_count}, "Exactly one H1 preferred", Priority.MEDIUM,
    )

    card.add(
        CheckKey.CANONICAL, bool(facts.canonical), w(CheckKey.CANONICAL),
        {"href": facts.canonical}, "Add canonical link", Priority.HIGH,
    )
    card.add(
        CheckKey.ROBOTS, "noindex" not in facts.robots.lower(), w(CheckKey.ROBOTS),
        {"robots": facts.robots}, "Remove noindex if you want indexing", Priority.HIGH,
    )

    block_count = len(facts.structured_data)
    card.add(
        CheckKey.JSON_LD, block_count > 0, w(CheckKey.JSON_LD),
        {"count": block_count}, "Add JSON-LD structured data", Priority.MEDIUM,
    )
    card.add(
        CheckKey.LOCAL_SCHEMA, has_local_schema(facts.parsed_blocks), w(CheckKey.LOCAL_SCHEMA),
        None, "Add LocalBusiness schema with address/telephone", Priority.HIGH,
    )

    total_images = len(facts.images)
    if total_images == 0:
        card.add(
            CheckKey.IMAGES_ALT, True, w(CheckKey.IMAGES_ALT),
            {"total": 0, "with_alt": 0, "ratio": 1}, None, Priority.LOW,
        )
    else:
        with_alt = sum(1 for img in facts.images if img.has_alt)
        ratio = with_alt / total_images
        # Below the threshold the check fails but keeps a ratio-scaled share.
        card.add(
            CheckKey.IMAGES_ALT, ratio >= IMAGES_ALT_MIN_RATIO, w(CheckKey.IMAGES_ALT),
            {"total": total_images, "with_alt": with_alt, "ratio": round_ratio(ratio)},
            "Add alt attributes for images (aim >=80%)", Priority.MEDIUM,
            points_if_failed=round_half_up(w(CheckKey.IMAGES_ALT) * ratio),
        )

    has_geo = bool(facts.geo_meta or facts.phones or facts.coords)
    card.add(
        CheckKey.GEO, has_geo, w(CheckKey.GEO),
        {
            "geo_meta": dict(facts.geo_meta),
            "phones": facts.phones[:3],
            "coords": facts.coords[:3],
            "phone_count": len(facts.phones),
            "coord_count": len(facts.coords),
        },
        "Add geo meta / phone / coords for local signals", Priority.MEDIUM,
    )

    return card.finish()
