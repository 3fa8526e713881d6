"""
Heuristic content metrics.

Readability, entity candidates, page hints and the composite local
relevance ("GEO") score. Everything here is a regex or counting heuristic:
the entity pattern picks up any capitalised word run (sentence-initial
common words included) and the syllable counter is English-only.
"""

import re
from typing import List, Tuple

from .models import (
    Accessibility,
    CheckKey,
    ContentQuality,
    DocumentFacts,
    FoundFiles,
    GeoBreakdown,
    GeoScore,
    HeuristicMetrics,
    Readability,
    RubricReport,
)
from .rubric import round_half_up, round_ratio

ENTITY_RE = re.compile(r"\b([A-Z][a-z]{2,}(?:\s[A-Z][a-z]{2,})*)\b")
ENTITY_SCAN_LIMIT = 15
LOCALITY_RE = re.compile(r"city|town|district|avenue|street|road|county|area", re.IGNORECASE)
CAPITALIZED_RE = re.compile(r"[A-Z][a-z]{2,}")
_VOWELS = "aeiouy"

GEO_WEIGHTS = {
    "local_schema": 30,
    "any_schema": 15,
    "address": 15,
    "locality_hint": 6,
    "phone": 15,
    "coords": 10,
    "geo_meta": 5,
    "hreflang": 10,
    "dense_entities": 10,
    "some_entities": 4,
    "combined_signals": 5,
    "single_signal": 2,
}


# ─── Readability ──────────────────────────────────────────────────────


def count_syllables(word: str) -> int:
    """Vowel-group count, minus one for a trailing 'e', at least one."""
    word = re.sub(r"[^a-z]", "", word.lower())
    if not word:
        return 0
    syllables = 0
    prev_vowel = False
    for ch in word:
        is_vowel = ch in _VOWELS
        if is_vowel and not prev_vowel:
            syllables += 1
        prev_vowel = is_vowel
    if word.endswith("e"):
        syllables = max(1, syllables - 1)
    return syllables or 1


def text_counts(text: str) -> Tuple[int, int, int]:
    """(words, sentences, syllables), each floored at 1."""
    sentences = len([s for s in re.split(r"[.!?]+", text) if s.strip()]) or 1
    words = text.split()
    syllables = sum(count_syllables(w) for w in words) or 1
    return len(words) or 1, sentences, syllables


def readability_label(flesch: float) -> str:
    if flesch >= 60:
        return "Easy"
    if flesch >= 50:
        return "Fairly easy"
    if flesch >= 30:
        return "Difficult"
    return "Very difficult"


def flesch_reading_ease(words: int, sentences: int, syllables: int) -> int:
    return round_half_up(206.835 - 1.015 * (words / sentences) - 84.6 * (syllables / words))


# ─── Entities ─────────────────────────────────────────────────────────


def extract_entities(text: str, limit: int = 5) -> List[str]:
    """
    Capitalised word runs from the first ENTITY_SCAN_LIMIT matches,
    deduplicated in first-seen order and capped to `limit`.
    """
    matches = [m.group(0) for m in ENTITY_RE.finditer(text)][:ENTITY_SCAN_LIMIT]
    return list(dict.fromkeys(matches))[:limit]


# ─── Hints ────────────────────────────────────────────────────────────


def heading_issues(levels: List[int]) -> List[str]:
    issues = []
    for last, cur in zip(levels, levels[1:]):
        if cur - last > 1:
            issues.append(f"Skipped heading level (H{last} → H{cur})")
    return issues


def content_quality(paragraphs: List[str]) -> ContentQuality:
    count = len(paragraphs)
    avg = round_half_up(sum(len(p.split()) for p in paragraphs) / count) if count else 0
    if count >= 3 and avg >= 40:
        label = "Well-structured"
    elif count == 0:
        label = "No paragraph content"
    else:
        label = "Could be improved"
    return ContentQuality(paragraph_count=count, avg_words_per_paragraph=avg, label=label)


def ai_training_value(paragraph_count: int, json_ld_count: int, words: int) -> str:
    if paragraph_count >= 5 and json_ld_count > 0 and words > 500:
        return "High"
    if words > 200:
        return "Moderate"
    return "Low"


# ─── GEO Score ────────────────────────────────────────────────────────


def local_relevance(
    facts: DocumentFacts, rubric: RubricReport, entities: List[str]
) -> GeoScore:
    """
    Additive local-relevance score, clamped to 0-100.

    Address presence is inferred from the local-business schema check; no
    address parsing is attempted.
    """
    w = GEO_WEIGHTS
    local_check = rubric.check(CheckKey.LOCAL_SCHEMA)
    local_ok = bool(local_check and local_check.ok)
    json_ld_count = len(facts.structured_data)
    b = GeoBreakdown()

    if local_ok:
        b.schema_score = w["local_schema"]
    elif json_ld_count > 0:
        b.schema_score = w["any_schema"]

    if local_ok:
        b.address_score = w["address"]
    elif any(LOCALITY_RE.search(e) for e in entities):
        b.address_score = w["locality_hint"]

    if facts.phones:
        b.phone_score = w["phone"]
    if facts.coords:
        b.coords_score = w["coords"]
    if facts.geo_meta:
        b.geo_meta_score = w["geo_meta"]
    if facts.hreflang_count > 0:
        b.hreflang_score = w["hreflang"]

    mentions = len([e for e in entities if CAPITALIZED_RE.search(e)])
    if mentions >= 3:
        b.local_density_score = w["dense_entities"]
    elif mentions >= 1:
        b.local_density_score = w["some_entities"]

    signals = sum([facts.mentions_llms_txt, facts.hreflang_count > 0, json_ld_count > 0])
    if signals >= 2:
        b.local_signals_score = w["combined_signals"]
    elif signals == 1:
        b.local_signals_score = w["single_signal"]

    return GeoScore(score=max(0, min(100, round_half_up(b.total))), breakdown=b)


# ─── Main Entry ───────────────────────────────────────────────────────


def compute_metrics(
    facts: DocumentFacts, rubric: RubricReport, entity_limit: int = 5
) -> HeuristicMetrics:
    """
    Compute every heuristic metric for one (possibly concatenated) document.

    Args:
        facts: DocumentFacts from extract_facts().
        rubric: The RubricReport for the same facts; used for the JSON-LD
            count, the local-schema verdict and the crawl score.
        entity_limit: Max entity candidates kept.
    """
    words, sentences, syllables = text_counts(facts.body_text)
    flesch = flesch_reading_ease(words, sentences, syllables)
    entities = extract_entities(facts.body_text, limit=entity_limit)
    quality = content_quality(facts.paragraphs)

    json_ld_check = rubric.check(CheckKey.JSON_LD)
    json_ld_count = (json_ld_check.detail or {}).get("count", 0) if json_ld_check else 0
    local_check = rubric.check(CheckKey.LOCAL_SCHEMA)

    images = facts.images
    alt_ratio = sum(1 for i in images if i.has_alt) / len(images) if images else 1.0

    return HeuristicMetrics(
        readability=Readability(flesch=flesch, label=readability_label(flesch)),
        word_count=words,
        sentence_count=sentences,
        syllable_count=syllables,
        content_quality=quality,
        entities=entities,
        local_relevance=local_relevance(facts, rubric, entities),
        found_files=FoundFiles(
            llms_txt=facts.mentions_llms_txt,
            robots_txt=facts.mentions_robots_txt,
            hreflang=facts.mentions_hreflang,
        ),
        heading_issues=heading_issues(facts.headings),
        metadata_quality=(
            ("Title ✓" if facts.title else "Title ✗")
            + (", Description ✓" if facts.description else ", Description ✗")
        ),
        semantic_count=facts.semantic_count,
        accessibility=Accessibility(
            images_alt_ratio=round_ratio(alt_ratio), aria_present=facts.aria_present
        ),
        json_ld_count=json_ld_count,
        crawl_score=rubric.summary.score,
        ai_training_value=ai_training_value(quality.paragraph_count, json_ld_count, words),
        kg_ready=(
            "Entities are identifiable; JSON-LD present"
            if json_ld_count > 0
            else "Limited - JSON-LD absent"
        ),
        content_completeness=(
            "Main topics covered"
            if quality.paragraph_count >= 3 and facts.h2_count > 0
            else "Some sections lack depth"
        ),
        context_completeness=(
            "Good contextual signals"
            if local_check and local_check.ok
            else "Could include more contextual metadata"
        ),
        hreflang_count=facts.hreflang_count,
    )
