"""
Tests for the heuristic content metrics.

Covers:
- Syllable counting, text counts and Flesch reading ease
- Entity candidates
- Heading, content-quality and training-value hints
- The local relevance (GEO) score and its breakdown
"""

import pytest

from geoaudit.extractor import extract_facts
from geoaudit.heuristics import (
    ai_training_value,
    compute_metrics,
    content_quality,
    count_syllables,
    extract_entities,
    flesch_reading_ease,
    heading_issues,
    local_relevance,
    readability_label,
    text_counts,
)
from geoaudit.models import DocumentFacts, ParsedBlock
from geoaudit.rubric import score_document


LOCAL_PAGE = """<html lang="en"><head>
<meta name="geo.region" content="US-IL">
<link rel="alternate" hreflang="es" href="/es/">
<script type="application/ld+json">{"@type": "LocalBusiness", "address": "1 Main St"}</script>
</head><body>
<h1>Springfield Bakery</h1>
<p>Springfield Bakery sits on Main Street in Springfield. Call +1 217 555 0100.</p>
<p>Find us at 39.7817, -89.6501. Our llms.txt lists everything.</p>
</body></html>"""


def metrics_for(html):
    facts = extract_facts(html)
    return compute_metrics(facts, score_document(facts))


# ---------------------------------------------------------------------------
# Readability
# ---------------------------------------------------------------------------


class TestReadability:

    @pytest.mark.parametrize(
        "word,expected",
        [("cat", 1), ("the", 1), ("table", 1), ("beautiful", 3), ("rhythm", 1), ("123", 0), ("", 0)],
    )
    def test_count_syllables(self, word, expected):
        assert count_syllables(word) == expected

    def test_text_counts(self):
        assert text_counts("The cat sat. The dog ran!") == (6, 2, 6)

    def test_text_counts_floor_at_one(self):
        assert text_counts("") == (1, 1, 1)

    def test_flesch_for_empty_text(self):
        assert flesch_reading_ease(1, 1, 1) == 121

    def test_labels(self):
        assert readability_label(60) == "Easy"
        assert readability_label(59.9) == "Fairly easy"
        assert readability_label(50) == "Fairly easy"
        assert readability_label(30) == "Difficult"
        assert readability_label(29) == "Very difficult"

    def test_labels_are_monotonic(self):
        order = ["Very difficult", "Difficult", "Fairly easy", "Easy"]
        ranks = [order.index(readability_label(score)) for score in range(-100, 200)]
        assert ranks == sorted(ranks)

    def test_empty_document_degrades(self):
        m = metrics_for("")
        assert m.word_count == 1
        assert m.sentence_count == 1
        assert m.readability.flesch == 121
        assert m.readability.label == "Easy"
        assert m.entities == []


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------


class TestEntities:

    def test_capitalized_runs_in_order(self):
        assert extract_entities("Paris is beautiful. New York is busy.") == ["Paris", "New York"]

    def test_deduplicated(self):
        assert extract_entities("Paris and Paris and Rome") == ["Paris", "Rome"]

    def test_limit(self):
        text = "Alpha, Bravo, Charlie, Delta, Echo, Foxtrot, Golf"
        assert extract_entities(text) == ["Alpha", "Bravo", "Charlie", "Delta", "Echo"]
        assert len(extract_entities(text, limit=10)) == 7

    def test_short_words_ignored(self):
        assert extract_entities("We go to NY and LA") == []

    def test_inline_markup_keeps_entity_whole(self):
        m = metrics_for("<html><body><p>Spring<b>field</b> Bakery is open.</p></body></html>")
        assert m.entities == ["Springfield Bakery"]
        assert m.word_count == 4

    def test_sentence_initial_words_match(self):
        assert extract_entities("The shop is open.") == ["The"]


# ---------------------------------------------------------------------------
# Hints
# ---------------------------------------------------------------------------


class TestHints:

    def test_heading_issues(self):
        assert heading_issues([1, 3, 2, 4]) == [
            "Skipped heading level (H1 → H3)",
            "Skipped heading level (H2 → H4)",
        ]
        assert heading_issues([1, 2, 3, 2, 1]) == []
        assert heading_issues([]) == []

    def test_content_quality(self):
        assert content_quality([]).label == "No paragraph content"
        short = content_quality(["one two three"])
        assert (short.paragraph_count, short.avg_words_per_paragraph) == (1, 3)
        assert short.label == "Could be improved"
        long_para = " ".join(["word"] * 40)
        assert content_quality([long_para] * 3).label == "Well-structured"

    def test_ai_training_value(self):
        assert ai_training_value(5, 1, 501) == "High"
        assert ai_training_value(5, 0, 501) == "Moderate"
        assert ai_training_value(1, 1, 201) == "Moderate"
        assert ai_training_value(1, 1, 200) == "Low"

    def test_metadata_quality(self):
        assert metrics_for("<title>Hello</title>").metadata_quality == "Title ✓, Description ✗"

    def test_accessibility(self):
        m = metrics_for('<img src="a" alt="A"><img src="b"><img src="c">')
        assert m.accessibility.images_alt_ratio == 0.33

    def test_accessibility_ratio_rounds_half_up(self):
        images = '<img src="a" alt="A">' * 5 + '<img src="b">' * 3
        assert metrics_for(images).accessibility.images_alt_ratio == 0.63
        assert metrics_for("").accessibility.images_alt_ratio == 1.0

    def test_crawl_score_is_rubric_score(self):
        facts = extract_facts(LOCAL_PAGE)
        rubric = score_document(facts)
        assert compute_metrics(facts, rubric).crawl_score == rubric.summary.score


# ---------------------------------------------------------------------------
# GEO score
# ---------------------------------------------------------------------------


class TestLocalRelevance:

    def test_local_page_breakdown(self):
        b = metrics_for(LOCAL_PAGE).local_relevance.breakdown
        assert b.schema_score == 30
        assert b.address_score == 15
        assert b.phone_score == 15
        assert b.coords_score == 10
        assert b.geo_meta_score == 5
        assert b.hreflang_score == 10
        assert b.local_density_score == 10
        # llms.txt mention, hreflang and JSON-LD
        assert b.local_signals_score == 5

    def test_score_is_sum_clamped(self):
        geo = metrics_for(LOCAL_PAGE).local_relevance
        assert geo.score == min(100, geo.breakdown.total)
        assert 0 <= geo.score <= 100

    def test_empty_document_scores_zero(self):
        geo = metrics_for("").local_relevance
        assert geo.score == 0
        assert geo.breakdown.total == 0

    def test_non_local_schema(self):
        facts = DocumentFacts(structured_data=[ParsedBlock(value={"@type": "WebSite"})])
        geo = local_relevance(facts, score_document(facts), [])
        assert geo.breakdown.schema_score == 15
        assert geo.breakdown.address_score == 0
        assert geo.breakdown.local_signals_score == 2

    def test_locality_hint_from_entities(self):
        facts = DocumentFacts()
        geo = local_relevance(facts, score_document(facts), ["Baker Street"])
        assert geo.breakdown.address_score == 6
        assert geo.breakdown.local_density_score == 4

    @pytest.mark.parametrize(
        "html",
        ["", LOCAL_PAGE, LOCAL_PAGE * 3, "<p>Alpha Beta Gamma Delta Epsilon</p>"],
    )
    def test_always_in_range(self, html):
        score = metrics_for(html).local_relevance.score
        assert isinstance(score, int)
        assert 0 <= score <= 100
