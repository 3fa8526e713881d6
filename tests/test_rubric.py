"""
Tests for the fixed-weight rubric.

Covers:
- The worked example page and the empty document
- Totals and score rounding
- Partial credit (description length, multiple H1s, image alt ratio)
- Local-business schema detection
- Suggestion ordering and injected weights
"""

import pytest

from geoaudit.extractor import extract_facts
from geoaudit.models import CheckKey, DocumentFacts, ImageFacts, MalformedBlock, ParsedBlock, Priority
from geoaudit.rubric import DEFAULT_WEIGHTS, has_local_schema, round_half_up, round_ratio, score_document


EXAMPLE_PAGE = """<html lang="en"><head><meta charset="utf-8"><title>Home</title></head>
<body><h1>Welcome</h1><img src="a.png" alt="A"><img src="b.png" alt="B"></body></html>"""


def points(report):
    return {key: check.points for key, check in report.checks.items()}


# ---------------------------------------------------------------------------
# Worked examples
# ---------------------------------------------------------------------------


class TestWorkedExamples:

    def test_example_page(self):
        report = score_document(extract_facts(EXAMPLE_PAGE))
        assert points(report) == {
            "lang": 5,
            "charset": 3,
            "viewport": 0,
            "title": 0,
            "description": 0,
            "h1": 6,
            "canonical": 0,
            "robots": 8,
            "json_ld": 0,
            "local_schema": 0,
            "images_alt": 6,
            "geo": 0,
        }
        assert report.total_awarded == 28
        assert report.total_possible == 100
        assert report.summary.score == 28.0

    def test_example_page_with_87_point_rubric(self):
        # Same page against a rubric whose geo weight is 3 instead of 16.
        weights = dict(DEFAULT_WEIGHTS, geo=3)
        report = score_document(extract_facts(EXAMPLE_PAGE), weights)
        assert report.total_possible == 87
        assert report.total_awarded == 28
        assert report.summary.score == 32.18

    def test_empty_document(self):
        report = score_document(extract_facts(""))
        passing = {key for key, check in report.checks.items() if check.ok}
        assert passing == {"robots", "images_alt"}
        assert report.total_awarded == 14
        assert report.summary.score == 14.0

    def test_check_order_is_fixed(self):
        report = score_document(DocumentFacts())
        assert list(report.checks) == list(DEFAULT_WEIGHTS)


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


class TestTotals:

    @pytest.mark.parametrize("html", ["", EXAMPLE_PAGE, "<h1>a</h1><h1>b</h1>"])
    def test_awarded_never_exceeds_possible(self, html):
        report = score_document(extract_facts(html))
        assert 0 <= report.total_awarded <= report.total_possible
        assert report.total_possible == sum(DEFAULT_WEIGHTS.values())
        assert len(report.checks) == 12
        assert all(c.points <= c.max_points for c in report.checks.values())

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2
        assert round_half_up(0) == 0

    def test_round_ratio(self):
        assert round_ratio(0.625) == 0.63
        assert round_ratio(0.125) == 0.13
        assert round_ratio(1 / 3) == 0.33
        assert round_ratio(1) == 1.0

    def test_passing_checks_have_no_advice(self):
        report = score_document(extract_facts(EXAMPLE_PAGE))
        assert report.check(CheckKey.LANG).advice is None
        assert report.check(CheckKey.TITLE).advice == "Keep title 30-60 chars"


# ---------------------------------------------------------------------------
# Partial credit
# ---------------------------------------------------------------------------


class TestPartialCredit:

    @pytest.mark.parametrize(
        "length,ok,expected",
        [(10, False, 5), (30, True, 5), (50, True, 10), (160, True, 10), (200, True, 5)],
    )
    def test_description_length(self, length, ok, expected):
        check = score_document(DocumentFacts(description="x" * length)).check(CheckKey.DESCRIPTION)
        assert check.ok is ok
        assert check.points == (expected if ok else 0)

    def test_multiple_h1_half_credit(self):
        check = score_document(DocumentFacts(h1_count=2)).check(CheckKey.H1)
        assert check.ok is True
        assert check.points == 3

    def test_title_threshold(self):
        assert score_document(DocumentFacts(title="x" * 9)).check(CheckKey.TITLE).ok is False
        assert score_document(DocumentFacts(title="x" * 10)).check(CheckKey.TITLE).points == 10

    def test_zero_images_pass_at_full_weight(self):
        check = score_document(DocumentFacts()).check(CheckKey.IMAGES_ALT)
        assert check.ok is True
        assert check.points == 6
        assert check.advice is None

    def test_low_alt_ratio_scaled(self):
        images = [ImageFacts(src="a", alt="A")] + [ImageFacts(src="b")] * 3
        check = score_document(DocumentFacts(images=images)).check(CheckKey.IMAGES_ALT)
        assert check.ok is False
        assert check.points == 2  # round_half_up(6 * 0.25)
        assert check.detail == {"total": 4, "with_alt": 1, "ratio": 0.25}

    @pytest.mark.parametrize("with_alt,ratio", [(5, 0.63), (1, 0.13), (3, 0.38)])
    def test_alt_ratio_rounds_half_up(self, with_alt, ratio):
        images = [ImageFacts(src="a", alt="A")] * with_alt + [ImageFacts(src="b")] * (8 - with_alt)
        check = score_document(DocumentFacts(images=images)).check(CheckKey.IMAGES_ALT)
        assert check.detail["ratio"] == ratio

    def test_alt_ratio_threshold(self):
        images = [ImageFacts(src="a", alt="A")] * 4 + [ImageFacts(src="b", alt=" ")]
        check = score_document(DocumentFacts(images=images)).check(CheckKey.IMAGES_ALT)
        assert check.ok is True
        assert check.points == 6


# ---------------------------------------------------------------------------
# Robots, structured data and geo
# ---------------------------------------------------------------------------


class TestSignals:

    def test_noindex_fails_robots(self):
        report = score_document(DocumentFacts(robots="noindex, nofollow"))
        check = report.check(CheckKey.ROBOTS)
        assert check.ok is False
        assert check.points == 0
        assert check.priority == Priority.HIGH
        assert "robots" in report.failing_keys

    def test_malformed_block_counts_for_json_ld_only(self):
        facts = DocumentFacts(structured_data=[MalformedBlock(raw="{oops")])
        report = score_document(facts)
        assert report.check(CheckKey.JSON_LD).ok is True
        assert report.check(CheckKey.JSON_LD).detail == {"count": 1}
        assert report.check(CheckKey.LOCAL_SCHEMA).ok is False

    def test_local_schema_from_parsed_block(self):
        facts = DocumentFacts(structured_data=[ParsedBlock(value={"@type": "LocalBusiness"})])
        assert score_document(facts).check(CheckKey.LOCAL_SCHEMA).points == 12

    @pytest.mark.parametrize(
        "block,expected",
        [
            ({"@type": "LocalBusiness"}, True),
            ({"@type": "NGOrganization"}, True),
            ({"type": "place"}, True),
            ({"@type": "Restaurant", "address": {"streetAddress": "1 Main St"}}, True),
            ({"@type": "WebSite", "telephone": "+1 555 0100"}, True),
            ({"@type": "Thing", "address": {}}, True),
            ({"@type": "Thing", "address": []}, True),
            ({"@type": "Thing", "address": "", "telephone": None}, False),
            ({"@type": "Thing", "telephone": 0}, False),
            ({"@type": "Thing", "address": False}, False),
            ([{"@type": "WebPage"}, {"@type": "Place"}], True),
            ({"@type": "WebSite"}, False),
            ({"@type": ["LocalBusiness"]}, False),
            ({"@graph": [{"@type": "LocalBusiness"}]}, False),
            ("LocalBusiness", False),
        ],
    )
    def test_has_local_schema(self, block, expected):
        assert has_local_schema([block]) is expected

    def test_geo_detail(self):
        facts = DocumentFacts(phones=["1", "2", "3", "4"], coords=["1.0,2.0"])
        check = score_document(facts).check(CheckKey.GEO)
        assert check.ok is True
        assert check.detail["phones"] == ["1", "2", "3"]
        assert check.detail["phone_count"] == 4
        assert check.detail["coord_count"] == 1

    def test_geo_meta_alone_passes(self):
        facts = DocumentFacts(geo_meta={"geo.region": "US-IL"})
        assert score_document(facts).check(CheckKey.GEO).ok is True


# ---------------------------------------------------------------------------
# Suggestions and injected weights
# ---------------------------------------------------------------------------


class TestSuggestions:

    def test_priority_sort_is_stable(self):
        report = score_document(DocumentFacts())
        assert report.failing_keys == [
            "title",
            "description",
            "canonical",
            "local_schema",
            "h1",
            "json_ld",
            "geo",
            "lang",
            "charset",
            "viewport",
        ]

    def test_alternate_weights(self):
        report = score_document(DocumentFacts(title="A long enough title"), {"title": 50})
        assert report.total_possible == 50
        assert report.total_awarded == 50
        assert report.summary.score == 100.0
        assert report.check(CheckKey.LANG).max_points == 0
        assert len(report.checks) == 12

    def test_zero_weight_rubric(self):
        report = score_document(DocumentFacts(), {})
        assert report.total_possible == 0
        assert report.summary.total_possible == 0
        assert report.summary.score == 0.0
