"""
HTML signal extraction.

Parses raw HTML once with lxml and pulls out every structural value the
rubric and the heuristic metrics need. Missing elements become None/zero
and malformed JSON-LD blocks become MalformedBlock entries, so extraction
never fails the audit.
"""

import re
import json
from copy import deepcopy
from typing import Optional, List, Dict

from lxml import etree
from lxml import html as lxml_html
from lxml.html import HtmlElement

from .models import DocumentFacts, ImageFacts, ParsedBlock, MalformedBlock

PHONE_RE = re.compile(r"(\+?\d[\d\-\s]{6,}\d)")
COORDS_RE = re.compile(r"(-?\d+\.\d+)\s*,\s*(-?\d+\.\d+)")

_INVISIBLE_TAGS = ("script", "style", "noscript")
_SEMANTIC_XPATH = (
    "//*[self::header or self::nav or self::main or self::footer"
    " or self::article or self::section]"
)
_HEADING_XPATH = "//*[self::h1 or self::h2 or self::h3 or self::h4 or self::h5 or self::h6]"
_ARIA_XPATH = "//*[@aria-label or @role or @aria-labelledby or @aria-describedby]"


def _parse_html(raw_html: str) -> Optional[HtmlElement]:
    """Parse HTML string into an lxml document, returning None on failure."""
    if not raw_html or not raw_html.strip():
        return None
    try:
        return lxml_html.document_fromstring(raw_html)
    except ValueError:
        # str input carrying an XML encoding declaration
        try:
            return lxml_html.document_fromstring(raw_html.encode("utf-8"))
        except (etree.ParserError, ValueError):
            return None
    except etree.ParserError:
        return None


def _first(values: List[str]) -> Optional[str]:
    return values[0] if values else None


def _normalize_ws(text: str) -> str:
    return re.sub(r"\s+", " ", text).strip()


# ─── Individual Extractors ────────────────────────────────────────────


def extract_title(tree: HtmlElement) -> str:
    titles = tree.xpath("//title")
    if not titles:
        return ""
    return (titles[0].text_content() or "").strip()


def extract_description(tree: HtmlElement) -> str:
    return (_first(tree.xpath('//meta[@name="description"]/@content')) or "").strip()


def extract_headings(tree: HtmlElement) -> List[int]:
    """Heading levels in document order."""
    return [int(el.tag.lower()[1]) for el in tree.xpath(_HEADING_XPATH)]


def extract_structured_data(tree: HtmlElement) -> list:
    """
    Parse every JSON-LD script. Blank scripts are skipped; anything that is
    not valid JSON is kept as a MalformedBlock so it still counts as a block.
    """
    blocks = []
    for script in tree.xpath('//script[@type="application/ld+json"]'):
        raw = script.text_content() or ""
        if not raw.strip():
            continue
        try:
            blocks.append(ParsedBlock(value=json.loads(raw)))
        except (json.JSONDecodeError, ValueError):
            blocks.append(MalformedBlock(raw=raw.strip()[:200]))
    return blocks


def extract_images(tree: HtmlElement) -> List[ImageFacts]:
    return [
        ImageFacts(src=img.get("src", "") or img.get("data-src", ""), alt=img.get("alt"))
        for img in tree.xpath("//img")
    ]


def extract_geo_meta(tree: HtmlElement) -> Dict[str, Optional[str]]:
    """Collect geo.* meta tags plus og:locale / og:site_name (by name attribute)."""
    geo_meta: Dict[str, Optional[str]] = {}
    for meta in tree.xpath("//meta"):
        name = (meta.get("name") or "").lower()
        if name.startswith("geo") or name in ("og:locale", "og:site_name"):
            geo_meta[name] = meta.get("content") or None
    return geo_meta


def extract_body_text(tree: HtmlElement) -> str:
    """
    Visible body text with whitespace collapsed. Script, style and noscript
    contents and HTML comments are dropped; their tails are kept. Text nodes
    are concatenated without a separator, so inline markup never splits a word.
    """
    body = tree.find("body")
    if body is None:
        return ""
    body = deepcopy(body)
    etree.strip_elements(body, *_INVISIBLE_TAGS, with_tail=False)
    etree.strip_elements(body, etree.Comment, with_tail=False)
    return _normalize_ws(body.text_content())


def find_phones(text: str) -> List[str]:
    """
    Phone-like runs: an optional '+', at least 8 digits/separators, digit at
    both ends. Dates, prices and order numbers also match.
    """
    return [m.group(0) for m in PHONE_RE.finditer(text)]


def find_coords(text: str) -> List[str]:
    """Decimal 'lat, lng' pairs; any two comma-separated decimals match."""
    return [f"{m.group(1)},{m.group(2)}" for m in COORDS_RE.finditer(text)]


# ─── Main Extraction ──────────────────────────────────────────────────


def extract_facts(raw_html: str) -> DocumentFacts:
    """
    Extract DocumentFacts from raw HTML.

    Args:
        raw_html: The HTML document; may be empty or malformed.

    Returns:
        DocumentFacts. Empty or unparseable input yields the defaults.
    """
    tree = _parse_html(raw_html)
    if tree is None:
        return DocumentFacts()

    html_lower = raw_html.lower()
    body_text = extract_body_text(tree)
    headings = extract_headings(tree)
    paragraphs = [
        text for text in (_normalize_ws(p.text_content() or "") for p in tree.xpath("//p")) if text
    ]

    return DocumentFacts(
        lang=tree.get("lang") or None,
        charset=_first(tree.xpath("//meta/@charset")) or None,
        has_viewport=bool(_first(tree.xpath('//meta[@name="viewport"]/@content'))),
        title=extract_title(tree),
        description=extract_description(tree),
        headings=headings,
        h1_count=headings.count(1),
        h2_count=headings.count(2),
        canonical=_first(tree.xpath('//link[@rel="canonical"]/@href')) or None,
        robots=(_first(tree.xpath('//meta[@name="robots"]/@content')) or "").lower(),
        structured_data=extract_structured_data(tree),
        images=extract_images(tree),
        geo_meta=extract_geo_meta(tree),
        phones=find_phones(body_text),
        coords=find_coords(body_text),
        body_text=body_text,
        paragraphs=paragraphs,
        hreflang_count=len(tree.xpath('//link[@rel="alternate"][@hreflang]')),
        semantic_count=len(tree.xpath(_SEMANTIC_XPATH)),
        aria_present=bool(tree.xpath(_ARIA_XPATH)) or "aria-" in html_lower,
        mentions_llms_txt=bool(re.search(r"llms?\.txt", html_lower)),
        mentions_robots_txt="robots.txt" in html_lower,
        mentions_hreflang=bool(re.search(r'rel\s*=\s*"alternate"\s+hreflang', html_lower)),
    )
