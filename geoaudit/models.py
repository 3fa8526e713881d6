"""
GEO audit data models.

Pydantic models for everything the audit pipeline produces: the facts
extracted from one HTML document, the rubric results, the heuristic
metrics and the final report that gets serialized to disk.
"""

from pydantic import BaseModel, Field
from typing import Annotated, List, Dict, Literal, Optional, Any, Union
from enum import Enum


class Priority(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        return {"high": 3, "medium": 2, "low": 1}[self.value]


class CheckKey(str, Enum):
    LANG = "lang"
    CHARSET = "charset"
    VIEWPORT = "viewport"
    TITLE = "title"
    DESCRIPTION = "description"
    H1 = "h1"
    CANONICAL = "canonical"
    ROBOTS = "robots"
    JSON_LD = "json_ld"
    LOCAL_SCHEMA = "local_schema"
    IMAGES_ALT = "images_alt"
    GEO = "geo"


# ─── Document Facts ───────────────────────────────────────────────────


class ParsedBlock(BaseModel):
    kind: Literal["parsed"] = "parsed"
    value: Any = None


class MalformedBlock(BaseModel):
    kind: Literal["malformed"] = "malformed"
    raw: str = ""


StructuredDataBlock = Annotated[
    Union[ParsedBlock, MalformedBlock], Field(discriminator="kind")
]


class ImageFacts(BaseModel):
    src: str = ""
    alt: Optional[str] = None

    @property
    def has_alt(self) -> bool:
        return bool((self.alt or "").strip())


class DocumentFacts(BaseModel):
    """Structural values pulled out of one HTML document. Never mutated."""

    model_config = {"frozen": True}

    lang: Optional[str] = None
    charset: Optional[str] = None
    has_viewport: bool = False
    title: str = ""
    description: str = ""
    headings: List[int] = Field(default_factory=list)
    h1_count: int = 0
    h2_count: int = 0
    canonical: Optional[str] = None
    robots: str = ""
    structured_data: List[StructuredDataBlock] = Field(default_factory=list)
    images: List[ImageFacts] = Field(default_factory=list)
    geo_meta: Dict[str, Optional[str]] = Field(default_factory=dict)
    phones: List[str] = Field(default_factory=list)
    coords: List[str] = Field(default_factory=list)
    body_text: str = ""

    # Page-level hints
    paragraphs: List[str] = Field(default_factory=list)
    hreflang_count: int = 0
    semantic_count: int = 0
    aria_present: bool = False
    mentions_llms_txt: bool = False
    mentions_robots_txt: bool = False
    mentions_hreflang: bool = False

    @property
    def parsed_blocks(self) -> List[Any]:
        return [b.value for b in self.structured_data if isinstance(b, ParsedBlock)]


# ─── Rubric ───────────────────────────────────────────────────────────


class CheckResult(BaseModel):
    key: CheckKey
    ok: bool = False
    points: int = 0
    max_points: int = 0
    detail: Optional[Dict[str, Any]] = None
    advice: Optional[str] = None
    priority: Priority = Priority.LOW


class Suggestion(BaseModel):
    key: str
    priority: Priority = Priority.LOW
    advice: str = ""
    detail: Optional[Dict[str, Any]] = None


class RubricSummary(BaseModel):
    score: float = 0.0  # 0-100, two decimals
    total_awarded: int = 0
    total_possible: int = 0


class RubricReport(BaseModel):
    checks: Dict[str, CheckResult] = Field(default_factory=dict)
    total_awarded: int = 0
    total_possible: int = 0
    summary: RubricSummary = Field(default_factory=RubricSummary)
    suggestions: List[Suggestion] = Field(default_factory=list)

    def check(self, key: CheckKey) -> Optional[CheckResult]:
        return self.checks.get(key.value)

    @property
    def failing_keys(self) -> List[str]:
        return [s.key for s in self.suggestions]


# ─── Heuristic Metrics ────────────────────────────────────────────────


class Readability(BaseModel):
    flesch: int = 0
    label: str = ""


class ContentQuality(BaseModel):
    paragraph_count: int = 0
    avg_words_per_paragraph: int = 0
    label: str = ""


class FoundFiles(BaseModel):
    llms_txt: bool = False
    robots_txt: bool = False
    hreflang: bool = False


class Accessibility(BaseModel):
    images_alt_ratio: float = 1.0
    aria_present: bool = False


class GeoBreakdown(BaseModel):
    schema_score: int = 0
    address_score: int = 0
    phone_score: int = 0
    coords_score: int = 0
    geo_meta_score: int = 0
    hreflang_score: int = 0
    local_density_score: int = 0
    local_signals_score: int = 0

    @property
    def total(self) -> int:
        return sum(self.model_dump().values())


class GeoScore(BaseModel):
    score: int = 0  # 0-100
    breakdown: GeoBreakdown = Field(default_factory=GeoBreakdown)


class HeuristicMetrics(BaseModel):
    readability: Readability = Field(default_factory=Readability)
    word_count: int = 1
    sentence_count: int = 1
    syllable_count: int = 1
    content_quality: ContentQuality = Field(default_factory=ContentQuality)
    entities: List[str] = Field(default_factory=list)
    local_relevance: GeoScore = Field(default_factory=GeoScore)

    found_files: FoundFiles = Field(default_factory=FoundFiles)
    heading_issues: List[str] = Field(default_factory=list)
    metadata_quality: str = ""
    semantic_count: int = 0
    accessibility: Accessibility = Field(default_factory=Accessibility)
    json_ld_count: int = 0
    crawl_score: Optional[float] = None
    ai_training_value: str = "Low"
    kg_ready: str = ""
    content_completeness: str = ""
    context_completeness: str = ""
    hreflang_count: int = 0


# ─── Audit Report ─────────────────────────────────────────────────────


class EnrichmentStatus(str, Enum):
    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"


class Enrichment(BaseModel):
    status: EnrichmentStatus = EnrichmentStatus.SKIPPED
    payload: Optional[Dict[str, Any]] = None
    error: Optional[str] = None

    @property
    def suggestions(self) -> List[Dict[str, Any]]:
        """Suggestion objects from the payload, ignoring anything malformed."""
        if self.status != EnrichmentStatus.OK or not self.payload:
            return []
        items = self.payload.get("ai_suggestions")
        if not isinstance(items, list):
            return []
        return [s for s in items if isinstance(s, dict)]

    def number(self, field: str) -> Optional[float]:
        if self.status != EnrichmentStatus.OK or not self.payload:
            return None
        value = self.payload.get(field)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return None
        return value


class IssueCount(BaseModel):
    key: str
    count: int = 0


class AuditReport(BaseModel):
    url: str
    scanned_at: str
    pages: List[str] = Field(default_factory=list)
    rubric: RubricReport = Field(default_factory=RubricReport)
    metrics: HeuristicMetrics = Field(default_factory=HeuristicMetrics)
    enrichment: Optional[Enrichment] = None
    top_issues: List[IssueCount] = Field(default_factory=list)

    @property
    def seo_score(self) -> float:
        if self.enrichment is not None:
            value = self.enrichment.number("seo_score")
            if value is not None:
                return value
        return self.rubric.summary.score

    @property
    def geo_score(self) -> float:
        if self.enrichment is not None:
            value = self.enrichment.number("geo_score")
            if value is not None:
                return value
        return self.metrics.local_relevance.score
