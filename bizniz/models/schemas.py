"""Pydantic models for Biz-Niz Pro core entities."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class AnalysisState(str, Enum):
    """Which asynchronous operation, if any, is in flight."""
    IDLE = "IDLE"
    SEARCHING = "SEARCHING"
    ANALYZING = "ANALYZING"
    GENERATING_IMAGE = "GENERATING_IMAGE"
    GENERATING_VIDEO = "GENERATING_VIDEO"
    ERROR = "ERROR"


class ImageSize(str, Enum):
    """Resolution tiers for the visual brand concept."""
    ONE_K = "1K"
    TWO_K = "2K"
    FOUR_K = "4K"


class AspectRatio(str, Enum):
    """Aspect ratios for the explanation video."""
    LANDSCAPE = "16:9"
    PORTRAIT = "9:16"


class Severity(str, Enum):
    """Pain point severity."""
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


# =============================================================================
# Discovery
# =============================================================================


class GeoPoint(BaseModel):
    """Latitude/longitude used to bias discovery results."""

    model_config = ConfigDict(frozen=True)

    latitude: float = Field(..., ge=-90.0, le=90.0)
    longitude: float = Field(..., ge=-180.0, le=180.0)


class GroundingSource(BaseModel):
    """A citation attached to a discovery result."""

    model_config = ConfigDict(frozen=True)

    title: str = Field("Source", description="Source title")
    uri: str = Field("#", description="Source URI")


class Business(BaseModel):
    """A poorly-rated business found by discovery."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Synthesised identifier, e.g. 'biz-0'")
    name: str = Field(..., min_length=1, description="Business name")
    location: str = Field("", description="Location string as reported by the model")
    rating: float = Field(0.0, description="Current star rating")
    complaints: list[str] = Field(default_factory=list, description="Top complaints, in order")
    sources: list[GroundingSource] = Field(
        default_factory=list, description="Grounding sources shared by the search"
    )


class ExtractedBusiness(BaseModel):
    """One entry of the structured extraction response."""

    name: str = ""
    location: str = ""
    rating: float = 0.0
    complaints: list[str] = Field(default_factory=list)

    @field_validator("rating", mode="before")
    @classmethod
    def _none_rating(cls, value):
        return 0.0 if value is None else value

    @field_validator("complaints", mode="before")
    @classmethod
    def _none_complaints(cls, value):
        return [] if value is None else value


class ExtractedBusinessList(BaseModel):
    """Structured extraction response."""

    businesses: list[ExtractedBusiness] = Field(default_factory=list)

    @field_validator("businesses", mode="before")
    @classmethod
    def _none_businesses(cls, value):
        return [] if value is None else value


class DiscoveryResult(BaseModel):
    """Businesses found by one discovery call."""

    businesses: list[Business] = Field(default_factory=list)
    sources: list[GroundingSource] = Field(default_factory=list)
    raw_text: str = Field("", description="Free text of the grounded response")


# =============================================================================
# Analysis Report
# =============================================================================


class _ReportModel(BaseModel):
    """Accepts both snake_case and camelCase keys from the model output."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompetitorProfile(_ReportModel):
    name: str = ""
    strengths: list[str] = Field(default_factory=list)
    weaknesses: list[str] = Field(default_factory=list)


class PainPoint(_ReportModel):
    area: str = ""
    description: str = ""
    severity: Severity = Severity.MEDIUM

    @field_validator("severity", mode="before")
    @classmethod
    def _normalise_severity(cls, value):
        if isinstance(value, Severity):
            return value
        text = str(value or "").strip().capitalize()
        try:
            return Severity(text)
        except ValueError:
            return Severity.MEDIUM


class ImprovementStep(_ReportModel):
    step: str = ""
    impact: str = ""
    timeline: str = ""


class SentimentScore(_ReportModel):
    category: str = ""
    score: float = Field(0.0, description="Sentiment score, 0-100")

    @field_validator("score", mode="before")
    @classmethod
    def _clamp_score(cls, value):
        try:
            score = float(value)
        except (TypeError, ValueError):
            return 0.0
        return max(0.0, min(100.0, score))


class AnalysisReport(_ReportModel):
    """Strategic turnaround report for one business."""

    summary: str = ""
    recurring_themes: list[str] = Field(default_factory=list)
    competitor_analysis: list[CompetitorProfile] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)
    pain_points: list[PainPoint] = Field(default_factory=list)
    improvement_steps: list[ImprovementStep] = Field(default_factory=list)
    customer_sentiment: list[SentimentScore] = Field(default_factory=list)
    competitor_benchmark: str = ""


# =============================================================================
# Media
# =============================================================================


class GeneratedImage(BaseModel):
    """Inline image returned by the image model."""

    data_uri: str = Field(..., description="data:<mime>;base64,<payload>")
    mime_type: str = "image/png"
    size: ImageSize = ImageSize.ONE_K


class GeneratedVideo(BaseModel):
    """Downloaded video held in the media store."""

    handle: str
    url: str = Field(..., description="Locally addressable playback path")
    mime_type: str = "video/mp4"
    aspect_ratio: AspectRatio = AspectRatio.LANDSCAPE


class MediaPanel(BaseModel):
    """State of one media generation panel in the analysis view."""

    state: AnalysisState = AnalysisState.IDLE
    status: str = Field("", description="Cosmetic status text shown while generating")
    message: Optional[str] = Field(None, description="Short failure message")
    image: Optional[GeneratedImage] = None
    video: Optional[GeneratedVideo] = None

    @property
    def is_busy(self) -> bool:
        return self.state in (AnalysisState.GENERATING_IMAGE, AnalysisState.GENERATING_VIDEO)


class SessionSnapshot(BaseModel):
    """Read-only view of a session for the JSON API and templates."""

    state: AnalysisState
    credentials_granted: bool
    message: Optional[str] = None
    geolocation: Optional[GeoPoint] = None
    businesses: list[Business] = Field(default_factory=list)
    selected_business: Optional[Business] = None
    report: Optional[AnalysisReport] = None
    image_panel: MediaPanel = Field(default_factory=MediaPanel)
    video_panel: MediaPanel = Field(default_factory=MediaPanel)
