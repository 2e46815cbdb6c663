"""
Data models for Biz-Niz Pro.

Example:
    from bizniz.models import Business, AnalysisReport, AnalysisState
"""

from bizniz.models.schemas import (
    AnalysisReport,
    AnalysisState,
    AspectRatio,
    Business,
    CompetitorProfile,
    DiscoveryResult,
    ExtractedBusiness,
    ExtractedBusinessList,
    GeneratedImage,
    GeneratedVideo,
    GeoPoint,
    GroundingSource,
    ImageSize,
    ImprovementStep,
    MediaPanel,
    PainPoint,
    SentimentScore,
    SessionSnapshot,
    Severity,
)

__all__ = [
    "AnalysisReport",
    "AnalysisState",
    "AspectRatio",
    "Business",
    "CompetitorProfile",
    "DiscoveryResult",
    "ExtractedBusiness",
    "ExtractedBusinessList",
    "GeneratedImage",
    "GeneratedVideo",
    "GeoPoint",
    "GroundingSource",
    "ImageSize",
    "ImprovementStep",
    "MediaPanel",
    "PainPoint",
    "SentimentScore",
    "SessionSnapshot",
    "Severity",
]
