"""
Prompt templates and response schemas for the Gemini calls.

Schemas use the OpenAPI subset accepted by ``GenerateContentConfig.response_schema``.
Property names are snake_case so the responses validate directly into
``bizniz.models.schemas``.
"""

from typing import Any

from bizniz.models.schemas import Business


# =============================================================================
# Discovery
# =============================================================================

DISCOVERY_PROMPT = """Find 3 to 5 real businesses in the "{industry}" industry located in "{location}" that currently have poor reviews (ratings generally below 3.8 stars).
Use Google Maps grounding to ensure the locations are real and ratings are up to date.
For each business, include:
1. Business Name
2. Current rating
3. Top 3 specific common complaints."""

EXTRACTION_PROMPT = "Extract businesses from this text: {text}"

BUSINESS_LIST_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "businesses": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "location": {"type": "STRING"},
                    "rating": {"type": "NUMBER"},
                    "complaints": {"type": "ARRAY", "items": {"type": "STRING"}},
                },
                "required": ["name", "location", "rating", "complaints"],
            },
        },
    },
}


# =============================================================================
# Analysis
# =============================================================================

ANALYSIS_PROMPT = """Analyze "{name}" in "{location}". They have a rating of {rating}/5. Issues: {complaints}.
Use Google Search to verify recent negative review themes and top 3 direct competitors.
Provide a deep strategic turnaround plan including concrete recommendations."""

_STRING_LIST = {"type": "ARRAY", "items": {"type": "STRING"}}

REPORT_SCHEMA: dict[str, Any] = {
    "type": "OBJECT",
    "properties": {
        "summary": {"type": "STRING"},
        "recurring_themes": _STRING_LIST,
        "competitor_analysis": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "name": {"type": "STRING"},
                    "strengths": _STRING_LIST,
                    "weaknesses": _STRING_LIST,
                },
            },
        },
        "recommendations": _STRING_LIST,
        "pain_points": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "area": {"type": "STRING"},
                    "description": {"type": "STRING"},
                    "severity": {"type": "STRING", "enum": ["High", "Medium", "Low"]},
                },
            },
        },
        "improvement_steps": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "step": {"type": "STRING"},
                    "impact": {"type": "STRING"},
                    "timeline": {"type": "STRING"},
                },
            },
        },
        "customer_sentiment": {
            "type": "ARRAY",
            "items": {
                "type": "OBJECT",
                "properties": {
                    "category": {"type": "STRING"},
                    "score": {"type": "NUMBER"},
                },
            },
        },
        "competitor_benchmark": {"type": "STRING"},
    },
}


# =============================================================================
# Media
# =============================================================================

IMAGE_PROMPT = (
    'A professional photorealistic rendering of a modern, clean, and highly successful '
    'business storefront for "{name}". The image should showcase high-quality customer '
    "service, a welcoming atmosphere, and premium quality, representing the successful "
    "turnaround of the business based on these improvements: {themes}. Cinematic lighting, "
    "8k resolution, architectural photography style."
)

IMAGE_ASPECT_RATIO = "16:9"

VIDEO_PROMPT = (
    'A high-quality business consultation presentation about "{name}". Showing clean '
    "modern office interiors, satisfied customers, and data charts on screens. Professional "
    "corporate documentary style. The video represents: {summary}"
)


def build_discovery_prompt(industry: str, location: str) -> str:
    return DISCOVERY_PROMPT.format(industry=industry, location=location)


def build_extraction_prompt(text: str) -> str:
    return EXTRACTION_PROMPT.format(text=text)


def build_analysis_prompt(business: Business) -> str:
    return ANALYSIS_PROMPT.format(
        name=business.name,
        location=business.location,
        rating=business.rating,
        complaints=", ".join(business.complaints),
    )


def build_image_prompt(name: str, themes: list[str]) -> str:
    return IMAGE_PROMPT.format(name=name, themes=", ".join(themes))


def build_video_prompt(name: str, summary: str) -> str:
    return VIDEO_PROMPT.format(name=name, summary=summary)
