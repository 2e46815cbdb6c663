"""Presentational helpers for the result cards and the analysis view."""

import math
from urllib.parse import urlsplit

from markupsafe import Markup, escape

from bizniz.models.schemas import SentimentScore, Severity

_STAR_FILLED = "&#9733;"   # ★
_STAR_EMPTY = "&#9734;"    # ☆

SEVERITY_COLOURS = {
    Severity.HIGH: "#dc2626",
    Severity.MEDIUM: "#f59e0b",
    Severity.LOW: "#16a34a",
}

RADAR_RINGS = (25, 50, 75, 100)

_LINK_SCHEMES = ("http", "https")


def format_star_rating(rating: float, mode: str = "html") -> str:
    """Return a star string for a numeric rating, e.g. '★★★☆☆' for 3.2."""
    filled = max(0, min(5, round(rating or 0)))
    if mode == "html":
        return Markup((_STAR_FILLED * filled) + (_STAR_EMPTY * (5 - filled)))
    return ("★" * filled) + ("☆" * (5 - filled))


def severity_colour(severity: Severity) -> str:
    return SEVERITY_COLOURS.get(Severity(severity), SEVERITY_COLOURS[Severity.MEDIUM])


def safe_link(uri: str) -> str:
    """Return ``uri`` if it is an absolute http(s) link, otherwise ``#``."""
    try:
        parts = urlsplit((uri or "").strip())
    except ValueError:
        return "#"
    if parts.scheme.lower() not in _LINK_SCHEMES or not parts.netloc:
        return "#"
    return uri.strip()


def _point(cx: float, cy: float, radius: float, index: int, count: int) -> tuple[float, float]:
    angle = -math.pi / 2 + 2 * math.pi * index / count
    return cx + radius * math.cos(angle), cy + radius * math.sin(angle)


def _polygon(points: list[tuple[float, float]]) -> str:
    return " ".join(f"{x:.1f},{y:.1f}" for x, y in points)


def radar_points(
    sentiment: list[SentimentScore], size: int = 320, padding: int = 60
) -> list[tuple[float, float]]:
    """Vertices of the sentiment polygon, first axis pointing up."""
    count = len(sentiment)
    centre = size / 2
    radius = centre - padding
    return [
        _point(centre, centre, radius * s.score / 100.0, i, count)
        for i, s in enumerate(sentiment)
    ]


def radar_chart_svg(sentiment: list[SentimentScore], size: int = 320, padding: int = 60) -> Markup:
    """Inline SVG radar chart of sentiment scores on a 0-100 scale."""
    count = len(sentiment)
    if count == 0:
        return Markup("")

    centre = size / 2
    radius = centre - padding
    parts = [f'<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 {size} {size}" class="radar">']

    for ring in RADAR_RINGS:
        ring_points = [_point(centre, centre, radius * ring / 100, i, count) for i in range(count)]
        parts.append(
            f'<polygon points="{_polygon(ring_points)}" fill="none" stroke="#e2e8f0" />'
        )

    for i, item in enumerate(sentiment):
        x, y = _point(centre, centre, radius, i, count)
        lx, ly = _point(centre, centre, radius + 18, i, count)
        anchor = "middle" if abs(lx - centre) < 1 else ("start" if lx > centre else "end")
        parts.append(
            f'<line x1="{centre:.1f}" y1="{centre:.1f}" x2="{x:.1f}" y2="{y:.1f}" stroke="#e2e8f0" />'
        )
        parts.append(
            f'<text x="{lx:.1f}" y="{ly:.1f}" text-anchor="{anchor}" font-size="11" '
            f'fill="#64748b">{escape(item.category)}</text>'
        )

    parts.append(
        f'<polygon points="{_polygon(radar_points(sentiment, size, padding))}" '
        'fill="#6366f1" fill-opacity="0.6" stroke="#6366f1" />'
    )
    parts.append("</svg>")
    return Markup("".join(parts))
