"""
Delivery - PDF export and presentational helpers.

- pdf_export: paginated PDF of an analysis (fpdf2)
- charts: sentiment radar chart (inline SVG), star ratings, severity colours, link sanitising
"""

from bizniz.delivery.charts import (
    format_star_rating,
    radar_chart_svg,
    safe_link,
    severity_colour,
)
from bizniz.delivery.pdf_export import build_analysis_pdf, pdf_filename, wrap_text

__all__ = [
    "build_analysis_pdf",
    "format_star_rating",
    "pdf_filename",
    "radar_chart_svg",
    "safe_link",
    "severity_colour",
    "wrap_text",
]
