"""
Services - hosted model operations and media storage.

Example:
    from bizniz.services import GeminiService
"""

from bizniz.services.gemini_service import (
    GeminiService,
    extract_grounding_sources,
    is_credential_expired,
)
from bizniz.services.media_store import MediaStore, StoredMedia

__all__ = [
    "GeminiService",
    "MediaStore",
    "StoredMedia",
    "extract_grounding_sources",
    "is_credential_expired",
]
