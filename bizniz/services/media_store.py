"""In-memory store for downloaded media.

Finished videos are fetched once from the remote download URI and kept here
so the browser can play them from a local path, ``/media/videos/<handle>``.
Nothing is persisted; entries are discarded when the user leaves the
analysis view.
"""

from dataclasses import dataclass
from typing import Optional
from uuid import uuid4

import structlog

logger = structlog.get_logger(__name__)

VIDEO_URL_PREFIX = "/media/videos"


@dataclass(frozen=True)
class StoredMedia:
    handle: str
    content: bytes
    mime_type: str


class MediaStore:
    """Handle -> bytes mapping."""

    def __init__(self) -> None:
        self._items: dict[str, StoredMedia] = {}

    def put(self, content: bytes, mime_type: str = "video/mp4") -> StoredMedia:
        handle = uuid4().hex
        item = StoredMedia(handle=handle, content=content, mime_type=mime_type)
        self._items[handle] = item
        logger.info("media_stored", handle=handle, size_bytes=len(content), mime_type=mime_type)
        return item

    def get(self, handle: str) -> Optional[StoredMedia]:
        return self._items.get(handle)

    def discard(self, handle: str) -> None:
        if self._items.pop(handle, None) is not None:
            logger.info("media_discarded", handle=handle)

    def __contains__(self, handle: str) -> bool:
        return handle in self._items

    def __len__(self) -> int:
        return len(self._items)


def video_url(handle: str) -> str:
    return f"{VIDEO_URL_PREFIX}/{handle}"
