import logging
from typing import Any, Dict, List, Optional

from .client import SpotifyClient

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50


class SpotifyDataLoader:
    """High-level helpers for reading the user's library from Spotify.

    Items are returned exactly as Spotify lists them ({"added_at", "album": {...}})
    so callers can decide how much of the album object they need.
    """

    def __init__(self, client: SpotifyClient):
        self.client = client

    def load_saved_albums(self, *, limit: int = DEFAULT_PAGE_SIZE, max_items: Optional[int] = None) -> List[Dict[str, Any]]:
        """Return every saved album item, in library order.

        Paging stops on an empty page, or once offset + limit reaches the reported total.

        max_items:
          Optional safety cap to stop paging after N items.
        """

        items: List[Dict[str, Any]] = []
        offset = 0
        fetch_number = 0

        while True:
            fetch_number += 1
            logger.debug("fetching saved albums (fetch %d, offset %d, limit %d)", fetch_number, offset, limit)
            page = self.client.current_user_saved_albums(limit=limit, offset=offset)

            if not page.items:
                break

            for item in page.items:
                items.append(item)
                if max_items is not None and len(items) >= int(max_items):
                    break

            if max_items is not None and len(items) >= int(max_items):
                break

            if offset + limit >= page.total:
                break

            offset += limit

        if logger.isEnabledFor(logging.DEBUG):
            for item in items:
                album = item.get("album")
                if isinstance(album, dict):
                    logger.debug("album: %s", album.get("name"))

        logger.info("fetched %d saved albums", len(items))
        return items
