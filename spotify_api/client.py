import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from .errors import SpotifyAPIError
from .models import SavedAlbumsPage, TokenInfo

logger = logging.getLogger(__name__)

SPOTIFY_API_BASE_URL = "https://api.spotify.com/v1"


class SpotifyClient:
    """Thin Spotify Web API client for the saved-albums library.

    Every request is bearer-authenticated with a single in-memory token.
    There is no retry, refresh, or rate-limit handling: any failure raises
    SpotifyAPIError (or ResponseShapeError for malformed bodies).
    """

    def __init__(
        self,
        token: TokenInfo,
        *,
        http_client: httpx.Client,
        base_url: str = SPOTIFY_API_BASE_URL,
    ):
        self.token = token
        self.base_url = base_url.rstrip("/")
        self.http_client = http_client

    # -----------------
    # HTTP helpers
    # -----------------

    def request(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None) -> httpx.Response:
        """Send one request and return the response, raising on transport errors or non-2xx status."""

        url = f"{self.base_url}{path}"
        query = {k: str(v) for k, v in (params or {}).items() if v is not None}
        logger.debug("%s %s %s", method.upper(), path, query)

        try:
            resp = self.http_client.request(
                method.upper(),
                url,
                params=query,
                headers={
                    "Authorization": self.token.authorization_header,
                    "Accept": "application/json",
                },
            )
        except httpx.HTTPError as e:
            raise SpotifyAPIError(f"Spotify API request failed ({method.upper()} {path}): {e}") from e

        if not resp.is_success:
            raise SpotifyAPIError(
                f"Spotify API error {resp.status_code} ({method.upper()} {path}): {resp.text}",
                status_code=resp.status_code,
            )

        return resp

    def request_json(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None) -> Any:
        """Make a Spotify Web API request and return parsed JSON ({} for an empty body)."""

        resp = self.request(method, path, params=params)
        if not resp.content:
            return {}

        try:
            return resp.json()
        except json.JSONDecodeError as e:
            raise SpotifyAPIError(
                f"Spotify API response was not JSON (status {resp.status_code}): {resp.text}",
                status_code=resp.status_code,
            ) from e

    # -----------------
    # Saved albums
    # -----------------

    def current_user_saved_albums(self, *, limit: int = 50, offset: int = 0) -> SavedAlbumsPage:
        payload = self.request_json("GET", "/me/albums", params={"limit": limit, "offset": offset})
        return SavedAlbumsPage.from_spotify_response(payload)

    def remove_saved_albums(self, ids: List[str]) -> None:
        """Remove up to one batch of albums from the user's library."""

        ids = [str(i).strip() for i in (ids or []) if str(i).strip()]
        if not ids:
            return
        self.request("DELETE", "/me/albums", params={"ids": ",".join(ids)})
