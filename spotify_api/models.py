from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from .errors import ResponseShapeError, TokenExchangeError


def _require_dict(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise ResponseShapeError(f"{what} was not an object: {value!r}")
    return value


def _require_str(payload: Dict[str, Any], key: str, what: str) -> str:
    value = payload.get(key)
    if not isinstance(value, str) or not value:
        raise ResponseShapeError(f"{what} has no '{key}' string: {payload!r}")
    return value


def _require_int(payload: Dict[str, Any], key: str, what: str) -> int:
    value = payload.get(key)
    # bool is an int subclass; reject it explicitly.
    if isinstance(value, bool) or not isinstance(value, int):
        raise ResponseShapeError(f"{what} has no integer '{key}': {payload!r}")
    return value


@dataclass(frozen=True)
class TokenInfo:
    """Access token returned by the authorization-code exchange. Memory only."""

    access_token: str
    token_type: str = "Bearer"
    expires_in: Optional[int] = None
    scope: Optional[str] = None

    @staticmethod
    def from_spotify_token_response(payload: Dict[str, Any]) -> "TokenInfo":
        """Convert Spotify token response JSON into TokenInfo.

        Spotify returns:
        - access_token
        - token_type
        - expires_in (seconds)
        - refresh_token (ignored, tokens are never refreshed)
        - scope (space-delimited string)
        """

        access_token = payload.get("access_token")
        if not isinstance(access_token, str) or not access_token:
            raise TokenExchangeError("access token not found in response")

        expires_in = payload.get("expires_in")
        return TokenInfo(
            access_token=access_token,
            token_type=str(payload.get("token_type") or "Bearer"),
            expires_in=expires_in if isinstance(expires_in, int) and not isinstance(expires_in, bool) else None,
            scope=payload.get("scope") if isinstance(payload.get("scope"), str) else None,
        )

    @property
    def authorization_header(self) -> str:
        # Spotify answers "token_type": "Bearer"; normalize casing for the header.
        token_type = "Bearer" if self.token_type.lower() == "bearer" else self.token_type
        return f"{token_type} {self.access_token}"

    def __repr__(self) -> str:
        return f"TokenInfo(token_type={self.token_type!r}, expires_in={self.expires_in!r}, scope={self.scope!r})"


@dataclass(frozen=True)
class SavedAlbum:
    id: str
    name: str
    artists: Tuple[str, ...] = ()
    added_at: Optional[str] = None

    @staticmethod
    def from_item(item: Any) -> "SavedAlbum":
        """Decode one /me/albums item: {"added_at": ..., "album": {"id", "name", "artists"}}."""

        item = _require_dict(item, "saved album item")
        album = _require_dict(item.get("album"), "saved album item 'album'")

        artists: List[str] = []
        for artist in album.get("artists") or []:
            if isinstance(artist, dict) and isinstance(artist.get("name"), str):
                artists.append(artist["name"])

        added_at = item.get("added_at")
        return SavedAlbum(
            id=_require_str(album, "id", "album"),
            name=_require_str(album, "name", "album"),
            artists=tuple(artists),
            added_at=added_at if isinstance(added_at, str) else None,
        )

    @property
    def display_name(self) -> str:
        if self.artists:
            return f"{', '.join(self.artists)} - {self.name}"
        return self.name


@dataclass(frozen=True)
class SavedAlbumsPage:
    """One page of GET /me/albums: {items, total}."""

    items: Tuple[Dict[str, Any], ...]
    total: int

    @staticmethod
    def from_spotify_response(payload: Any) -> "SavedAlbumsPage":
        payload = _require_dict(payload, "saved albums page")

        items = payload.get("items")
        if not isinstance(items, list):
            raise ResponseShapeError(f"saved albums page has no 'items' array: {payload!r}")
        for item in items:
            _require_dict(item, "saved album item")

        return SavedAlbumsPage(
            items=tuple(items),
            total=_require_int(payload, "total", "saved albums page"),
        )
