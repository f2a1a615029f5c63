"""Spotify Web API integration (Authorization Code flow, saved-albums library)."""

from .auth import CallbackServer, SpotifyAuth, generate_state
from .client import SpotifyClient
from .data_loader import SpotifyDataLoader
from .errors import (
    AuthorizationError,
    ResponseShapeError,
    SpotifyAPIError,
    SpotifyError,
    TokenExchangeError,
)
from .models import SavedAlbum, SavedAlbumsPage, TokenInfo

__all__ = [
    "AuthorizationError",
    "CallbackServer",
    "ResponseShapeError",
    "SavedAlbum",
    "SavedAlbumsPage",
    "SpotifyAPIError",
    "SpotifyAuth",
    "SpotifyClient",
    "SpotifyDataLoader",
    "SpotifyError",
    "TokenExchangeError",
    "TokenInfo",
    "generate_state",
]
