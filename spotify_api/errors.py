from typing import Optional


class SpotifyError(RuntimeError):
    """Base class for every failure talking to Spotify."""


class AuthorizationError(SpotifyError):
    """The browser authorization step could not produce a code."""


class TokenExchangeError(SpotifyError):
    """The authorization code could not be traded for an access token."""


class SpotifyAPIError(SpotifyError):
    """A Web API request failed at the transport or HTTP level."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ResponseShapeError(SpotifyError):
    """A response body did not have the structure we rely on."""
