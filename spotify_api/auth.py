import json
import logging
import queue
import secrets
import threading
import urllib.parse
import webbrowser
from contextlib import nullcontext
from dataclasses import dataclass
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Callable, Dict, Optional, Tuple

import httpx

from config import Config
from .errors import AuthorizationError, TokenExchangeError
from .models import TokenInfo

logger = logging.getLogger(__name__)

SPOTIFY_ACCOUNTS_BASE_URL = "https://accounts.spotify.com"

CALLBACK_SUCCESS_MESSAGE = "authorization code received. you can close this window."


def generate_state() -> str:
    """Return 16 random bytes, hex-encoded, for the OAuth state parameter."""

    try:
        return secrets.token_hex(16)
    except (OSError, NotImplementedError) as e:
        raise AuthorizationError(f"failed to generate state: {e}") from e


def extract_code_from_redirect_url(redirect_url: str) -> Dict[str, str]:
    """Parse a redirect URL (or request path) and return {"code", "state", "error"} (missing keys omitted)."""

    parsed = urllib.parse.urlparse(str(redirect_url or "").strip())
    qs = urllib.parse.parse_qs(parsed.query)
    out: Dict[str, str] = {}
    if qs.get("code"):
        out["code"] = str(qs["code"][0])
    if qs.get("state"):
        out["state"] = str(qs["state"][0])
    if qs.get("error"):
        out["error"] = str(qs["error"][0])
    return out


@dataclass(frozen=True)
class CallbackResult:
    code: Optional[str] = None
    error: Optional[str] = None


class _CallbackHTTPServer(HTTPServer):
    def __init__(self, bind_address: Tuple[str, int], *, callback_path: str, expected_state: str):
        super().__init__(bind_address, _OAuthCallbackHandler)
        self.callback_path = callback_path
        self.expected_state = expected_state
        # Single-slot handoff: only the first result reaches the waiting flow.
        self.results: "queue.Queue[CallbackResult]" = queue.Queue(maxsize=1)

    def deliver(self, result: CallbackResult) -> None:
        try:
            self.results.put_nowait(result)
        except queue.Full:
            logger.debug("ignoring extra oauth callback")


class _OAuthCallbackHandler(BaseHTTPRequestHandler):
    server_version = "SpotifyAlbumPurge/1.0"
    server: _CallbackHTTPServer

    def do_GET(self):  # noqa: N802
        parsed = urllib.parse.urlparse(self.path)
        if parsed.path != self.server.callback_path:
            self._respond(404, "not found")
            return

        params = extract_code_from_redirect_url(self.path)
        code = params.get("code")
        error = params.get("error")

        if not code and not error:
            self._respond(401, "authorization failed")
            return

        received_state = params.get("state", "").encode("utf-8")
        if not secrets.compare_digest(received_state, self.server.expected_state.encode("utf-8")):
            logger.warning("oauth callback state mismatch; ignoring request")
            self._respond(400, "state mismatch")
            return

        if error:
            self._respond(401, f"authorization failed: {error}")
            self.server.deliver(CallbackResult(error=error))
            return

        self._respond(200, CALLBACK_SUCCESS_MESSAGE)
        self.server.deliver(CallbackResult(code=code))

    def _respond(self, status: int, message: str) -> None:
        body = message.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/plain; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args) -> None:  # noqa: A002
        logger.debug("callback server: " + format, *args)


class CallbackServer:
    """Local HTTP listener that captures the OAuth redirect on a background thread."""

    def __init__(self, bind_address: Tuple[str, int], *, callback_path: str, expected_state: str):
        host, port = bind_address
        try:
            self._httpd = _CallbackHTTPServer(bind_address, callback_path=callback_path, expected_state=expected_state)
        except OSError as e:
            raise AuthorizationError(f"failed to start callback server on {host}:{port}: {e}") from e
        self._thread: Optional[threading.Thread] = None

    @property
    def server_address(self) -> Tuple[str, int]:
        host, port = self._httpd.server_address[:2]
        return str(host), int(port)

    def start(self) -> None:
        self._thread = threading.Thread(target=self._httpd.serve_forever, name="oauth-callback", daemon=True)
        self._thread.start()

    def wait_for_code(self, timeout: Optional[float]) -> str:
        """Block until the first valid callback arrives and return its code."""

        try:
            result = self._httpd.results.get(timeout=timeout)
        except queue.Empty:
            raise AuthorizationError(f"timed out after {timeout}s waiting for the oauth callback") from None

        if result.error:
            raise AuthorizationError(f"spotify returned an authorization error: {result.error}")
        return str(result.code)

    def close(self) -> None:
        if self._thread is not None:
            self._httpd.shutdown()
            self._thread.join()
            self._thread = None
        self._httpd.server_close()

    def __enter__(self) -> "CallbackServer":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SpotifyAuth:
    """Spotify OAuth (Authorization Code with client secret) helper."""

    def __init__(
        self,
        config: Config,
        *,
        http_client: Optional[httpx.Client] = None,
        open_browser: Callable[[str], bool] = webbrowser.open,
    ):
        self.config = config
        self.http_client = http_client
        self._open_browser = open_browser

    def get_authorize_url(self, state: str) -> str:
        params: Dict[str, str] = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "scope": self.config.scope,
            "redirect_uri": self.config.redirect_uri,
            "state": str(state),
        }
        return f"{SPOTIFY_ACCOUNTS_BASE_URL}/authorize?{urllib.parse.urlencode(params)}"

    def authorize(self, state: str) -> str:
        """Open the consent screen and return the authorization code from the redirect."""

        server = CallbackServer(
            self.config.bind_address,
            callback_path=self.config.callback_path,
            expected_state=state,
        )
        with server:
            host, port = server.server_address
            logger.info("starting local server for oauth callback on %s:%s", host, port)
            server.start()

            auth_url = self.get_authorize_url(state)
            self._launch_browser(auth_url)

            logger.info("waiting for oauth callback")
            code = server.wait_for_code(self.config.callback_timeout)

        logger.info("oauth callback received")
        return code

    def _launch_browser(self, auth_url: str) -> None:
        if not self.config.open_browser:
            logger.info("open this URL to authorize:\n%s", auth_url)
            return

        logger.info("opening browser for spotify authorization")
        logger.debug("authorize url: %s", auth_url)
        try:
            opened = self._open_browser(auth_url)
        except (webbrowser.Error, OSError) as e:
            logger.warning("failed to launch browser: %s", e)
            opened = False

        if not opened:
            logger.warning("could not open a browser; open this URL manually:\n%s", auth_url)

    def exchange_code_for_token(self, code: str) -> TokenInfo:
        payload = self._post_form(
            f"{SPOTIFY_ACCOUNTS_BASE_URL}/api/token",
            {
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.config.redirect_uri,
            },
        )
        token = TokenInfo.from_spotify_token_response(payload)
        logger.debug("access token obtained (scope: %s)", token.scope)
        return token

    def _post_form(self, url: str, form: Dict[str, Any]) -> Dict[str, Any]:
        data = {k: str(v) for k, v in (form or {}).items() if v is not None}

        if self.http_client is not None:
            client_cm = nullcontext(self.http_client)
        else:
            client_cm = httpx.Client(timeout=self.config.http_timeout, follow_redirects=False)

        try:
            with client_cm as client:
                resp = client.post(
                    url,
                    data=data,
                    auth=(self.config.client_id, self.config.client_secret),
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.HTTPError as e:
            raise TokenExchangeError(f"Spotify token request failed: {e}") from e

        if resp.status_code >= 400:
            raise TokenExchangeError(f"Spotify token request failed (HTTP {resp.status_code}): {resp.text}")

        try:
            payload = resp.json()
        except json.JSONDecodeError as e:
            raise TokenExchangeError(f"Spotify token response was not JSON: {resp.text}") from e

        if not isinstance(payload, dict):
            raise TokenExchangeError(f"Spotify token response was not an object: {payload}")

        return payload
