import logging
import os
import urllib.parse
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

ENV_PREFIX = "SPOTIFY_"

# Default configuration values
DEFAULT_CONFIG = {
    "debug": False,
    "client_id": "",
    "client_secret": "",
    "local_server": "127.0.0.1:4001",
    "redirect_uri": "http://127.0.0.1:4001/callback",
    "scope": "user-library-read user-library-modify",

    # Paging / batching
    "page_size": 50,
    "batch_size": 20,

    # Timeouts (seconds)
    "callback_timeout": 300,
    "http_timeout": 30.0,

    "open_browser": True,

    # Optional cap on how many saved albums are fetched (None = all)
    "max_items": None,
}

# Validation rules for config fields
CONFIG_SCHEMA = {
    "debug": {"env": "DEBUG", "type": bool, "required": False},
    "client_id": {"env": "CLIENT_ID", "type": str, "required": True},
    "client_secret": {"env": "CLIENT_SECRET", "type": str, "required": True},
    "local_server": {"env": "LOCAL_SERVER", "type": str, "required": False},
    "redirect_uri": {"env": "REDIRECT_URI", "type": str, "required": False},
    "scope": {"env": "SCOPE", "type": str, "required": False},
    "page_size": {"env": "PAGE_SIZE", "type": int, "required": False, "min": 1, "max": 50},
    "batch_size": {"env": "BATCH_SIZE", "type": int, "required": False, "min": 1, "max": 20},
    "callback_timeout": {"env": "CALLBACK_TIMEOUT", "type": int, "required": False, "min": 1, "max": 3600},
    "http_timeout": {"env": "HTTP_TIMEOUT", "type": float, "required": False, "min": 1.0, "max": 300.0},
    "open_browser": {"env": "OPEN_BROWSER", "type": bool, "required": False},
    "max_items": {"env": "MAX_ITEMS", "type": int, "required": False, "min": 1},
}

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(ValueError):
    """Raised when the environment does not describe a usable configuration."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        super().__init__("invalid configuration: " + "; ".join(self.errors))


@dataclass(frozen=True)
class Config:
    client_id: str
    client_secret: str
    local_server: str = DEFAULT_CONFIG["local_server"]
    redirect_uri: str = DEFAULT_CONFIG["redirect_uri"]
    scope: str = DEFAULT_CONFIG["scope"]
    debug: bool = False
    page_size: int = DEFAULT_CONFIG["page_size"]
    batch_size: int = DEFAULT_CONFIG["batch_size"]
    callback_timeout: int = DEFAULT_CONFIG["callback_timeout"]
    http_timeout: float = DEFAULT_CONFIG["http_timeout"]
    open_browser: bool = True
    max_items: Optional[int] = None

    @property
    def log_level(self) -> int:
        return logging.DEBUG if self.debug else logging.INFO

    @property
    def bind_address(self) -> Tuple[str, int]:
        return parse_bind_address(self.local_server)

    @property
    def callback_path(self) -> str:
        return urllib.parse.urlparse(self.redirect_uri).path or "/callback"


def parse_bind_address(value: str) -> Tuple[str, int]:
    """Split "host:port" into (host, port)."""
    host, sep, port = str(value or "").strip().rpartition(":")
    if not sep or not host:
        raise ValueError(f"expected host:port, got '{value}'")
    try:
        port_num = int(port)
    except ValueError:
        raise ValueError(f"port must be an integer, got '{port}'") from None
    if not 0 <= port_num <= 65535:
        raise ValueError(f"port must be between 0 and 65535, got {port_num}")
    return host, port_num


def _coerce(raw: str, expected_type: type) -> Any:
    text = raw.strip()
    if expected_type is bool:
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ValueError(f"expected a boolean, got '{raw}'")
    if expected_type is int:
        return int(text)
    if expected_type is float:
        return float(text)
    return text


def _lookup(environ: Mapping[str, str], name: str) -> Optional[str]:
    """Return NAME, falling back to SPOTIFY_NAME; empty values count as unset."""
    for key in (name, ENV_PREFIX + name):
        value = environ.get(key)
        if value is not None and value.strip():
            return value
    return None


def validate_config(values: Dict[str, Any]) -> tuple[bool, list[str]]:
    """
    Validate configuration values against schema.
    Returns (is_valid, list_of_errors).
    """
    errors = []

    for key, rules in CONFIG_SCHEMA.items():
        value = values.get(key)

        if rules.get("required", False) and (value is None or value == ""):
            errors.append(f"Missing required variable: {rules['env']}")
            continue

        if value is None:
            continue

        expected_type = rules.get("type")
        if expected_type and not isinstance(value, expected_type):
            errors.append(f"{rules['env']} must be {expected_type.__name__}, got {type(value).__name__}")
            continue

        # Range check for numeric values
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            if "min" in rules and value < rules["min"]:
                errors.append(f"{rules['env']} must be >= {rules['min']}, got {value}")
            if "max" in rules and value > rules["max"]:
                errors.append(f"{rules['env']} must be <= {rules['max']}, got {value}")

    local_server = values.get("local_server")
    if isinstance(local_server, str):
        try:
            parse_bind_address(local_server)
        except ValueError as e:
            errors.append(f"LOCAL_SERVER: {e}")

    redirect_uri = values.get("redirect_uri")
    if isinstance(redirect_uri, str):
        parsed = urllib.parse.urlparse(redirect_uri)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            errors.append(f"REDIRECT_URI must be an absolute http(s) URL, got '{redirect_uri}'")

    return len(errors) == 0, errors


def load_config(environ: Optional[Mapping[str, str]] = None) -> Config:
    """Build a Config from environment variables, applying defaults for missing fields.

    Raises ConfigError listing every problem found.
    """
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = dict(DEFAULT_CONFIG)
    errors: List[str] = []

    for key, rules in CONFIG_SCHEMA.items():
        raw = _lookup(environ, rules["env"])
        if raw is None:
            continue
        try:
            values[key] = _coerce(raw, rules["type"])
        except ValueError as e:
            errors.append(f"{rules['env']}: {e}")
            values[key] = None

    _, validation_errors = validate_config(values)
    errors.extend(validation_errors)
    if errors:
        raise ConfigError(errors)

    return Config(**values)
