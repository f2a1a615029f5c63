import argparse
import dataclasses
import sys
import webbrowser
from typing import Callable, Mapping, Optional, Sequence

import httpx
from dotenv import load_dotenv

from config import Config, ConfigError, load_config
from managers.removal_manager import confirm_and_remove_albums
from spotify_api.auth import SpotifyAuth, generate_state
from spotify_api.client import SpotifyClient
from spotify_api.data_loader import SpotifyDataLoader
from spotify_api.errors import SpotifyError
from utils.logger import log_error, setup_logging

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2
EXIT_INTERRUPTED = 130


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Log in to Spotify and remove every album saved in your library"
    )
    parser.add_argument(
        "--yes",
        action="store_true",
        help="Remove without interactive confirmation",
    )
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Only show what would be removed",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging (same as DEBUG=true)",
    )
    parser.add_argument(
        "--env-file",
        default=None,
        help="Read variables from this .env file (default: search for .env)",
    )
    return parser.parse_args(argv)


def run(
    config: Config,
    *,
    assume_yes: bool = False,
    dry_run: bool = False,
    http_client: Optional[httpx.Client] = None,
    open_browser: Callable[[str], bool] = webbrowser.open,
) -> int:
    """configure -> authorize -> exchange -> fetch -> confirm -> delete. Returns albums removed."""
    owns_client = http_client is None
    if http_client is None:
        http_client = httpx.Client(timeout=config.http_timeout, follow_redirects=False)

    try:
        auth = SpotifyAuth(config, http_client=http_client, open_browser=open_browser)
        state = generate_state()
        code = auth.authorize(state)
        token = auth.exchange_code_for_token(code)

        client = SpotifyClient(token, http_client=http_client)
        items = SpotifyDataLoader(client).load_saved_albums(limit=config.page_size, max_items=config.max_items)

        return confirm_and_remove_albums(
            client,
            items,
            batch_size=config.batch_size,
            assume_yes=assume_yes,
            dry_run=dry_run,
        )
    finally:
        if owns_client:
            http_client.close()


def main(argv: Optional[Sequence[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    args = parse_args(argv)

    if environ is None:
        if args.env_file:
            load_dotenv(args.env_file)
        else:
            load_dotenv()

    try:
        config = load_config(environ)
    except ConfigError as e:
        setup_logging()
        log_error(f"failed to parse environment variables: {e}")
        return EXIT_CONFIG_ERROR

    if args.debug:
        config = dataclasses.replace(config, debug=True)
    setup_logging(config.log_level)

    try:
        run(config, assume_yes=args.yes, dry_run=args.dry_run)
    except SpotifyError as e:
        log_error(str(e))
        return EXIT_FAILURE
    except KeyboardInterrupt:
        log_error("interrupted")
        return EXIT_INTERRUPTED

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
