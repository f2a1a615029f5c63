from typing import Any, Dict, Iterator, List, Sequence

import questionary
from tqdm import tqdm

from spotify_api.client import SpotifyClient
from spotify_api.models import SavedAlbum
from utils.logger import log_debug, log_info, log_success, log_warning

DEFAULT_BATCH_SIZE = 20


def chunked(ids: Sequence[str], size: int) -> Iterator[List[str]]:
    """Yield consecutive slices of at most `size` ids."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    for start in range(0, len(ids), size):
        yield list(ids[start : start + size])


def get_removal_preview(items: Sequence[Dict[str, Any]]) -> dict:
    """
    Decode saved album items into what would be removed.

    Raises ResponseShapeError if any item lacks album.id / album.name.
    Returns dict with albums, ids, names and count.
    """
    albums = [SavedAlbum.from_item(item) for item in items]
    return {
        "albums": albums,
        "ids": [album.id for album in albums],
        "names": [album.display_name for album in albums],
        "count": len(albums),
    }


def ask_confirmation(count: int) -> bool:
    """Ask a yes/no question; an aborted prompt (Ctrl+C) counts as No."""
    answer = questionary.confirm(
        f"Remove all {count} saved album(s) from your Spotify library? This cannot be undone.",
        default=False,
    ).ask()
    confirmed = bool(answer)

    if confirmed:
        questionary.print("You answered: Yes", style="fg:ansigreen bold")
    else:
        questionary.print("You answered: No", style="fg:ansired bold")
    return confirmed


def remove_albums_in_batches(client: SpotifyClient, album_ids: Sequence[str], *, batch_size: int = DEFAULT_BATCH_SIZE) -> int:
    """
    Issue one DELETE per batch of ids, in order.

    The first failing batch raises SpotifyAPIError; later batches are not attempted.
    Returns the number of albums removed.
    """
    total = len(album_ids)
    removed = 0

    with tqdm(total=total, desc="Removing albums", unit="album") as pbar:
        for batch_number, batch in enumerate(chunked(album_ids, batch_size), start=1):
            offset = removed
            client.remove_saved_albums(batch)
            removed += len(batch)

            pbar.set_description(f"Removing albums {removed}/{total}")
            pbar.update(len(batch))
            log_debug(f"removed batch {batch_number} (offset {offset}, {len(batch)} albums)")

    return removed


def confirm_and_remove_albums(
    client: SpotifyClient,
    items: Sequence[Dict[str, Any]],
    *,
    batch_size: int = DEFAULT_BATCH_SIZE,
    assume_yes: bool = False,
    dry_run: bool = False,
) -> int:
    """
    Show the saved albums, ask for confirmation, then remove them in batches.

    Returns the number of albums removed (0 when there is nothing to do,
    the user declines, or dry_run is set).
    """
    if not items:
        log_info("no saved albums found; nothing to remove")
        return 0

    preview = get_removal_preview(items)

    log_info(f"Found {preview['count']} saved album(s):")
    for name in preview["names"]:
        log_info(f"  - {name}")

    if dry_run:
        log_info("dry run: no albums were removed")
        return 0

    if assume_yes:
        log_warning("skipping confirmation (assume yes)")
    elif not ask_confirmation(preview["count"]):
        log_info("operation cancelled by user")
        return 0

    removed = remove_albums_in_batches(client, preview["ids"], batch_size=batch_size)
    log_success("all saved albums removed successfully")
    return removed
