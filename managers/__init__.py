# Managers module exports
from managers.removal_manager import (
    ask_confirmation,
    chunked,
    confirm_and_remove_albums,
    get_removal_preview,
    remove_albums_in_batches,
)

__all__ = [
    "ask_confirmation",
    "chunked",
    "confirm_and_remove_albums",
    "get_removal_preview",
    "remove_albums_in_batches",
]
