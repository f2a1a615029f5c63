import os
import unittest
from dataclasses import dataclass
from typing import Any
from unittest import mock

# Ensure local imports work when running this file directly.
THIS_DIR = os.path.dirname(os.path.abspath(__file__))
if THIS_DIR not in os.sys.path:
    os.sys.path.insert(0, THIS_DIR)

from managers import removal_manager
from managers.removal_manager import chunked, confirm_and_remove_albums, get_removal_preview
from spotify_api.errors import ResponseShapeError, SpotifyAPIError


# -------------------------
# Simple questionary mocks
# -------------------------

@dataclass
class _Askable:
    """Mimic questionary prompt objects that return a value from .ask()."""

    value: Any

    def ask(self):
        return self.value


class _QuestionaryMock:
    """A minimal questionary stub that returns a fixed confirm answer and captures output."""

    def __init__(self, answer):
        self.answer = answer
        self.confirm_calls = []
        self.printed = []

    def confirm(self, message, default=True, **kwargs):
        self.confirm_calls.append({"message": message, "default": default})
        return _Askable(self.answer)

    def print(self, text, style=None, **kwargs):
        self.printed.append((text, style))


class FakeSpotifyClient:
    def __init__(self, *, fail_on_batch=None):
        self.batches = []
        self.fail_on_batch = fail_on_batch

    def remove_saved_albums(self, ids):
        self.batches.append(list(ids))
        if self.fail_on_batch is not None and len(self.batches) == self.fail_on_batch:
            raise SpotifyAPIError("Spotify API error 502 (DELETE /me/albums): bad gateway", status_code=502)


def saved_items(n: int) -> list:
    return [{"added_at": "2020-01-01T00:00:00Z", "album": {"id": f"id{i}", "name": f"Album {i}", "artists": []}} for i in range(n)]


class TestChunked(unittest.TestCase):
    def test_batches_partition_ids(self):
        for n, size in [(0, 20), (1, 20), (20, 20), (21, 20), (45, 20), (7, 3), (5, 1)]:
            with self.subTest(n=n, size=size):
                ids = [f"id{i}" for i in range(n)]
                batches = list(chunked(ids, size))
                self.assertEqual(len(batches), -(-n // size))
                self.assertTrue(all(0 < len(b) <= size for b in batches))
                self.assertEqual([i for b in batches for i in b], ids)

    def test_invalid_size(self):
        with self.assertRaises(ValueError):
            list(chunked(["a"], 0))


class TestConfirmAndRemove(unittest.TestCase):
    def run_removal(self, items, *, answer=True, client=None, **kwargs):
        client = client or FakeSpotifyClient()
        stub = _QuestionaryMock(answer)
        with mock.patch.object(removal_manager, "questionary", stub):
            removed = confirm_and_remove_albums(client, items, **kwargs)
        return removed, client, stub

    def test_45_items_batch_20(self):
        removed, client, stub = self.run_removal(saved_items(45), batch_size=20)
        self.assertEqual(removed, 45)
        self.assertEqual([len(b) for b in client.batches], [20, 20, 5])
        self.assertEqual([i for b in client.batches for i in b], [f"id{i}" for i in range(45)])
        self.assertEqual(len(stub.confirm_calls), 1)
        self.assertFalse(stub.confirm_calls[0]["default"])
        self.assertEqual(stub.printed[0][0], "You answered: Yes")

    def test_declined_confirmation_removes_nothing(self):
        removed, client, stub = self.run_removal(saved_items(10), answer=False)
        self.assertEqual(removed, 0)
        self.assertEqual(client.batches, [])
        self.assertEqual(stub.printed[0][0], "You answered: No")

    def test_aborted_prompt_counts_as_declined(self):
        removed, client, _ = self.run_removal(saved_items(3), answer=None)
        self.assertEqual(removed, 0)
        self.assertEqual(client.batches, [])

    def test_empty_library_shows_no_prompt(self):
        removed, client, stub = self.run_removal([])
        self.assertEqual(removed, 0)
        self.assertEqual(stub.confirm_calls, [])
        self.assertEqual(client.batches, [])

    def test_failed_batch_stops_remaining_batches(self):
        client = FakeSpotifyClient(fail_on_batch=2)
        with self.assertRaises(SpotifyAPIError):
            self.run_removal(saved_items(60), client=client, batch_size=20)
        self.assertEqual(len(client.batches), 2)

    def test_unexpected_item_shape_fails_before_prompt(self):
        items = saved_items(2) + [{"added_at": "x"}]
        client = FakeSpotifyClient()
        stub = _QuestionaryMock(True)
        with mock.patch.object(removal_manager, "questionary", stub):
            with self.assertRaises(ResponseShapeError):
                confirm_and_remove_albums(client, items)
        self.assertEqual(stub.confirm_calls, [])
        self.assertEqual(client.batches, [])

    def test_assume_yes_skips_prompt(self):
        removed, client, stub = self.run_removal(saved_items(5), answer=False, assume_yes=True, batch_size=2)
        self.assertEqual(removed, 5)
        self.assertEqual(stub.confirm_calls, [])
        self.assertEqual([len(b) for b in client.batches], [2, 2, 1])

    def test_dry_run_lists_but_never_deletes(self):
        removed, client, stub = self.run_removal(saved_items(5), dry_run=True)
        self.assertEqual(removed, 0)
        self.assertEqual(stub.confirm_calls, [])
        self.assertEqual(client.batches, [])


class TestRemovalPreview(unittest.TestCase):
    def test_preview_lists_names_and_ids(self):
        preview = get_removal_preview(
            [{"album": {"id": "x1", "name": "Blue", "artists": [{"name": "Joni Mitchell"}]}}]
        )
        self.assertEqual(preview["count"], 1)
        self.assertEqual(preview["ids"], ["x1"])
        self.assertEqual(preview["names"], ["Joni Mitchell - Blue"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
