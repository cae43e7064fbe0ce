from __future__ import annotations

import io
import json
import os
import stat
from datetime import datetime, timezone

import pytest
from rich.console import Console

from wantarr import database
from wantarr.database import Database
from wantarr.errors import StateDecodeError, StateIOError
from wantarr.logger import WantarrLogger
from wantarr.pvr.types import MediaItem


def _log() -> WantarrLogger:
    return WantarrLogger(name="test", console=Console(file=io.StringIO()))


def _item(name: str, searched: bool = False) -> MediaItem:
    return MediaItem(
        name=name,
        air_date_utc=datetime(2019, 3, 5, 2, 0, tzinfo=timezone.utc),
        last_search=datetime(2024, 6, 1, 12, 30, 15, 250000, tzinfo=timezone.utc) if searched else None,
    )


def test_open_missing_file_gives_empty_unloaded_store(tmp_path) -> None:
    db = Database.open("sonarr", "missing", tmp_path, _log())

    assert db.file_path == tmp_path / "sonarr_missing.json"
    assert len(db) == 0
    assert db.loaded is False
    assert db.changed is False


def test_persist_then_open_round_trips_items(tmp_path) -> None:
    db = Database.open("sonarr", "missing", tmp_path, _log())
    items = {
        1101: _item("Foo - S02E05"),
        1102: _item("Foo - S02E06", searched=True),
        2001: MediaItem(name="TBA - S11E01"),
    }
    for key, item in items.items():
        db.upsert(key, item)

    assert db.persist() is True

    reopened = Database.open("sonarr", "missing", tmp_path, _log())
    assert reopened.loaded is True
    assert reopened.changed is False
    assert dict(reopened.items()) == items


def test_on_disk_format_uses_string_keys_and_stable_field_names(tmp_path) -> None:
    db = Database.open("sonarr", "cutoff", tmp_path, _log())
    db.upsert(7, _item("Foo - S01E07", searched=True))
    db.persist()

    data = json.loads((tmp_path / "sonarr_cutoff.json").read_text(encoding="utf-8"))

    assert data == {
        "7": {
            "Name": "Foo - S01E07",
            "AirDateUtc": "2019-03-05T02:00:00Z",
            "LastSearch": "2024-06-01T12:30:15.250000Z",
        }
    }


def test_open_reads_existing_go_style_file(tmp_path) -> None:
    (tmp_path / "tv_missing.json").write_text(
        json.dumps(
            {
                "12": {
                    "Name": "Foo - S02E05",
                    "AirDateUtc": "2019-03-05T02:00:00Z",
                    "LastSearch": "2020-04-01T10:11:12.123456789Z",
                }
            }
        ),
        encoding="utf-8",
    )

    db = Database.open("tv", "missing", tmp_path, _log())

    assert db.loaded is True
    assert db.get(12) == MediaItem(
        name="Foo - S02E05",
        air_date_utc=datetime(2019, 3, 5, 2, 0, tzinfo=timezone.utc),
        last_search=datetime(2020, 4, 1, 10, 11, 12, 123456, tzinfo=timezone.utc),
    )


@pytest.mark.parametrize(
    "content",
    [
        "{not json",
        "[]",
        json.dumps({"abc": {"Name": "Foo"}}),
        json.dumps({"1": {"Name": "Foo", "AirDateUtc": "tomorrow"}}),
        json.dumps({"1": "Foo"}),
    ],
)
def test_open_rejects_corrupt_files(tmp_path, content: str) -> None:
    path = tmp_path / "tv_missing.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(StateDecodeError, match="tv_missing.json"):
        Database.open("tv", "missing", tmp_path, _log())


def test_open_surfaces_unreadable_file(tmp_path) -> None:
    # a directory where the file should be cannot be read
    (tmp_path / "tv_missing.json").mkdir()

    with pytest.raises(StateIOError, match="tv_missing.json"):
        Database.open("tv", "missing", tmp_path, _log())


def test_upsert_tracks_structural_changes(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01"))
    db.persist()

    db.upsert(1, _item("Foo - S01E01"))
    assert db.changed is False

    db.upsert(1, _item("Foo - S01E01", searched=True))
    assert db.changed is True


def test_changes_that_net_to_nothing_leave_store_clean(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01"))
    db.persist()

    db.upsert(2, _item("Foo - S01E02"))
    db.upsert(1, _item("Renamed"))
    assert db.changed is True
    assert db.delete(2) is True
    db.upsert(1, _item("Foo - S01E01"))

    assert db.changed is False
    assert db.persist() is False


def test_delete_missing_key_is_not_a_change(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())

    assert db.delete(99) is False
    assert db.changed is False


def test_in_place_last_search_update_is_detected(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01"))
    db.persist()

    item = db.get(1)
    assert item is not None
    item.last_search = datetime(2024, 1, 1, tzinfo=timezone.utc)

    assert db.changed is True


def test_persist_skips_write_when_unchanged(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())

    assert db.persist() is False
    assert not (tmp_path / "tv_missing.json").exists()


def test_persist_creates_missing_folder(tmp_path) -> None:
    folder = tmp_path / "nested" / "db"
    db = Database.open("tv", "missing", folder, _log())
    db.upsert(1, _item("Foo - S01E01"))

    db.persist()

    assert (folder / "tv_missing.json").exists()
    assert [p.name for p in folder.iterdir()] == ["tv_missing.json"]


def test_failed_persist_keeps_previous_file_and_dirty_state(tmp_path, monkeypatch) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01"))
    db.persist()
    before = (tmp_path / "tv_missing.json").read_text(encoding="utf-8")

    def _broken_replace(src, dst):
        raise OSError("disk full")

    monkeypatch.setattr(database.os, "replace", _broken_replace)
    db.upsert(2, _item("Foo - S01E02"))

    with pytest.raises(StateIOError, match="disk full"):
        db.persist()

    assert (tmp_path / "tv_missing.json").read_text(encoding="utf-8") == before
    assert db.changed is True
    assert sorted(os.listdir(tmp_path)) == ["tv_missing.json"]


def test_merge_media_items_keeps_search_history(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01", searched=True))
    db.upsert(2, _item("Foo - S01E02"))
    db.persist()

    fresh = {
        1: MediaItem(name="Foo (2019) - S01E01", air_date_utc=None),
        3: _item("Foo - S01E03"),
    }
    added, removed = db.merge_media_items(fresh)

    assert (added, removed) == (1, 1)
    assert set(db) == {1, 3}
    merged = db.get(1)
    assert merged is not None
    assert merged.name == "Foo (2019) - S01E01"
    assert merged.air_date_utc is None
    assert merged.last_search == _item("x", searched=True).last_search
    assert db.get(3) == fresh[3]
    assert fresh[1].last_search is None


def test_merge_with_identical_listing_is_not_a_change(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01", searched=True))
    db.persist()

    db.merge_media_items({1: _item("Foo - S01E01")})

    assert db.changed is False


def test_naive_timestamps_round_trip_through_persist(tmp_path) -> None:
    db = Database.open("tv", "missing", tmp_path, _log())
    items = {1: MediaItem("Foo", datetime(2020, 1, 1), datetime(2024, 1, 1))}
    db.upsert(1, items[1])
    db.persist()

    reopened = Database.open("tv", "missing", tmp_path, _log())

    assert dict(reopened.items()) == items
    assert reopened.changed is False


def test_persist_keeps_existing_file_mode(tmp_path) -> None:
    path = tmp_path / "tv_missing.json"
    path.write_text("{}", encoding="utf-8")
    os.chmod(path, 0o644)
    db = Database.open("tv", "missing", tmp_path, _log())
    db.upsert(1, _item("Foo - S01E01"))

    db.persist()

    assert stat.S_IMODE(path.stat().st_mode) == 0o644
