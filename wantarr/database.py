"""
Per-PVR search history, persisted as ``<folder>/<name>_<suffix>.json``.

The file maps backend item ids to MediaItem dicts. Nothing reaches disk until
``persist()``, which replaces the file atomically.
"""

from __future__ import annotations

import json
import os
import stat
import tempfile
from dataclasses import replace
from pathlib import Path
from typing import Dict, Iterator, Mapping, Optional, Tuple

from wantarr.errors import StateDecodeError, StateIOError
from wantarr.logger import WantarrLogger
from wantarr.pvr.types import MediaItem

DATABASE_FILE_EXTENSION = "json"


def database_path(name: str, suffix: str, folder: Path | str) -> Path:
    return Path(folder) / f"{name}_{suffix}.{DATABASE_FILE_EXTENSION}"


def _snapshot(vault: Mapping[int, MediaItem]) -> Dict[int, MediaItem]:
    return {key: replace(item) for key, item in vault.items()}


class Database:
    """Key -> MediaItem store for one PVR dataset. Not thread safe."""

    def __init__(self, file_path: Path, log: Optional[WantarrLogger] = None) -> None:
        self.file_path = file_path
        self.log = log or WantarrLogger(name="db")
        self.loaded = False
        self._vault: Dict[int, MediaItem] = {}
        self._persisted: Dict[int, MediaItem] = {}

    @classmethod
    def open(
        cls,
        name: str,
        suffix: str,
        folder: Path | str,
        log: Optional[WantarrLogger] = None,
    ) -> "Database":
        """Load the database for ``name``/``suffix``; a missing file gives an empty store."""
        db_log = log.child(f"db.{name}") if log is not None else None
        db = cls(database_path(name, suffix, folder), db_log)
        db.log.info(f"Using {'DATABASE':<10} = {str(db.file_path)!r}")
        db._load()
        return db

    def _load(self) -> None:
        try:
            raw = self.file_path.read_bytes()
        except FileNotFoundError:
            self.log.debug("No database file yet, starting empty")
            return
        except OSError as exc:
            raise StateIOError(f"failed reading database file: {str(self.file_path)!r}: {exc}") from exc

        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise StateDecodeError(
                f"failed to unmarshal bytes from database file: {str(self.file_path)!r}: {exc}"
            ) from exc
        if not isinstance(payload, dict):
            raise StateDecodeError(
                f"database file {str(self.file_path)!r} has unexpected type '{type(payload).__name__}'"
            )

        vault: Dict[int, MediaItem] = {}
        for raw_key, raw_item in payload.items():
            try:
                vault[int(raw_key)] = MediaItem.from_dict(raw_item)
            except ValueError as exc:
                raise StateDecodeError(
                    f"invalid entry {raw_key!r} in database file {str(self.file_path)!r}: {exc}"
                ) from exc

        self._vault = vault
        self._persisted = _snapshot(vault)
        self.loaded = True
        self.log.debug(f"Loaded {len(vault)} media items")

    @property
    def changed(self) -> bool:
        """True when the in-memory items differ from what is on disk."""
        return self._vault != self._persisted

    def get(self, key: int) -> Optional[MediaItem]:
        return self._vault.get(key)

    def upsert(self, key: int, item: MediaItem) -> None:
        self._vault[key] = item

    def delete(self, key: int) -> bool:
        return self._vault.pop(key, None) is not None

    def merge_media_items(self, items: Mapping[int, MediaItem]) -> Tuple[int, int]:
        """
        Replace the tracked set with a fresh wanted listing.

        Items no longer listed are dropped, new ones added, and items already
        tracked keep their ``last_search``. Returns ``(added, removed)``.
        """
        removed = [key for key in self._vault if key not in items]
        for key in removed:
            del self._vault[key]

        added = 0
        for key, item in items.items():
            existing = self._vault.get(key)
            if existing is None:
                added += 1
                self._vault[key] = replace(item)
                continue
            self._vault[key] = replace(item, last_search=existing.last_search)

        self.log.info(f"Merged {len(items)} media items (added={added}, removed={len(removed)})")
        return added, len(removed)

    def items(self):
        return self._vault.items()

    def keys(self):
        return self._vault.keys()

    def __len__(self) -> int:
        return len(self._vault)

    def __contains__(self, key: object) -> bool:
        return key in self._vault

    def __iter__(self) -> Iterator[int]:
        return iter(self._vault)

    def persist(self) -> bool:
        """Write all items if anything changed. Returns whether a write happened."""
        if not self.changed:
            self.log.debug("No changes, skipping database write")
            return False

        data = {str(key): item.to_dict() for key, item in sorted(self._vault.items())}
        folder = self.file_path.parent
        tmp_name: Optional[str] = None
        try:
            folder.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.file_path.name}.", suffix=".tmp", dir=folder)
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
                f.flush()
                os.fsync(f.fileno())
            if self.file_path.exists():
                os.chmod(tmp_name, stat.S_IMODE(self.file_path.stat().st_mode))
            os.replace(tmp_name, self.file_path)
        except OSError as exc:
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            raise StateIOError(f"failed writing database file: {str(self.file_path)!r}: {exc}") from exc

        self._persisted = _snapshot(self._vault)
        self.log.info(f"Saved {len(data)} media items")
        return True
