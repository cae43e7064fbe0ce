"""Sonarr (v2/v3) PVR adapter."""

from __future__ import annotations

from typing import Any, Dict, Optional

from wantarr.errors import (
    BackendResponseError,
    BackendUnreachableError,
    PvrInitError,
    PvrNotInitializedError,
)
from wantarr.pvr.arr_client import ArrServiceAdapter
from wantarr.pvr.resilience import expect_dict, require_bool, require_int, required_list_of_dicts
from wantarr.pvr.types import MediaItem, format_episode_name, parse_timestamp

PVR_DEFAULT_PAGE_SIZE = 1000
PVR_DEFAULT_SORT_KEY = "airDateUtc"
PVR_DEFAULT_SORT_DIRECTION = "desc"

_SUPPORTED_VERSIONS = {"2": 2, "3": 3}


class SonarrPvr(ArrServiceAdapter):
    """Sonarr API adapter for wanted episode listings."""

    _version: Optional[int] = None

    @property
    def version(self) -> Optional[int]:
        return self._version

    async def init(self) -> None:
        """Negotiate the Sonarr API version from system/status."""
        try:
            payload = await self._get_json("system/status", context="system status")
            status = expect_dict(payload, "system status payload")
        except (BackendUnreachableError, BackendResponseError) as exc:
            raise PvrInitError(f"failed initializing sonarr pvr {self.name}: {exc}") from exc

        version = status.get("version")
        major = version[:1] if isinstance(version, str) else ""
        if major not in _SUPPORTED_VERSIONS:
            raise PvrInitError(f"failed to determine version of sonarr pvr {self.name}: {version!r}")
        self._version = _SUPPORTED_VERSIONS[major]
        self.log.info(f"Initialized sonarr v{self._version} at {self.api_url}")

    async def get_queue_size(self) -> int:
        self._require_init()
        payload = await self._get_json("queue", context="queue")
        if isinstance(payload, list):
            # v2 returns the queue itself instead of a page
            return len(payload)
        queue = expect_dict(payload, "queue payload")
        return require_int(queue, "totalRecords", "queue payload")

    async def get_wanted_missing(self) -> Dict[int, MediaItem]:
        return await self._get_wanted("wanted/missing", "wanted missing")

    async def get_wanted_cutoff(self) -> Dict[int, MediaItem]:
        return await self._get_wanted("wanted/cutoff", "wanted cutoff unmet")

    async def _get_wanted(self, path: str, label: str) -> Dict[int, MediaItem]:
        self._require_init()
        total_records = 0
        wanted: Dict[int, MediaItem] = {}
        page = 1
        last_page_size = PVR_DEFAULT_PAGE_SIZE

        self.log.info(f"Retrieving {label} media...")

        while last_page_size >= PVR_DEFAULT_PAGE_SIZE:
            params = {
                "sortKey": PVR_DEFAULT_SORT_KEY,
                "sortDir": PVR_DEFAULT_SORT_DIRECTION,
                "page": page,
                "pageSize": PVR_DEFAULT_PAGE_SIZE,
            }
            payload = await self._get_json(path, params, context=label)
            context = f"{label} page {page}"
            records = required_list_of_dicts(expect_dict(payload, context), "records", context)

            last_page_size = len(records)
            for idx, record in enumerate(records):
                record_context = f"{context}.records[{idx}]"
                if not require_bool(record, "monitored", record_context):
                    continue
                episode_id, item = self._map_record(record, record_context)
                wanted[episode_id] = item
            total_records += last_page_size

            self.log.debug(f"Retrieved {label} page {page} ({last_page_size} records)")
            page += 1

        self.log.info(f"Finished {label}: {total_records} records, {len(wanted)} monitored")
        return wanted

    @staticmethod
    def _map_record(record: Dict[str, Any], context: str) -> tuple[int, MediaItem]:
        episode_id = require_int(record, "id", context)
        season = require_int(record, "seasonNumber", context)
        episode = require_int(record, "episodeNumber", context)
        title = record.get("title")
        if not isinstance(title, str):
            raise BackendResponseError(f"{context}.title expected string value, got {title!r}")
        try:
            air_date = parse_timestamp(record.get("airDateUtc"))
        except ValueError as exc:
            raise BackendResponseError(f"{context}.airDateUtc is not a valid timestamp: {exc}") from exc
        return episode_id, MediaItem(
            name=format_episode_name(title, season, episode),
            air_date_utc=air_date,
            last_search=None,
        )

    def _require_init(self) -> None:
        if self._version is None:
            raise PvrNotInitializedError(f"sonarr pvr {self.name} used before init()")
