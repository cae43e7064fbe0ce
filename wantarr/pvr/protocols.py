"""Protocol definition shared by every PVR backend."""

from __future__ import annotations

from typing import Dict, Protocol

from wantarr.pvr.types import MediaItem


class PvrClient(Protocol):
    """PVR API used by the search loop.

    ``init`` must complete before any other call; the remaining calls raise
    ``PvrNotInitializedError`` otherwise.
    """

    async def init(self) -> None:
        ...

    async def get_queue_size(self) -> int:
        ...

    async def get_wanted_missing(self) -> Dict[int, MediaItem]:
        ...

    async def get_wanted_cutoff(self) -> Dict[int, MediaItem]:
        ...

    async def close(self) -> None:
        ...

    async def __aenter__(self) -> "PvrClient":
        ...

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        ...
