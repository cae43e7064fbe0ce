"""Central PVR backend dispatch."""

from __future__ import annotations

from typing import Callable, Optional

from wantarr.config import PvrConfig
from wantarr.logger import WantarrLogger
from wantarr.pvr.protocols import PvrClient
from wantarr.pvr.sonarr import SonarrPvr

_PVR_TYPES: dict[str, Callable[[PvrConfig, Optional[WantarrLogger]], PvrClient]] = {
    "sonarr": SonarrPvr,
}


def _normalize_pvr_type(pvr_type: str | None) -> str:
    return (pvr_type or "").strip().lower()


def supported_pvr_types() -> tuple[str, ...]:
    return tuple(sorted(_PVR_TYPES))


def create_pvr(config: PvrConfig, log: Optional[WantarrLogger] = None) -> PvrClient:
    """Build the adapter for a configured PVR, chosen by its ``type``."""
    factory = _PVR_TYPES.get(_normalize_pvr_type(config.type))
    if factory is not None:
        return factory(config, log.child(config.name) if log is not None else None)
    supported = ", ".join(supported_pvr_types())
    raise ValueError(
        f"Unsupported pvr type '{config.type}' for '{config.name}'. Supported types: {supported}."
    )
