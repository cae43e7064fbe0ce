"""PVR adapters that list wanted media as MediaItem mappings."""

from .protocols import PvrClient
from .registry import create_pvr, supported_pvr_types
from .sonarr import SonarrPvr
from .types import MediaItem, format_episode_name

__all__ = [
    "MediaItem",
    "PvrClient",
    "SonarrPvr",
    "create_pvr",
    "format_episode_name",
    "supported_pvr_types",
]
