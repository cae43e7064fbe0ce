"""Wantarr - track and search wanted media missing from your PVRs."""

from .__version__ import __version__

__all__ = ["__version__"]
