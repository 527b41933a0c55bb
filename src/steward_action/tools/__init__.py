"""Auxiliary tool installers (Coursier, mill)."""

from .coursier import Coursier
from .mill import Mill

__all__ = ["Coursier", "Mill"]
