from __future__ import annotations


class AssetPackError(Exception):
    """Base class for input errors raised before any target is processed."""


class GraphError(AssetPackError):
    """The asset graph document is missing, unreadable or malformed."""


class ProfileError(AssetPackError):
    """A policy profile file is unreadable or malformed."""
