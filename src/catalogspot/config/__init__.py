"""Configuration module for catalogspot."""

from .settings import Settings, SpotifySettings, get_settings

__all__ = ["Settings", "SpotifySettings", "get_settings"]
