"""Configuration file handling."""

from .config import ConfigManager, RenderJob, PRESETS, list_presets

__all__ = ["ConfigManager", "RenderJob", "PRESETS", "list_presets"]
