"""Styling module for the GES Annex desktop client."""

from .color_palette import ColorPalette, Theme

__all__ = ["ColorPalette", "Theme"]
