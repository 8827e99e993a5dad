"""Color palette for the GES Annex client, in light and dark variants."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color pair for one role in the palette."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    # Text
    TEXT_PRIMARY = ThemeColors(light="#1F2937", dark="#F3F4F6")
    TEXT_SECONDARY = ThemeColors(light="#6B7280", dark="#9CA3AF")

    # Backgrounds
    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#111827")
    BACKGROUND_SECONDARY = ThemeColors(light="#F6F7FB", dark="#1F2937")

    # Brand: GES green with a gold highlight
    ACCENT_PRIMARY = ThemeColors(light="#006B3F", dark="#34D399")
    ACCENT_SECONDARY = ThemeColors(light="#FCD116", dark="#FDE68A")

    # Status
    SUCCESS = ThemeColors(light="#15803D", dark="#4ADE80")
    WARNING = ThemeColors(light="#B45309", dark="#FBBF24")
    ERROR = ThemeColors(light="#B91C1C", dark="#F87171")

    # Borders
    BORDER_PRIMARY = ThemeColors(light="#D1D5DB", dark="#4B5563")

    # Buttons
    BUTTON_PRIMARY_BG = ThemeColors(light="#006B3F", dark="#34D399")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#052E16")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F3F4F6", dark="#374151")
    BUTTON_HOVER_BG = ThemeColors(light="#E5E7EB", dark="#4B5563")
