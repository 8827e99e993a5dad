"""Qt stylesheets for the portal, built from the GES palette."""

from .color_palette import ColorPalette, Theme

NAV_BUTTON_NAME = "PortalNavButton"
FOOTER_LABEL_NAME = "PortalFooter"


class Styles:
    """Stylesheet snippets keyed by where they are applied."""

    @staticmethod
    def get_main_window_style(theme: Theme = Theme.LIGHT) -> str:
        green = ColorPalette.ACCENT_PRIMARY.get(theme)
        gold = ColorPalette.ACCENT_SECONDARY.get(theme)
        border = ColorPalette.BORDER_PRIMARY.get(theme)
        return f"""
            QWidget {{
                background-color: {ColorPalette.BACKGROUND_PRIMARY.get(theme)};
                color: {ColorPalette.TEXT_PRIMARY.get(theme)};
                font-family: 'Segoe UI', 'Roboto', sans-serif;
                font-size: 14px;
            }}
            QPushButton {{
                background-color: {ColorPalette.BUTTON_SECONDARY_BG.get(theme)};
                border: 1px solid {border};
                border-radius: 4px;
                padding: 6px 12px;
            }}
            QPushButton:hover {{
                background-color: {ColorPalette.BUTTON_HOVER_BG.get(theme)};
            }}
            QPushButton:disabled {{
                color: {ColorPalette.TEXT_SECONDARY.get(theme)};
            }}
            QPushButton#{NAV_BUTTON_NAME} {{
                border: none;
                border-bottom: 3px solid transparent;
                border-radius: 0;
                background-color: transparent;
                font-weight: 600;
            }}
            QPushButton#{NAV_BUTTON_NAME}:checked {{
                color: {green};
                border-bottom: 3px solid {gold};
            }}
            QLineEdit, QPlainTextEdit, QSpinBox, QComboBox {{
                border: 1px solid {border};
                border-radius: 4px;
                padding: 4px;
            }}
            QLineEdit:focus, QPlainTextEdit:focus {{
                border: 1px solid {green};
            }}
            QListWidget, QTableWidget {{
                border: 1px solid {border};
                alternate-background-color: {ColorPalette.BACKGROUND_SECONDARY.get(theme)};
            }}
            QHeaderView::section {{
                background-color: {green};
                color: {ColorPalette.BUTTON_PRIMARY_TEXT.get(theme)};
                padding: 4px;
                border: none;
            }}
            QLabel#{FOOTER_LABEL_NAME} {{
                color: {ColorPalette.TEXT_SECONDARY.get(theme)};
                font-size: 12px;
            }}
        """

    @staticmethod
    def get_large_label_style() -> str:
        return "font-size: 16pt; font-weight: bold;"

    @staticmethod
    def get_timer_style(warning: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.WARNING if warning else ColorPalette.ACCENT_PRIMARY
        return f"font-size: 14pt; font-weight: bold; color: {color.get(theme)};"

    @staticmethod
    def get_status_style(is_error: bool, theme: Theme = Theme.LIGHT) -> str:
        color = ColorPalette.ERROR if is_error else ColorPalette.SUCCESS
        return f"color: {color.get(theme)};"
