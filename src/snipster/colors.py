"""Details of colors and styles."""
from __future__ import annotations

from dataclasses import dataclass

from rich.style import Style

accent_colors = (
    '#5BCEFA',
    '#F5A9B8',
    '#B5E853',
    '#FFCC66',
)
title_color = '#FFA657'


@dataclass
class Theme:
    """The styles used to draw the screen.

    The application owns a single instance and passes it to the rendering
    functions. Only the accent (border) color changes at run time.
    """

    accent: str = accent_colors[0]
    match: Style = Style(bold=True, color='black', bgcolor='#FFCC66')
    keyword: Style = Style(bold=True, color='#C678DD')
    gutter: Style = Style(color='grey50')
    gutter_mark: Style = Style(bold=True, color='#FFCC66')
    status: Style = Style(color='grey70')
    hint: Style = Style(dim=True)
    error: Style = Style(bold=True, color='#FF5F5F')
    selected: Style = Style(reverse=True)
    folder: Style = Style(color='#5BCEFA')

    @property
    def border(self) -> Style:
        """Style for frame and pane borders."""
        return Style(color=self.accent)

    @property
    def title(self) -> Style:
        """Style for titles and headings."""
        return Style(bold=True, color=title_color)

    def set_accent(self, index: int) -> None:
        """Select one of the accent colors, wrapping around the palette."""
        self.accent = accent_colors[index % len(accent_colors)]
