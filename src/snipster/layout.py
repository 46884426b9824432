"""Screen geometry.

The screen is drawn as a rounded frame holding a header, a body of two
bordered panes (sidebar and preview) and a one line footer. All the sizes
are derived from the terminal size here, so the renderer never needs to do
any arithmetic of its own.
"""
from __future__ import annotations

from typing import NamedTuple

FRAME_BORDER = 1
FRAME_PAD_X = 2
FRAME_PAD_Y = 1
HEADER_HEIGHT = 3
FOOTER_HEIGHT = 1
PANE_GAP = 1
PANE_EXTRA_X = 4                      # Border plus one column padding.
PANE_EXTRA_Y = 2                      # Border only.
MIN_CONTENT_WIDTH = 20
MIN_CONTENT_HEIGHT = 10
MIN_BODY_HEIGHT = 3
MIN_PANE_WIDTH = 10
MIN_SEARCH_WIDTH = 20


class Layout(NamedTuple):
    """Geometry of the main screen for a given terminal size."""

    width: int
    height: int
    content_width: int
    content_height: int
    body_height: int
    sidebar_width: int
    preview_width: int
    pane_height: int
    search_width: int

    @property
    def frame_width(self) -> int:
        """Total width of the outer frame."""
        return self.content_width + 2 * (FRAME_BORDER + FRAME_PAD_X)

    @property
    def frame_height(self) -> int:
        """Total height of the outer frame."""
        return self.content_height + 2 * (FRAME_BORDER + FRAME_PAD_Y)


def compute_layout(width: int, height: int) -> Layout:
    """Compute the screen geometry for a terminal size."""
    content_w = max(
        width - 2 * (FRAME_BORDER + FRAME_PAD_X), MIN_CONTENT_WIDTH)
    content_h = max(
        height - 2 * (FRAME_BORDER + FRAME_PAD_Y), MIN_CONTENT_HEIGHT)
    body_h = max(content_h - HEADER_HEIGHT - FOOTER_HEIGHT, MIN_BODY_HEIGHT)

    avail_w = max(content_w - PANE_GAP - 2 * PANE_EXTRA_X, MIN_PANE_WIDTH)
    sidebar_w = max(avail_w // 3, MIN_PANE_WIDTH)
    preview_w = max(avail_w - sidebar_w, MIN_PANE_WIDTH)
    pane_h = max(body_h - PANE_EXTRA_Y, 1)
    search_w = max(content_w // 3, MIN_SEARCH_WIDTH)
    return Layout(
        width, height, content_w, content_h, body_h, sidebar_w, preview_w,
        pane_h, search_w)
