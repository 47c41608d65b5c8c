from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

PANEL_HIT_PADDING = 20


@dataclass(frozen=True)
class PanelRect:
    x: int = 0
    y: int = 0
    width: int = 0
    height: int = 0

    @property
    def empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def contains(self, px: int, py: int, *, padding: int = PANEL_HIT_PADDING) -> bool:
        if self.empty:
            return False
        return (
            self.x - padding <= px < self.x + self.width + padding
            and self.y - padding <= py < self.y + self.height + padding
        )


class ClickThroughTracker:
    """Decides whether the overlay window should pass mouse input through.

    ``update`` returns the new click-through flag only when it changes, so the
    window layer touches its input flags on transitions alone.
    """

    def __init__(self, *, padding: int = PANEL_HIT_PADDING) -> None:
        self._padding = padding
        self._panel = PanelRect()
        self._panel_visible = False
        self._click_through = True

    @property
    def click_through(self) -> bool:
        return self._click_through

    @property
    def panel(self) -> PanelRect:
        return self._panel

    def set_panel_rect(self, rect: PanelRect) -> None:
        self._panel = rect

    def set_panel_visible(self, visible: bool) -> Optional[bool]:
        self._panel_visible = visible
        if not visible and not self._click_through:
            self._click_through = True
            return True
        return None

    def wants_input(self, cursor_x: int, cursor_y: int, *, hovering_element: bool = False) -> bool:
        if not self._panel_visible or self._panel.empty:
            return False
        if self._panel.contains(cursor_x, cursor_y, padding=self._padding):
            return True
        return hovering_element

    def update(self, cursor_x: int, cursor_y: int, *, hovering_element: bool = False) -> Optional[bool]:
        transparent = not self.wants_input(cursor_x, cursor_y, hovering_element=hovering_element)
        if transparent == self._click_through:
            return None
        self._click_through = transparent
        return transparent
