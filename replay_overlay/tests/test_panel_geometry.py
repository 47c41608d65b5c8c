from replay_overlay.panel_geometry import PANEL_HIT_PADDING, ClickThroughTracker, PanelRect


def test_rect_contains_with_padding() -> None:
    rect = PanelRect(100, 100, 200, 50)
    assert rect.contains(100, 100) is True
    assert rect.contains(100 - PANEL_HIT_PADDING, 100) is True
    assert rect.contains(100 - PANEL_HIT_PADDING - 1, 100) is False
    assert rect.contains(300 + PANEL_HIT_PADDING - 1, 150) is True
    assert rect.contains(300 + PANEL_HIT_PADDING, 150) is False
    assert rect.contains(150, 120, padding=0) is True


def test_empty_rect_never_contains() -> None:
    assert PanelRect().empty is True
    assert PanelRect(0, 0, 10, 0).contains(0, 0) is False


def test_tracker_starts_click_through_and_ignores_hidden_panel() -> None:
    tracker = ClickThroughTracker()
    tracker.set_panel_rect(PanelRect(0, 0, 400, 300))
    assert tracker.click_through is True
    assert tracker.update(10, 10) is None


def test_tracker_reports_transitions_only() -> None:
    tracker = ClickThroughTracker()
    tracker.set_panel_rect(PanelRect(0, 0, 400, 300))
    tracker.set_panel_visible(True)

    assert tracker.update(10, 10) is False
    assert tracker.update(20, 20) is None
    assert tracker.update(900, 900) is True
    assert tracker.update(901, 901) is None


def test_hovered_element_outside_panel_keeps_input() -> None:
    tracker = ClickThroughTracker()
    tracker.set_panel_rect(PanelRect(0, 0, 100, 100))
    tracker.set_panel_visible(True)
    assert tracker.wants_input(500, 500, hovering_element=True) is True
    assert tracker.wants_input(500, 500) is False


def test_hiding_panel_restores_click_through() -> None:
    tracker = ClickThroughTracker()
    tracker.set_panel_rect(PanelRect(0, 0, 100, 100))
    tracker.set_panel_visible(True)
    tracker.update(50, 50)
    assert tracker.click_through is False

    assert tracker.set_panel_visible(False) is True
    assert tracker.click_through is True
    assert tracker.set_panel_visible(False) is None
