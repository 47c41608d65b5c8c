import pytest

from replay_overlay.view_model import FIELD_NAMES, ViewModel


def test_set_marks_dirty_only_on_change() -> None:
    view = ViewModel()
    assert view.set("current_scene", "Game") is True
    assert view.set("current_scene", "Game") is False
    assert view.dirty_fields() == {"current_scene"}


def test_consume_dirty_hands_over_and_clears() -> None:
    view = ViewModel()
    view.set("is_streaming", True)
    view.set("active_tab", "audio")

    assert view.consume_dirty() == ["active_tab", "is_streaming"]
    assert view.consume_dirty() == []
    assert view["active_tab"] == "audio"


def test_lists_compare_by_value() -> None:
    view = ViewModel()
    assert view.set("scenes", ["Game", "BRB"]) is True
    view.consume_dirty()
    assert view.set("scenes", ("Game", "BRB")) is False
    assert view.set("scenes", ["Game"]) is True
    assert view["scenes"] == ("Game",)


def test_bool_and_int_are_distinct_values() -> None:
    view = ViewModel()
    view.set("selected_source_id", 1)
    view.consume_dirty()
    assert view.set("selected_source_id", True) is True


def test_unknown_field_is_rejected() -> None:
    view = ViewModel()
    with pytest.raises(KeyError):
        view.set("no_such_field", 1)
    with pytest.raises(KeyError):
        view.mark_dirty("no_such_field")


def test_mark_dirty_forces_a_refresh() -> None:
    view = ViewModel()
    view.mark_dirty("rec_dot_visible")
    assert view.is_dirty("rec_dot_visible")


def test_snapshot_exposes_every_field() -> None:
    assert set(ViewModel().snapshot()) == FIELD_NAMES
