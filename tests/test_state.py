"""Tests for the DucoNodeState host record."""

from __future__ import annotations

from unittest.mock import MagicMock

from custom_components.duco.state import DucoNodeState


def test_initial_values():
    state = DucoNodeState(is_on=True, rotation_speed=40)

    assert state.is_on is True
    assert state.rotation_speed == 40
    assert state.carbon_dioxide_level is None
    assert state.relative_humidity is None
    assert state.responding is True


def test_setters_store_and_notify():
    state = DucoNodeState()
    listener = MagicMock()
    state.async_add_listener(listener)

    state.set_on(True)
    state.set_rotation_speed(65)
    state.set_carbon_dioxide_level(900)
    state.set_current_relative_humidity(58)

    assert state.is_on is True
    assert state.rotation_speed == 65
    assert state.carbon_dioxide_level == 900
    assert state.relative_humidity == 58
    assert listener.call_count == 4


def test_not_responding_keeps_last_values():
    state = DucoNodeState(is_on=True, rotation_speed=100)
    listener = MagicMock()
    state.async_add_listener(listener)

    state.flag_as_not_responding()

    assert state.responding is False
    assert state.is_on is True
    assert state.rotation_speed == 100
    listener.assert_called_once()


def test_next_value_marks_responding_again():
    state = DucoNodeState()
    state.flag_as_not_responding()

    state.set_rotation_speed(20)

    assert state.responding is True


def test_remove_listener():
    state = DucoNodeState()
    listener = MagicMock()
    remove = state.async_add_listener(listener)

    remove()
    remove()
    state.set_on(True)

    listener.assert_not_called()


def test_assumed_value_leaves_responding_alone():
    state = DucoNodeState()
    listener = MagicMock()
    state.flag_as_not_responding()
    state.async_add_listener(listener)

    state.assume_on(True)

    assert state.is_on is True
    assert state.responding is False
    listener.assert_called_once()
