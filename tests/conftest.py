"""Pytest configuration and shared fixtures."""

from datetime import date

import pytest

from forms import NoteFormController


class RecordingNavigator:
    """Stands in for NoteNavigator and records every request."""

    def __init__(self):
        self.calls = []

    def create(self, payload):
        self.calls.append(("create", None, payload))

    def update(self, note_id, payload):
        self.calls.append(("update", note_id, payload))


@pytest.fixture
def today():
    return date(2026, 10, 19)


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def make_form(navigator, today):
    """Build a controller with a fixed "today"."""

    def factory(note=None, is_editing=False):
        return NoteFormController(navigator, note=note, is_editing=is_editing, today=lambda: today)

    return factory
