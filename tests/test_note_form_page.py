"""Tests for the form page's event wiring, with stand-ins for the nicegui elements."""

from types import SimpleNamespace

import pytest

from pages.note_form import NoteFormPageController, NoteFormView


class FakeElement:
    """Records what the view pushes into an element."""

    def __init__(self, value=""):
        self.value = value
        self.error = None
        self.count = None
        self.enabled = None

    def set_error(self, message):
        self.error = message

    def set_count(self, current):
        self.count = current

    def set_enabled(self, enabled):
        self.enabled = enabled


class FakeView:
    def __init__(self):
        self.renders = 0
        self.server_errors = {}
        self.tag_input = FakeElement()

    def render(self):
        self.renders += 1


def event(value):
    return SimpleNamespace(value=value)


@pytest.fixture
def page(navigator):
    view = FakeView()
    controller = NoteFormPageController(view)
    controller.navigator = navigator
    controller.mount(None, is_editing=False)
    return controller


@pytest.fixture
def form_view(navigator):
    """A NoteFormView whose elements are stand-ins, built without a page."""

    def factory(note=None, is_editing=False, server_errors=None):
        view = NoteFormView.__new__(NoteFormView)
        view._controller = NoteFormPageController(view)
        view._controller.navigator = navigator
        view._controller.mount(note, is_editing)
        view.server_errors = server_errors or {}
        view.load_error = None
        view._rendered_tags = tuple(view._controller.form.values.tags)
        for name in ("title_counter", "body_counter", "title_field", "body_field", "due_date_field",
                     "tags_field", "submit_btn"):
            setattr(view, name, FakeElement())
        return view

    return factory


class TestPageController:
    def test_title_change_renders(self, page):
        page.on_title_change(event("Groceries"))
        assert page.form.values.title == "Groceries"
        assert page.view.renders == 1

    def test_add_tag_clears_input(self, page):
        page.view.tag_input.value = " work "
        page.on_tag_draft_change(event(" work "))
        page.on_add_tag()
        assert page.form.values.tags == ["work"]
        assert page.view.tag_input.value == ""
        assert page.view.renders == 1

    def test_blank_tag_leaves_input_alone(self, page):
        page.view.tag_input.value = "   "
        page.on_tag_draft_change(event("   "))
        page.on_add_tag()
        assert page.form.values.tags == []
        assert page.view.tag_input.value == "   "
        assert page.view.renders == 0

    def test_remove_tag_out_of_range_skips_render(self, page):
        page.on_remove_tag(3)
        assert page.view.renders == 0

    def test_submit_invalid_form_only_renders(self, page, navigator):
        page.on_submit()
        assert navigator.calls == []
        assert page.view.renders == 1

    def test_submit_valid_form_creates(self, page, navigator):
        page.on_title_change(event("Groceries"))
        page.on_submit()
        assert navigator.calls == [("create", None, {"title": "Groceries", "body": "", "due_date": "", "tags": []})]

    def test_server_rejection_rerenders(self, page):
        page.on_server_rejected({"title": "has already been taken"})
        assert page.view.server_errors == {"title": "has already been taken"}
        assert page.view.renders == 1


class TestFormRender:
    def test_submit_button_follows_can_submit(self, form_view):
        view = form_view()
        view.render()
        assert view.submit_btn.enabled is False
        assert view.title_field.error == "Title is required"

        view.controller.form.on_field_change("title", "Groceries")
        view.render()
        assert view.submit_btn.enabled is True
        assert view.title_field.error is None
        assert view.title_counter.count == 9

    def test_server_errors_shown_when_no_local_error(self, form_view):
        view = form_view({"id": "42", "title": "A"}, is_editing=True,
                         server_errors={"title": "has already been taken", "tags": "too many tags"})
        view.render()
        assert view.title_field.error == "has already been taken"
        assert view.tags_field.error == "too many tags"
        assert view.submit_btn.enabled is True

    def test_local_error_wins_over_server_error(self, form_view):
        view = form_view({"title": "x" * 101}, server_errors={"title": "has already been taken"})
        view.render()
        assert view.title_field.error == "Title must be 100 characters or less"
        assert view.submit_btn.enabled is False
