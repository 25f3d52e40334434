"""Tests for the note form controller."""

from datetime import datetime, timedelta

import pytest

from forms import (
    ErrorKind,
    FormPhase,
    NoteValues,
    collect_field_errors,
    merge_error,
    validate_note,
    MAX_TITLE_LENGTH,
    MAX_BODY_LENGTH,
)
from schemas import NoteSchema


class TestValidateNote:
    """Test the pure validation pass."""

    @pytest.mark.parametrize("title", ["", " ", "\t\n  "])
    def test_blank_title_is_required(self, title, today):
        errors = validate_note(NoteValues(title=title), today)
        assert errors == {"title": "Title is required"}

    def test_title_at_limit_is_valid(self, today):
        assert validate_note(NoteValues(title="x" * MAX_TITLE_LENGTH), today) == {}

    def test_title_over_limit(self, today):
        errors = validate_note(NoteValues(title="x" * (MAX_TITLE_LENGTH + 1)), today)
        assert errors == {"title": "Title must be 100 characters or less"}

    def test_long_whitespace_title_reports_required_only(self, today):
        errors = collect_field_errors(NoteValues(title=" " * 150), today)
        assert [(e.field, e.kind) for e in errors] == [("title", ErrorKind.REQUIRED_FIELD_MISSING)]

    def test_empty_body_is_allowed(self, today):
        assert "body" not in validate_note(NoteValues(title="A", body=""), today)

    def test_body_at_limit_is_valid(self, today):
        assert validate_note(NoteValues(title="A", body="b" * MAX_BODY_LENGTH), today) == {}

    def test_body_over_limit(self, today):
        errors = validate_note(NoteValues(title="A", body="b" * (MAX_BODY_LENGTH + 1)), today)
        assert errors == {"body": "Content must be 200 characters or less"}

    def test_due_date_in_past(self, today):
        yesterday = (today - timedelta(days=1)).isoformat()
        errors = validate_note(NoteValues(title="A", due_date=yesterday), today)
        assert errors == {"due_date": "Due date cannot be in the past"}

    @pytest.mark.parametrize("offset", [0, 1, 365])
    def test_due_date_today_or_later(self, offset, today):
        due_date = (today + timedelta(days=offset)).isoformat()
        assert validate_note(NoteValues(title="A", due_date=due_date), today) == {}

    def test_datetime_due_date_compares_by_day(self, today):
        past = NoteValues(title="A", due_date=datetime(2020, 1, 1, 9, 0))
        later_today = NoteValues(title="A", due_date=datetime(today.year, today.month, today.day, 23, 59))
        assert validate_note(past, today) == {"due_date": "Due date cannot be in the past"}
        assert validate_note(later_today, today) == {}

    def test_missing_due_date_is_valid(self, today):
        assert validate_note(NoteValues(title="A", due_date=""), today) == {}

    def test_unparseable_due_date_has_no_local_error(self, today):
        assert validate_note(NoteValues(title="A", due_date="next week"), today) == {}

    def test_all_field_errors_reported_together(self, today):
        values = NoteValues(title="", body="b" * 201, due_date=(today - timedelta(days=3)).isoformat())
        errors = collect_field_errors(values, today)
        assert {e.field: e.kind for e in errors} == {
            "title": ErrorKind.REQUIRED_FIELD_MISSING,
            "body": ErrorKind.LENGTH_EXCEEDED,
            "due_date": ErrorKind.DATE_IN_PAST,
        }

    def test_tags_are_never_validated_locally(self, today):
        values = NoteValues(title="A", tags=["", "   ", "x" * 500])
        assert validate_note(values, today) == {}


class TestMergeError:
    def test_local_error_wins(self):
        assert merge_error("title", {"title": "local"}, {"title": "server"}) == "local"

    def test_falls_back_to_server_error(self):
        assert merge_error("tags", {}, {"tags": "too many tags"}) == "too many tags"

    def test_no_error(self):
        assert merge_error("body", {}, None) is None


class TestInitialize:
    def test_create_mode_defaults(self, make_form):
        form = make_form()
        assert form.values == NoteValues()
        assert form.state.title_chars == 0
        assert form.state.body_chars == 0
        assert form.state.new_tag_draft == ""
        assert form.is_editing is False

    def test_initial_validation_runs_before_first_render(self, make_form):
        form = make_form({"title": "", "body": "", "tags": []})
        assert form.is_form_valid is False
        assert form.validation_errors == {"title": "Title is required"}
        assert form.phase is FormPhase.EDITABLE

    def test_seeds_counts_from_note(self, make_form):
        form = make_form({"id": "7", "title": "Hello", "body": "World!"})
        assert form.state.title_chars == 5
        assert form.state.body_chars == 6
        assert form.is_form_valid is True

    def test_not_editing_unless_asked(self, make_form, navigator):
        form = make_form({"id": "7", "title": "Hello"})
        assert form.is_editing is False
        assert form.is_edit_mode is False
        form.submit()
        assert navigator.calls[0][0] == "create"

    def test_seeds_due_date_from_date_object(self, make_form, today):
        form = make_form({"title": "A", "due_date": datetime(2026, 12, 1, 9, 30)})
        assert form.values.due_date == "2026-12-01"

    def test_seeds_from_schema(self, make_form):
        note = NoteSchema(id=3, title="Shopping", body="milk", due_date=None, tags=["home"])
        form = make_form(note, is_editing=True)
        assert form.values == NoteValues(id=3, title="Shopping", body="milk", due_date="", tags=["home"])

    def test_tags_are_copied(self, make_form):
        tags = ["a"]
        form = make_form({"title": "A", "tags": tags})
        form.add_tag("b")
        assert tags == ["a"]


class TestFieldChange:
    def test_title_change_updates_count_and_errors(self, make_form):
        form = make_form()
        form.on_field_change("title", "Groceries")
        assert form.values.title == "Groceries"
        assert form.state.title_chars == 9
        assert form.validation_errors == {}
        assert form.phase is FormPhase.SUBMITTABLE

    def test_body_change_updates_count(self, make_form):
        form = make_form({"title": "A"})
        form.on_field_change("body", "b" * 201)
        assert form.state.body_chars == 201
        assert form.validation_errors == {"body": "Content must be 200 characters or less"}
        assert form.is_form_valid is False

    def test_due_date_change_revalidates(self, make_form, today):
        form = make_form({"title": "A"})
        form.on_field_change("due_date", (today - timedelta(days=1)).isoformat())
        assert "due_date" in form.validation_errors
        form.on_field_change("due_date", "")
        assert form.validation_errors == {}

    def test_due_date_as_datetime_in_past(self, make_form, navigator):
        form = make_form({"title": "A"})
        form.on_field_change("due_date", datetime(2020, 1, 1, 9, 0))
        assert form.values.due_date == "2020-01-01"
        assert form.validation_errors == {"due_date": "Due date cannot be in the past"}
        assert form.submit() is False

    def test_due_date_as_date_is_stored_as_text(self, make_form, navigator, today):
        form = make_form({"title": "A"})
        form.on_field_change("due_date", today + timedelta(days=2))
        assert form.validation_errors == {}
        form.submit()
        assert navigator.calls[0][2]["due_date"] == "2026-10-21"

    def test_unknown_field_raises(self, make_form):
        form = make_form()
        with pytest.raises(ValueError):
            form.on_field_change("color", "red")

    @pytest.mark.parametrize("tags", ["abc", b"abc", 42, {"a": 1}])
    def test_tags_must_be_a_list(self, tags, make_form):
        form = make_form({"title": "A", "tags": ["keep"]})
        with pytest.raises(TypeError):
            form.on_field_change("tags", tags)
        assert form.values.tags == ["keep"]

    def test_tags_replaced_with_copy(self, make_form):
        form = make_form({"title": "A"})
        tags = ("a", "b")
        form.on_field_change("tags", tags)
        assert form.values.tags == ["a", "b"]
        form.on_field_change("tags", None)
        assert form.values.tags == []

    def test_validate_is_idempotent(self, make_form):
        form = make_form({"title": "x" * 101, "body": "b" * 300})
        first = form.validate()
        second = form.validate()
        assert first == second
        assert first is not second

    def test_errors_do_not_accumulate(self, make_form):
        form = make_form({"title": "x" * 101})
        form.on_field_change("title", "fixed")
        assert form.validation_errors == {}


class TestTags:
    def test_add_trimmed_tag(self, make_form):
        form = make_form({"title": "A"})
        assert form.add_tag(" x ") is True
        assert form.values.tags == ["x"]

    @pytest.mark.parametrize("draft", ["", "   ", "\t"])
    def test_blank_tag_is_ignored(self, draft, make_form):
        form = make_form({"title": "A", "tags": ["keep"]})
        assert form.add_tag(draft) is False
        assert form.values.tags == ["keep"]

    def test_duplicates_are_accepted(self, make_form):
        form = make_form({"title": "A"})
        form.add_tag("work")
        form.add_tag("work")
        assert form.values.tags == ["work", "work"]

    def test_add_uses_current_draft_and_clears_it(self, make_form):
        form = make_form({"title": "A"})
        form.on_tag_draft_change("  urgent ")
        assert form.add_tag() is True
        assert form.values.tags == ["urgent"]
        assert form.state.new_tag_draft == ""

    def test_blank_draft_is_kept(self, make_form):
        form = make_form({"title": "A"})
        form.on_tag_draft_change("   ")
        form.add_tag()
        assert form.state.new_tag_draft == "   "
        assert form.values.tags == []

    def test_remove_tag_keeps_order(self, make_form):
        form = make_form({"title": "A", "tags": ["a", "b", "c", "d"]})
        assert form.remove_tag(1) is True
        assert form.values.tags == ["a", "c", "d"]

    @pytest.mark.parametrize("index", [-1, 3, 10])
    def test_remove_out_of_range_is_noop(self, index, make_form):
        form = make_form({"title": "A", "tags": ["a", "b", "c"]})
        assert form.remove_tag(index) is False
        assert form.values.tags == ["a", "b", "c"]


class TestSubmit:
    def test_create_after_fixing_title(self, make_form, navigator):
        form = make_form({"title": "", "body": "", "tags": []})
        assert form.is_form_valid is False

        form.on_field_change("title", "Groceries")
        assert form.is_form_valid is True

        assert form.submit() is True
        assert navigator.calls == [
            ("create", None, {"title": "Groceries", "body": "", "due_date": "", "tags": []}),
        ]

    def test_invalid_form_does_not_submit(self, make_form, navigator):
        form = make_form({"title": "x" * 101})
        assert "title" in form.validation_errors
        assert form.submit() is False
        assert navigator.calls == []
        assert "title" in form.validation_errors

    def test_update_in_edit_mode(self, make_form, navigator):
        form = make_form({"id": "42", "title": "A"}, is_editing=True)
        form.on_field_change("title", "A better title")
        form.add_tag("work")

        assert form.submit() is True
        assert navigator.calls == [
            ("update", "42", {"title": "A better title", "body": "", "due_date": "", "tags": ["work"]}),
        ]

    def test_not_editing_creates_even_with_id(self, make_form, navigator):
        form = make_form({"id": "42", "title": "A"}, is_editing=False)
        form.submit()
        assert navigator.calls[0][0] == "create"

    @pytest.mark.parametrize("note_id", ["", None])
    def test_editing_without_id_creates(self, note_id, make_form, navigator):
        form = make_form({"id": note_id, "title": "A"}, is_editing=True)
        assert form.is_edit_mode is False
        assert form.submit() is True
        assert navigator.calls == [("create", None, {"title": "A", "body": "", "due_date": "", "tags": []})]

    def test_submit_revalidates(self, make_form, navigator):
        form = make_form({"title": "A"})
        # 绕过 handler 直接改值，模拟显示的状态早于最后一次编辑
        form.values.title = ""
        assert form.is_form_valid is True
        assert form.submit() is False
        assert navigator.calls == []

    def test_submit_keeps_local_state(self, make_form):
        form = make_form({"title": "Keep me", "tags": ["a"]})
        form.submit()
        assert form.values.title == "Keep me"
        assert form.values.tags == ["a"]

    def test_payload_tags_are_a_copy(self, make_form, navigator):
        form = make_form({"title": "A", "tags": ["a"]})
        form.submit()
        form.add_tag("b")
        assert navigator.calls[0][2]["tags"] == ["a"]


class TestCanSubmit:
    def test_blank_title_disables_submit(self, make_form):
        assert make_form().can_submit is False

    def test_server_errors_do_not_block(self, make_form):
        form = make_form({"title": "A"})
        assert form.can_submit is True
        assert form.error_for("title", {"title": "has already been taken"}) == "has already been taken"
