from datetime import date
from functools import partial
from typing import Dict, Tuple

from loguru import logger
from nicegui import ui
from nicegui.events import ValueChangeEventArguments

from client import NotesApiClient
from components import CharCounter, FormField, build_tag_chip
from forms import NoteFormController, MAX_TITLE_LENGTH, MAX_BODY_LENGTH
from navigator import NoteNavigator
from schemas import NoteSchema
from views import View, Controller, build_header


class NoteFormPageController(Controller["NoteFormView"]):
    """nicegui 事件 -> NoteFormController 的 handler -> view.render()"""

    def __init__(self, view: "NoteFormView"):
        super().__init__(view)
        self.navigator = NoteNavigator(on_rejected=self.on_server_rejected)
        self.form: NoteFormController | None = None

    def mount(self, note: NoteSchema | None, is_editing: bool):
        self.form = NoteFormController(self.navigator, note=note, is_editing=is_editing)

    def _on_field_change(self, field_name: str, e: ValueChangeEventArguments):
        self.form.on_field_change(field_name, e.value)
        self.view.render()

    def on_title_change(self, e: ValueChangeEventArguments):
        self._on_field_change("title", e)

    def on_body_change(self, e: ValueChangeEventArguments):
        self._on_field_change("body", e)

    def on_due_date_change(self, e: ValueChangeEventArguments):
        self._on_field_change("due_date", e)

    def on_tag_draft_change(self, e: ValueChangeEventArguments):
        self.form.on_tag_draft_change(e.value)

    def on_add_tag(self):
        if self.form.add_tag():
            self.view.tag_input.value = self.form.state.new_tag_draft
            self.view.render()

    def on_remove_tag(self, index: int):
        if self.form.remove_tag(index):
            self.view.render()

    def on_submit(self):
        # 校验失败时什么都不做，错误信息已经显示在字段下方
        self.form.submit()
        self.view.render()

    def on_cancel(self):
        self.navigator.go_notes()

    def on_server_rejected(self, errors: Dict[str, str]):
        logger.debug("[on_server_rejected] errors: {}", errors)
        self.view.server_errors = errors
        self.view.render()


class NoteFormView(View["NoteFormPageController"]):
    """新增与编辑共用的表单页"""
    controller_class = NoteFormPageController

    async def _pre_initialize(self):
        self.note_id = self.query_params.get("note_id")
        self.is_editing = self.note_id is not None
        self.server_errors: Dict[str, str] = {}
        self.load_error: str | None = None
        self._rendered_tags: Tuple[str, ...] | None = None

        note = None
        if self.is_editing:
            async with NotesApiClient() as client:
                result = await client.get_note(self.note_id)
            if result.is_err():
                self.load_error = result.err().message
            else:
                note = result.unwrap()
                # 路径里的 id 为准，服务端可能没有回传 id
                if note.id is None:
                    note.id = self.note_id

        self.controller.mount(note, self.is_editing)

    async def _initialize(self):
        controller = self.controller
        form = controller.form
        values = form.values

        build_header(controller.navigator)

        with ui.column().classes("w-full max-w-4xl mx-auto p-8") as self.root:
            controller.navigator.parent = self.root

            ui.label("Edit Note" if self.is_editing else "Create New Note") \
                .classes("text-2xl font-bold text-gray-900 mb-4")

            if self.load_error is not None:
                ui.label(f"Failed to load note {self.note_id}: {self.load_error}").classes("text-red-500")
                ui.button("Back to Notes", on_click=controller.on_cancel).props("flat")
                return

            with ui.card().classes("w-full rounded-lg shadow-md border border-gray-200 p-6 gap-y-6"):
                with FormField("Title", description="Give your note a clear, descriptive title.") as self.title_field:
                    self.title_input = ui.input(placeholder="Note title", value=values.title,
                                                on_change=controller.on_title_change)
                    self.title_input.classes("w-full").props("outlined dense")
                    self.title_counter = CharCounter(MAX_TITLE_LENGTH, form.state.title_chars)

                with FormField("Content", description="Add details, notes, or any additional information.") \
                        as self.body_field:
                    self.body_input = ui.textarea(placeholder="Write your note content here...", value=values.body,
                                                  on_change=controller.on_body_change)
                    self.body_input.classes("w-full").props("outlined rows=4")
                    self.body_counter = CharCounter(MAX_BODY_LENGTH, form.state.body_chars)

                with FormField("Due Date") as self.due_date_field:
                    self.due_date_input = ui.input(value=values.due_date, on_change=controller.on_due_date_change)
                    self.due_date_input.classes("w-full") \
                        .props(f"outlined dense type=date min={date.today().isoformat()}")

                with FormField("Tags", description="Add keywords to help organize your notes.") as self.tags_field:
                    with ui.row().classes("w-full items-center gap-x-0 flex-nowrap"):
                        self.tag_input = ui.input(placeholder="Add a tag and press Enter",
                                                  value=form.state.new_tag_draft,
                                                  on_change=controller.on_tag_draft_change)
                        self.tag_input.classes("flex-grow").props("outlined dense")
                        self.tag_input.on("keydown.enter", controller.on_add_tag)
                        ui.button("Add", on_click=controller.on_add_tag).props("unelevated color=grey-3 text-color=black")
                    self.tags_row = ui.row().classes("w-full flex-wrap gap-2 mt-3")

                ui.separator()

                with ui.row().classes("w-full justify-end gap-x-3"):
                    ui.button("Cancel", on_click=controller.on_cancel).props("outline color=grey-8")
                    self.submit_btn = ui.button("Update Note" if self.is_editing else "Create Note",
                                                on_click=controller.on_submit)
                    self.submit_btn.props("unelevated color=grey-10")

    def render(self):
        if self.load_error is not None:
            return

        form = self.controller.form
        server_errors = self.server_errors

        self.title_counter.set_count(form.state.title_chars)
        self.body_counter.set_count(form.state.body_chars)

        self.title_field.set_error(form.error_for("title", server_errors))
        self.body_field.set_error(form.error_for("body", server_errors))
        self.due_date_field.set_error(form.error_for("due_date", server_errors))
        self.tags_field.set_error(form.error_for("tags", server_errors))

        tags = tuple(form.values.tags)
        if tags != self._rendered_tags:
            self._rendered_tags = tags
            self.tags_row.clear()
            with self.tags_row:
                for index, tag in enumerate(tags):
                    build_tag_chip(tag, on_remove=partial(self.controller.on_remove_tag, index))
            self.tags_row.set_visibility(bool(tags))

        self.submit_btn.set_enabled(form.can_submit)


@ui.page("/notes/new", title="Create New Note")
async def page_new_note():
    await NoteFormView.create()


@ui.page("/notes/{note_id}/edit", title="Edit Note")
async def page_edit_note(note_id: str):
    await NoteFormView.create(query_params={"note_id": note_id})
