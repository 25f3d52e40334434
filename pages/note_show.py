from functools import partial

from nicegui import ui

from client import NotesApiClient
from components import build_tag_chip
from navigator import NoteNavigator
from schemas import NoteSchema
from utils import format_date, format_datetime
from views import View, Controller, build_header, confirm_delete


class NoteShowController(Controller["NoteShowView"]):
    def __init__(self, view: "NoteShowView"):
        super().__init__(view)
        self.navigator = NoteNavigator()

    async def load_note(self, note_id: str):
        async with NotesApiClient() as client:
            result = await client.get_note(note_id)
        if result.is_err():
            self.view.load_error = result.err().message
            return
        self.view.note = result.unwrap()

    def on_delete_click(self):
        confirm_delete(partial(self.navigator.delete, self.view.note_id))


class NoteShowView(View["NoteShowController"]):
    controller_class = NoteShowController

    async def _pre_initialize(self):
        self.note_id = self.query_params["note_id"]
        self.note: NoteSchema | None = None
        self.load_error: str | None = None
        await self.controller.load_note(self.note_id)

    async def _initialize(self):
        navigator = self.controller.navigator
        build_header(navigator)

        with ui.column().classes("w-full max-w-4xl mx-auto p-8") as self.root:
            navigator.parent = self.root

            ui.button("← Back to Notes", on_click=navigator.go_notes).props("flat dense").classes("text-gray-700")

            if self.load_error is not None:
                ui.label(f"Failed to load note {self.note_id}: {self.load_error}").classes("text-red-500")
                return

            note = self.note
            with ui.card().classes("w-full rounded-xl shadow-md border border-gray-200 overflow-hidden"):
                with ui.row().classes("w-full items-center justify-between flex-nowrap px-5 pt-4"):
                    title = ui.label(note.title).classes("text-2xl font-bold text-gray-900 truncate")
                    title.style("user-select: text; cursor: text;")
                    with ui.row().classes("gap-x-2 flex-shrink-0"):
                        ui.button("Edit", icon="edit", on_click=partial(navigator.go_edit_note, self.note_id)) \
                            .props("flat dense")
                        ui.button("Delete", icon="delete", on_click=self.controller.on_delete_click) \
                            .props("flat dense color=red")

                ui.separator()

                with ui.grid(columns=3).classes("w-full px-5 pb-4 gap-y-4"):
                    ui.label("Content").classes("text-sm font-medium text-gray-500")
                    ui.label(note.body).classes("col-span-2 text-sm text-gray-900").style("white-space: pre-wrap")

                    ui.label("Due Date").classes("text-sm font-medium text-gray-500")
                    ui.label(format_date(note.due_date, placeholder="Not set")).classes("col-span-2 text-sm")

                    ui.label("Tags").classes("text-sm font-medium text-gray-500")
                    with ui.row().classes("col-span-2 flex-wrap gap-2"):
                        if note.tags:
                            for tag in note.tags:
                                build_tag_chip(tag)
                        else:
                            ui.label("No tags").classes("text-sm text-gray-500")

                    ui.label("Created").classes("text-sm font-medium text-gray-500")
                    ui.label(format_datetime(note.inserted_at)).classes("col-span-2 text-sm")

                    ui.label("Last Updated").classes("text-sm font-medium text-gray-500")
                    ui.label(format_datetime(note.updated_at)).classes("col-span-2 text-sm")


@ui.page("/notes/{note_id}", title="Note")
async def page_note_show(note_id: str):
    await NoteShowView.create(query_params={"note_id": note_id})
