from functools import partial
from typing import List

from fastapi.responses import RedirectResponse
from loguru import logger
from nicegui import ui

from client import NotesApiClient
from components import build_tag_chip
from navigator import NoteNavigator, NOTES_PATH
from schemas import NoteSchema
from utils import format_date, format_datetime
from views import View, Controller, build_header, confirm_delete


@ui.page("/")
async def page_index():
    return RedirectResponse(NOTES_PATH)


class NotesController(Controller["NotesView"]):
    def __init__(self, view: "NotesView"):
        super().__init__(view)
        self.navigator = NoteNavigator()

    async def load_notes(self):
        async with NotesApiClient() as client:
            result = await client.list_notes()
        if result.is_err():
            self.view.load_error = result.err().message
            return
        self.view.notes = result.unwrap()
        logger.debug("[load_notes] count: {}", len(self.view.notes))

    def on_delete_click(self, note_id):
        confirm_delete(partial(self.navigator.delete, note_id))


class NotesView(View["NotesController"]):
    controller_class = NotesController

    async def _pre_initialize(self):
        self.notes: List[NoteSchema] = []
        self.load_error: str | None = None
        await self.controller.load_notes()

    async def _initialize(self):
        navigator = self.controller.navigator
        build_header(navigator)

        with ui.column().classes("w-full max-w-4xl mx-auto p-8 gap-y-6") as self.root:
            navigator.parent = self.root

            with ui.row().classes("w-full items-center justify-between"):
                ui.label("Notes").classes("text-2xl font-bold text-gray-900")
                ui.button("Create New Note", on_click=navigator.go_new_note).props("unelevated color=grey-10")

            if self.load_error is not None:
                ui.label(f"Failed to load notes: {self.load_error}").classes("text-red-500")
                return

            if not self.notes:
                with ui.card().classes("w-full items-center text-center p-10 border border-gray-200 shadow-none"):
                    ui.label("No notes yet").classes("text-gray-500")
                    ui.button("Create Your First Note", on_click=navigator.go_new_note).props("flat")
                return

            with ui.grid().classes("w-full grid-cols-1 md:grid-cols-2 gap-4"):
                for note in self.notes:
                    self.build_note_card(note)

    def build_note_card(self, note: NoteSchema):
        navigator = self.controller.navigator
        with ui.card().classes("w-full rounded-lg border border-gray-200 shadow-sm"):
            with ui.row().classes("w-full items-start justify-between flex-nowrap"):
                ui.label(note.title).classes("text-lg font-semibold text-gray-900 truncate")
                with ui.row().classes("gap-x-1 flex-shrink-0"):
                    ui.button("Edit", on_click=partial(navigator.go_edit_note, note.id)).props("flat dense")
                    ui.button("Delete", on_click=partial(self.controller.on_delete_click, note.id)) \
                        .props("flat dense color=red")

            ui.label(note.body).classes("text-sm text-gray-600 line-clamp-3").style("white-space: pre-wrap")
            ui.label(format_date(note.due_date, placeholder="No due date")).classes("text-xs text-gray-500")

            if note.tags:
                with ui.row().classes("flex-wrap gap-2"):
                    for tag in note.tags:
                        build_tag_chip(tag)

            with ui.row().classes("w-full items-center justify-between"):
                ui.label(f"Created: {format_datetime(note.inserted_at)}").classes("text-xs text-gray-400")
                ui.button("View Details →", on_click=partial(navigator.go_note, note.id)).props("flat dense")


@ui.page(NOTES_PATH, title="Notes")
async def page_notes():
    await NotesView.create()
