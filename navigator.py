import contextlib
from typing import Any, Callable, Coroutine, Dict

from loguru import logger
from nicegui import background_tasks, ui
from result import Result

from client import NotesApiClient, COLLECTION_PATH
from schemas import ErrorResponse, NoteSchema

NOTES_PATH = COLLECTION_PATH
NEW_NOTE_PATH = f"{NOTES_PATH}/new"


def note_path(note_id: int | str) -> str:
    return f"{NOTES_PATH}/{note_id}"


def edit_note_path(note_id: int | str) -> str:
    return f"{NOTES_PATH}/{note_id}/edit"


class NoteNavigator:
    """页面跳转 + create/update/delete 请求

    对表单来说请求是 fire-and-forget 的：create/update 只把协程丢进后台任务，结果由这里处理，
    服务端校验失败（422）时把 errors 交给 on_rejected，由 view 重新渲染。

    Args:
        parent: 后台任务里没有 slot 上下文，需要显式进入某个元素才能 notify/navigate
        on_rejected: 服务端返回的字段错误
        client_factory: 返回一个 NotesApiClient（async with 使用）
        go: 页面跳转，默认 ui.navigate.to
        notify: 默认 ui.notify
        spawn: 调度协程，默认 background_tasks.create

    """

    def __init__(self,
                 parent: ui.element | None = None,
                 on_rejected: Callable[[Dict[str, str]], None] | None = None,
                 client_factory: Callable[[], NotesApiClient] = NotesApiClient,
                 go: Callable[[str], None] | None = None,
                 notify: Callable[..., Any] | None = None,
                 spawn: Callable[[Coroutine], Any] | None = None):
        self.parent = parent
        self.on_rejected = on_rejected
        self.client_factory = client_factory
        self.go = go or ui.navigate.to
        self.notify = notify or ui.notify
        self.spawn = spawn or (lambda coro: background_tasks.create(coro, name="note_navigator"))

    def _context(self):
        return self.parent if self.parent is not None else contextlib.nullcontext()

    # region - 页面跳转

    def go_notes(self):
        self.go(NOTES_PATH)

    def go_new_note(self):
        self.go(NEW_NOTE_PATH)

    def go_note(self, note_id: int | str):
        self.go(note_path(note_id))

    def go_edit_note(self, note_id: int | str):
        self.go(edit_note_path(note_id))

    # endregion

    def create(self, payload: Dict[str, Any]) -> None:
        logger.debug("[create] payload: {}", payload)
        self.spawn(self.send_create(payload))

    def update(self, note_id: int | str, payload: Dict[str, Any]) -> None:
        logger.debug("[update] note_id: {}, payload: {}", note_id, payload)
        self.spawn(self.send_update(note_id, payload))

    def delete(self, note_id: int | str) -> None:
        logger.debug("[delete] note_id: {}", note_id)
        self.spawn(self.send_delete(note_id))

    async def send_create(self, payload: Dict[str, Any]) -> Result[NoteSchema, ErrorResponse]:
        async with self.client_factory() as client:
            result = await client.create_note(payload)
        self._handle_saved(result, "Note created")
        return result

    async def send_update(self, note_id: int | str, payload: Dict[str, Any]) -> Result[NoteSchema, ErrorResponse]:
        async with self.client_factory() as client:
            result = await client.update_note(note_id, payload)
        self._handle_saved(result, "Note updated", fallback_id=note_id)
        return result

    async def send_delete(self, note_id: int | str) -> Result[bool, ErrorResponse]:
        async with self.client_factory() as client:
            result = await client.delete_note(note_id)
        with self._context():
            if result.is_ok():
                self.notify("Note deleted", type="positive")
                self.go_notes()
            else:
                self.notify(f"Failed to delete note {note_id}: {result.err().message}", type="negative")
        return result

    def _handle_saved(self, result: Result[NoteSchema, ErrorResponse], message: str, fallback_id=None):
        with self._context():
            if result.is_ok():
                note = result.unwrap()
                note_id = note.id if note is not None and note.id is not None else fallback_id
                self.notify(message, type="positive")
                if note_id is not None:
                    self.go_note(note_id)
                else:
                    self.go_notes()
                return

            error = result.err()
            if error.is_rejected:
                logger.debug("[_handle_saved] rejected: {}", error.errors)
                if self.on_rejected is not None:
                    self.on_rejected(dict(error.errors))
                self.notify("Please fix the highlighted fields", type="warning")
            else:
                self.notify(f"Failed to save note: {error.message}", type="negative")
