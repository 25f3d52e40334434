"""

Controller：接收 view 转发的用户事件，调用 NoteFormController/Navigator，决定“展示什么”
View：只负责渲染，不包含业务逻辑，状态变化后由 controller 调用 view.render() 重新渲染

表单本身的逻辑在 forms.py 中，脱离 nicegui 也能测试，这里的 Controller 只是 nicegui 事件的转接层。

"""
from typing import Generic, Type, TypeVar, Dict, Any, Callable

from loguru import logger
from nicegui import ui

from navigator import NoteNavigator, NOTES_PATH, NEW_NOTE_PATH
from settings import dynamic_settings

# region - template

V = TypeVar("V", bound="View")
C = TypeVar("C", bound="Controller")


class Controller(Generic[V]):
    """协调 View 与 forms/navigator，处理用户输入"""

    def __init__(self, view: V):
        self.view = view


class View(Generic[C]):
    """负责用户界面展示

    子类设置 controller_class，并实现 _initialize（构建骨架）与 render（按状态刷新）

    """
    controller_class: Type[C]
    _controller: C
    _query_params: Dict[str, Any]

    @property
    def controller(self) -> C:
        if not hasattr(self, "controller_class"):
            exc = NotImplementedError("controller_class has not been initialized")
            logger.error(exc)
            raise exc
        if not hasattr(self, "_controller") or self._controller is None:
            self._controller = self.controller_class(self)
        return self._controller

    @property
    def query_params(self) -> Dict[str, Any]:
        """ui.page 传进来的路径参数"""
        if not hasattr(self, "_query_params") or self._query_params is None:
            exc = NotImplementedError("_query_params has not been initialized")
            logger.error(exc)
            raise exc
        return self._query_params

    @classmethod
    async def create(cls, query_params: Dict[str, Any] | None = None):
        """异步工厂方法"""
        self = cls()
        setattr(self, "_query_params", query_params or {})
        await self._pre_initialize()
        await self._initialize()
        await self._post_initialize()
        return self

    async def _pre_initialize(self):
        """构建骨架前：读取参数、请求数据"""

    async def _post_initialize(self):
        """构建骨架后：第一次 render"""
        self.render()

    async def _initialize(self):
        """初始化 UI 骨架"""
        raise NotImplementedError

    def render(self):
        """根据当前状态刷新已经构建好的元素，默认无事可做"""


# endregion


def build_header(navigator: NoteNavigator) -> ui.header:
    path = ui.context.client.page.path
    list_btn_active = path == NOTES_PATH
    create_btn_active = path == NEW_NOTE_PATH

    with ui.header().classes("bg-white shadow-sm py-3") as header:
        with ui.row().classes("w-full mx-auto max-w-4xl flex justify-between items-center px-4 sm:px-6 md:px-8"):
            ui.label(dynamic_settings.title).classes("text-xl font-bold text-gray-800 cursor-pointer") \
                .on("click", navigator.go_notes)

            ui.space()

            with ui.row().classes("gap-x-2"):
                list_btn = ui.button("Notes", on_click=navigator.go_notes, icon="list")
                list_btn.props("unelevated flat dense").classes("text-sm text-gray-700 px-3 py-1.5 rounded-lg")
                create_btn = ui.button("New Note", on_click=navigator.go_new_note, icon="edit_note")
                create_btn.props("unelevated flat dense").classes("text-sm text-gray-700 px-3 py-1.5 rounded-lg")
                if list_btn_active:
                    list_btn.classes("bg-gray-200")
                if create_btn_active:
                    create_btn.classes("bg-gray-200")

    return header


def confirm_delete(on_confirm: Callable[[], Any]) -> ui.dialog:
    """删除前的确认弹窗，确认后才调用 on_confirm"""

    def confirm():
        dialog.close()
        on_confirm()

    # ┌───────────────────────────────┐
    # │  Are you sure?                │
    # ├───────────────────────────────┤
    # │           [Delete]  [Cancel]  │
    # └───────────────────────────────┘
    dialog = ui.dialog()
    with dialog, ui.card().classes("rounded-xl shadow-lg border border-gray-200 p-5 max-w-sm"):
        with ui.column().classes("items-center text-center gap-3"):
            with ui.row().classes("items-center p-4"):
                ui.icon("warning_amber", size="2rem").classes("text-yellow-500")
                ui.label("Delete note").classes("text-lg font-semibold text-gray-800")
            ui.label("Are you sure you want to delete this note?").classes("text-gray-600 text-sm")
            with ui.row().classes("gap-3 mt-4"):
                ui.button("Delete", icon="delete", on_click=confirm).props("flat dense color=red").classes("px-4")
                ui.button("Cancel", icon="close", on_click=dialog.close).props("flat color=grey").classes("px-4")

    dialog.open()
    return dialog
