from typing import Callable, Literal

from nicegui import ui

# [note] 数据流动方向 components.py -> views.py -> pages（谨防循环依赖问题）

CounterTone = Literal["normal", "warning", "danger"]

COUNTER_TONE_COLORS = {
    "normal": "grey-7",
    "warning": "amber-7",
    "danger": "red",
}


def char_counter_percentage(current: int, maximum: int) -> float:
    """进度条宽度，超出上限时封顶 100"""
    if maximum <= 0:
        return 100.0
    return min(100.0, current / maximum * 100)


def char_counter_tone(current: int, maximum: int) -> CounterTone:
    """75% 以下正常，90% 以下警告，其余危险"""
    percentage = current / maximum * 100 if maximum > 0 else 100.0
    if percentage < 75:
        return "normal"
    if percentage < 90:
        return "warning"
    return "danger"


class CharCounter:
    """字数进度条 + current/max 文本"""

    def __init__(self, maximum: int, current: int = 0):
        self.maximum = maximum
        with ui.column().classes("w-full gap-y-1 mt-1"):
            self.bar = ui.linear_progress(value=0, show_value=False, size="4px").props("rounded")
            self.label = ui.label().classes("w-full text-xs text-right")
        self.set_count(current)

    def set_count(self, current: int):
        tone = char_counter_tone(current, self.maximum)
        color = COUNTER_TONE_COLORS[tone]
        self.bar.set_value(char_counter_percentage(current, self.maximum) / 100)
        self.bar.props(f"color={color}")
        self.label.set_text(f"{current}/{self.maximum}")
        self.label.classes(replace=f"w-full text-xs text-right text-{color}")


class FormField:
    """label + 控件 + 描述 + 错误信息

    使用方式：
        with FormField("Title", description="...") as title_field:
            ui.input(...)
        title_field.set_error("Title is required")

    """

    def __init__(self, label: str, description: str | None = None):
        self.container = ui.column().classes("w-full gap-y-1")
        with self.container:
            ui.label(label).classes("text-sm font-medium leading-none")
            self.control = ui.column().classes("w-full gap-y-1")
            if description:
                ui.label(description).classes("text-sm text-gray-500")
            self.error_label = ui.label().classes("text-sm font-medium text-red-500")
            self.error_label.set_visibility(False)

    def __enter__(self) -> "FormField":
        self.control.__enter__()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.control.__exit__(exc_type, exc_val, exc_tb)

    def set_error(self, message: str | None):
        self.error_label.set_text(message or "")
        self.error_label.set_visibility(bool(message))


def build_tag_chip(text: str, on_remove: Callable[[], None] | None = None) -> ui.row:
    """标签，on_remove 为 None 时只读"""
    with ui.row().classes(
            "items-center gap-x-1 rounded-md border border-gray-200 bg-gray-100 "
            "px-2.5 py-0.5 text-xs font-semibold text-gray-800"
    ) as chip:
        ui.label(text)
        if on_remove is not None:
            remove_btn = ui.button(icon="close", on_click=on_remove).props("flat round dense size=xs color=grey")
            remove_btn.tooltip("Remove tag")
    return chip
