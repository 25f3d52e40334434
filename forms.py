"""笔记表单的状态与校验（不依赖 nicegui，方便脱离浏览器测试）

数据流：用户事件 -> controller 修改 state -> 同步重新校验 -> view 重新渲染

"""
import enum
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Protocol, Sequence

from loguru import logger

MAX_TITLE_LENGTH = 100
MAX_BODY_LENGTH = 200

EDITABLE_FIELDS = ("title", "body", "due_date", "tags")


class ErrorKind(enum.Enum):
    REQUIRED_FIELD_MISSING = "required_field_missing"
    LENGTH_EXCEEDED = "length_exceeded"
    DATE_IN_PAST = "date_in_past"


class FieldError(NamedTuple):
    field: str
    kind: ErrorKind
    message: str


class FormPhase(enum.Enum):
    EDITABLE = "editable"
    SUBMITTABLE = "submittable"


class NoteNavigatorProtocol(Protocol):
    """表单提交时唯一的协作者，具体实现见 navigator.py"""

    def create(self, payload: Dict[str, Any]) -> None: ...

    def update(self, note_id: int | str, payload: Dict[str, Any]) -> None: ...


@dataclass
class NoteValues:
    """表单的工作副本"""
    id: int | str | None = None
    title: str = ""
    body: str = ""
    due_date: str = ""
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_note(cls, note: Any = None) -> "NoteValues":
        # note 可以是 NoteSchema、dict 或 None（新增）
        if note is None:
            return cls()
        if not isinstance(note, Mapping):
            note = note.model_dump() if hasattr(note, "model_dump") else vars(note)
        return cls(
            id=note.get("id"),
            title=note.get("title") or "",
            body=note.get("body") or "",
            due_date=_due_date_text(note.get("due_date")),
            tags=list(note.get("tags") or []),
        )

    def payload(self) -> Dict[str, Any]:
        """提交给 Navigator 的数据，id 只用于定位资源，不放进 payload"""
        return {
            "title": self.title,
            "body": self.body,
            "due_date": self.due_date,
            "tags": list(self.tags),
        }


def _due_date_text(value: Any) -> str:
    """values.due_date 始终是字符串，payload 才能直接 json 序列化"""
    if not value:
        return ""
    if isinstance(value, datetime):
        value = value.date()
    if isinstance(value, date):
        return value.isoformat()
    return str(value)


def _parse_due_date(value: Any) -> date | None:
    # datetime 是 date 的子类，不能直接和 date 比较
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logger.debug("due_date is not a calendar date: {!r}", value)
        return None


def collect_field_errors(values: NoteValues, today: date | None = None) -> List[FieldError]:
    """逐字段收集错误，字段之间互不短路，只有 title 的两项检查是互斥的"""
    today = today or date.today()
    errors: List[FieldError] = []

    if not values.title.strip():
        errors.append(FieldError("title", ErrorKind.REQUIRED_FIELD_MISSING, "Title is required"))
    elif len(values.title) > MAX_TITLE_LENGTH:
        errors.append(FieldError("title", ErrorKind.LENGTH_EXCEEDED,
                                 f"Title must be {MAX_TITLE_LENGTH} characters or less"))

    if len(values.body) > MAX_BODY_LENGTH:
        errors.append(FieldError("body", ErrorKind.LENGTH_EXCEEDED,
                                 f"Content must be {MAX_BODY_LENGTH} characters or less"))

    if values.due_date:
        due_date = _parse_due_date(values.due_date)
        if due_date is not None and due_date < today:
            errors.append(FieldError("due_date", ErrorKind.DATE_IN_PAST, "Due date cannot be in the past"))

    return errors


def validate_note(values: NoteValues, today: date | None = None) -> Dict[str, str]:
    return {error.field: error.message for error in collect_field_errors(values, today)}


def merge_error(field_name: str, local_errors: Mapping[str, str], server_errors: Mapping[str, str] | None) -> str | None:
    """本地错误优先，没有时才显示服务端错误"""
    return local_errors.get(field_name) or (server_errors or {}).get(field_name) or None


@dataclass
class FormState:
    values: NoteValues
    validation_errors: Dict[str, str] = field(default_factory=dict)
    is_form_valid: bool = False
    title_chars: int = 0
    body_chars: int = 0
    new_tag_draft: str = ""


class NoteFormController:
    """新增/编辑笔记表单的控制器

    每个 handler 都同步执行完毕，并在结尾调用一次 validate()，所以 view 下一次渲染时
    不存在过期的错误信息。

    Args:
        navigator: 提交时调用 create/update
        note: 编辑模式下的原始笔记，None 为新增
        is_editing: 是否为编辑模式，还需要 note 带有非空 id 才会走 update
        today: 获取“今天”的函数，默认 date.today

    """

    def __init__(self,
                 navigator: NoteNavigatorProtocol,
                 note: Any = None,
                 is_editing: bool = False,
                 today: Callable[[], date] = date.today):
        self.navigator = navigator
        self.today = today
        self.is_editing = is_editing
        self.state = self.initialize(note)

    def initialize(self, note: Any = None) -> FormState:
        values = NoteValues.from_note(note)
        self.state = FormState(values=values, title_chars=len(values.title), body_chars=len(values.body))
        self.validate()
        logger.debug("[initialize] values: {}", values)
        return self.state

    @property
    def values(self) -> NoteValues:
        return self.state.values

    @property
    def validation_errors(self) -> Dict[str, str]:
        return self.state.validation_errors

    @property
    def is_form_valid(self) -> bool:
        return self.state.is_form_valid

    @property
    def is_edit_mode(self) -> bool:
        return bool(self.is_editing) and self.values.id not in (None, "")

    @property
    def phase(self) -> FormPhase:
        return FormPhase.SUBMITTABLE if self.state.is_form_valid else FormPhase.EDITABLE

    @property
    def can_submit(self) -> bool:
        """提交按钮是否可用"""
        return bool(self.values.title.strip()) and not self.state.validation_errors

    def validate(self) -> Dict[str, str]:
        errors = validate_note(self.state.values, self.today())
        self.state.validation_errors = errors
        self.state.is_form_valid = not errors
        return errors

    def error_for(self, field_name: str, server_errors: Mapping[str, str] | None = None) -> str | None:
        return merge_error(field_name, self.state.validation_errors, server_errors)

    def on_field_change(self, field_name: str, new_value: Any) -> None:
        if field_name not in EDITABLE_FIELDS:
            exc = ValueError(f"{field_name} is not an editable note field")
            logger.error(exc)
            raise exc

        if field_name == "tags":
            if new_value is None:
                new_value = []
            if isinstance(new_value, (str, bytes)) or not isinstance(new_value, Sequence):
                exc = TypeError(f"tags must be a list of strings, got {type(new_value).__name__}")
                logger.error(exc)
                raise exc
            new_value = list(new_value)
        elif field_name == "due_date":
            new_value = _due_date_text(new_value)
        elif new_value is None:
            new_value = ""

        setattr(self.state.values, field_name, new_value)
        if field_name == "title":
            self.state.title_chars = len(new_value)
        elif field_name == "body":
            self.state.body_chars = len(new_value)

        self.validate()

    def on_tag_draft_change(self, text: str | None) -> None:
        self.state.new_tag_draft = text or ""

    def add_tag(self, draft_text: str | None = None) -> bool:
        """按钮点击和回车都走这里，返回是否真的添加了"""
        if draft_text is None:
            draft_text = self.state.new_tag_draft
        tag = (draft_text or "").strip()
        if not tag:
            return False

        self.state.values.tags.append(tag)
        self.state.new_tag_draft = ""
        logger.debug("[add_tag] tags: {}", self.state.values.tags)
        self.validate()
        return True

    def remove_tag(self, index: int) -> bool:
        tags = self.state.values.tags
        # 负数下标在 python 里是合法的，这里视为越界
        if not 0 <= index < len(tags):
            logger.debug("[remove_tag] index {} out of range", index)
            return False

        del tags[index]
        self.validate()
        return True

    def submit(self) -> bool:
        # 按钮的可用状态可能早于最后一次编辑，所以这里必须重新校验
        self.validate()
        if not self.state.is_form_valid:
            logger.debug("[submit] aborted, errors: {}", self.state.validation_errors)
            return False

        payload = self.values.payload()
        if self.is_edit_mode:
            logger.debug("[submit] update note {}", self.values.id)
            self.navigator.update(self.values.id, payload)
        else:
            logger.debug("[submit] create note")
            self.navigator.create(payload)
        return True
