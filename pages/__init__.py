# [note] 一个 py 文件只放一类页面；/notes/new 必须先于 /notes/{note_id} 注册，否则 new 会被当成 id


def register_pages():
    from . import notes, note_form, note_show  # noqa: F401
