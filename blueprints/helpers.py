from __future__ import annotations
from typing import Iterable, List, Optional, Tuple

from flask import current_app, flash, request
from pydantic import ValidationError

from backend_api import BackendException, clamp_page

# человекочитаемые имена полей для сообщений валидации
FIELD_LABELS = {
    "username": "Имя пользователя",
    "password": "Пароль",
    "first_name": "Имя",
    "last_name": "Фамилия",
    "role": "Роль",
    "group_id": "Группа",
    "name": "Название",
    "code": "Код",
    "units": "Кредиты",
    "department": "Кафедра",
    "course_id": "Курс",
    "professor_id": "Преподаватель",
    "capacity": "Вместимость",
    "student_id": "Студент",
    "score": "Оценка",
    "title": "Заголовок",
    "description": "Описание",
    "text": "Комментарий",
    "reason": "Причина",
    "response": "Ответ",
}


def list_args() -> Tuple[int, str]:
    page = clamp_page(request.args.get("page", 1))
    search = (request.args.get("search") or "").strip()
    return page, search


def page_size() -> int:
    return int(current_app.config.get("PAGE_SIZE", 10))


def validation_message(ex: ValidationError) -> str:
    err = ex.errors()[0]
    loc = err.get("loc") or ()
    field = FIELD_LABELS.get(str(loc[0]), str(loc[0])) if loc else ""
    msg = err.get("msg", "некорректное значение")
    return f"{field}: {msg}" if field else msg


def flash_invalid(ex: ValidationError) -> None:
    flash(validation_message(ex), "error")


def flash_backend(ex: BackendException, default: str) -> None:
    flash(ex.message or default, "error")


def flash_bulk_result(data: Optional[dict], success_text: str) -> int:
    """Show ``{successful: [...], errors: [{username, reason}]}`` item by item."""
    data = data or {}
    successful = data.get("successful") or []
    if successful:
        flash(success_text.format(count=len(successful)), "success")
    for err in data.get("errors") or []:
        if isinstance(err, dict):
            flash(f"{err.get('username', '?')}: {err.get('reason', 'ошибка')}", "error")
        else:
            flash(str(err), "error")
    return len(successful)


def parse_ids(values: Iterable[str]) -> List[int]:
    out: List[int] = []
    for v in values:
        v = str(v).strip()
        if v.isdigit() and int(v) not in out:
            out.append(int(v))
    return out


def optional_int(value) -> Optional[int]:
    if value is None:
        return None
    value = str(value).strip()
    return int(value) if value.lstrip("-").isdigit() else None
