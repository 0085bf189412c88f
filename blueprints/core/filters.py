from __future__ import annotations
from datetime import date, datetime, timezone

from flask import current_app

def fmt_date(value: date | datetime | None) -> str:
    if not value:
        return ""
    return value.strftime("%d.%m.%Y")

def fmt_datetime(value: datetime | None) -> str:
    if not value:
        return ""
    return value.strftime("%d.%m.%Y %H:%M")

def _plural(n: int, one: str, few: str, many: str) -> str:
    if n % 10 == 1 and n % 100 != 11:
        return one
    if 2 <= n % 10 <= 4 and not 12 <= n % 100 <= 14:
        return few
    return many

def time_ago(value: datetime | None, now: datetime | None = None) -> str:
    if not value:
        return "Некорректная дата"
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    seconds = int((now - value).total_seconds())
    if seconds < 60:
        return "только что"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes} {_plural(minutes, 'минуту', 'минуты', 'минут')} назад"
    hours = minutes // 60
    if hours < 24:
        return f"{hours} {_plural(hours, 'час', 'часа', 'часов')} назад"
    days = hours // 24
    if days < 30:
        return f"{days} {_plural(days, 'день', 'дня', 'дней')} назад"
    return fmt_date(value)

def fmt_score(value: float | int | None) -> str:
    if value is None:
        return "Не выставлена"
    value = float(value)
    return str(int(value)) if value.is_integer() else f"{value:.2f}".rstrip("0")

def score_status(value: float | int | None) -> str:
    # pass / fail / none: класс цвета плашки
    if value is None:
        return "none"
    return "pass" if value >= current_app.config.get("SCORE_PASSING", 60) else "fail"

def register_filters(app):
    app.add_template_filter(fmt_date, "fmt_date")
    app.add_template_filter(fmt_datetime, "fmt_datetime")
    app.add_template_filter(time_ago, "time_ago")
    app.add_template_filter(fmt_score, "fmt_score")
    app.add_template_filter(score_status, "score_status")
