# blueprints/courses/routes.py
from __future__ import annotations
from flask import Blueprint, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from backend_api import BackendError, Page
from extensions import backend
from models import Course
from blueprints.auth.routes import admin_required
from blueprints.helpers import flash_backend, flash_invalid, list_args, page_size
from .schemas import CourseIn

bp = Blueprint("courses", __name__, template_folder="../../templates", static_folder="../../static")

def _back():
    page, search = list_args()
    return redirect(url_for("courses.index", page=page, search=search or None))

@bp.get("/")
@admin_required
def index():
    page, search = list_args()
    try:
        courses = backend.list_courses(page, page_size(), search).map(Course.model_validate)
    except BackendError as ex:
        flash_backend(ex, "Не удалось загрузить курсы")
        courses = Page(page=page, limit=page_size())
    return render_template("courses/index.html", courses=courses, search=search)

@bp.post("/")
@admin_required
def create():
    try:
        form = CourseIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    try:
        backend.create_course(form.to_payload())
    except BackendError as ex:
        flash_backend(ex, "Не удалось создать курс")
    else:
        flash("Курс успешно создан", "success")
    return _back()

@bp.post("/<int:course_id>")
@admin_required
def update(course_id: int):
    try:
        form = CourseIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return _back()
    try:
        backend.update_course(course_id, form.to_payload())
    except BackendError as ex:
        flash_backend(ex, "Не удалось обновить курс")
    else:
        flash("Курс обновлён", "success")
    return _back()

@bp.post("/<int:course_id>/delete")
@admin_required
def delete(course_id: int):
    try:
        backend.delete_course(course_id)
    except BackendError as ex:
        flash_backend(ex, "Не удалось удалить курс")
    else:
        flash("Курс удалён", "success")
    return _back()
