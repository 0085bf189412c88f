# blueprints/student/routes.py
from __future__ import annotations
from typing import Any, List

from flask import Blueprint, flash, redirect, render_template, request, url_for
from pydantic import ValidationError

from backend_api import BackendError, BackendNotFound
from extensions import backend
from models import Enrollment, Objection
from blueprints.auth.routes import student_required
from blueprints.enrollments.services import is_passing
from blueprints.helpers import flash_backend, flash_invalid
from .schemas import ObjectionIn

bp = Blueprint("student", __name__, template_folder="../../templates", static_folder="../../static")

def _items(payload: Any, key: str) -> List[dict]:
    if isinstance(payload, dict):
        payload = payload.get(key) or payload.get("items")
    return [r for r in payload or [] if isinstance(r, dict) and r.get("id") is not None]

def load_enrollments() -> List[Enrollment]:
    try:
        payload = backend.get_student_enrollments()
    except BackendNotFound:
        # ещё ни на что не записан
        return []
    return [Enrollment.model_validate(r) for r in _items(payload, "enrollments")]

@bp.get("/")
@student_required
def dashboard():
    try:
        enrollments = load_enrollments()
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении курсов")
        enrollments = []
    try:
        objections = [Objection.model_validate(r)
                      for r in _items(backend.list_student_objections(), "objections")]
    except BackendError as ex:
        flash_backend(ex, "Ошибка при получении апелляций")
        objections = []
    graded = [e for e in enrollments if e.is_graded]
    return render_template(
        "student/dashboard.html",
        enrollments=enrollments,
        objections=objections,
        graded=len(graded),
        passed=sum(1 for e in graded if is_passing(e.score)),
    )

@bp.post("/objections")
@student_required
def submit_objection():
    try:
        form = ObjectionIn.model_validate(request.form.to_dict())
    except ValidationError as ex:
        flash_invalid(ex)
        return redirect(url_for("student.dashboard"))
    try:
        backend.submit_objection(form.enrollment_id, form.reason)
    except BackendError as ex:
        flash_backend(ex, "Ошибка при отправке апелляции")
    else:
        flash("Апелляция отправлена", "success")
    return redirect(url_for("student.dashboard"))
