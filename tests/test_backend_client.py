from __future__ import annotations
import io

import pytest
import requests
from flask import session
from werkzeug.datastructures import FileStorage

from backend_api import (
    BackendError, BackendNotFound, BackendUnauthorized, BackendUnavailable, BackendValidationError,
)
from backend_api.errors import extract_message
from extensions import backend

def test_bearer_token_comes_from_session(app, fake):
    fake.on("GET", "/users/me", {"id": 1})
    with app.test_request_context("/"):
        session["auth"] = {"token": "t-1", "user_id": 1, "role": "admin"}
        backend.get_current_user()
    assert fake.calls[-1].headers["Authorization"] == "Bearer t-1"

def test_no_session_no_authorization_header(app, fake):
    fake.on("GET", "/users/me", {"id": 1})
    with app.test_request_context("/"):
        backend.get_current_user()
    assert "Authorization" not in fake.calls[-1].headers

def test_empty_params_are_dropped(app, fake):
    fake.on("GET", "/users", {"items": [], "meta": {"totalPages": 1}})
    with app.test_request_context("/"):
        backend.list_users(page=2, limit=10, search="", role=None, group_id=5)
    assert fake.calls[-1].params == {"page": 2, "limit": 10, "groupId": 5}

@pytest.mark.parametrize("status,exc", [
    (400, BackendValidationError),
    (409, BackendValidationError),
    (422, BackendValidationError),
    (404, BackendNotFound),
    (500, BackendError),
])
def test_status_maps_to_exception(app, fake, status, exc):
    fake.on("GET", "/courses", {"message": "boom"}, status=status)
    with app.test_request_context("/"):
        with pytest.raises(exc) as ei:
            backend.list_courses()
    assert ei.value.status == status
    assert ei.value.message == "boom"

def test_unauthorized_is_not_a_backend_error(app, fake):
    fake.on("GET", "/courses", {"message": "Unauthorized"}, status=401)
    with app.test_request_context("/"):
        with pytest.raises(BackendUnauthorized) as ei:
            backend.list_courses()
    assert not isinstance(ei.value, BackendError)

def test_message_list_is_joined(app, fake):
    fake.on("POST", "/courses", {"message": ["name should not be empty", "units must be positive"]},
            status=400)
    with app.test_request_context("/"):
        with pytest.raises(BackendValidationError) as ei:
            backend.create_course({"name": ""})
    assert ei.value.message == "name should not be empty; units must be positive"

def test_extract_message_fallbacks():
    assert extract_message({"error": "Bad Request"}) == "Bad Request"
    assert extract_message({"message": []}) is None
    assert extract_message("plain text") == "plain text"
    assert extract_message(None) is None

def test_error_without_body_leaves_message_to_the_view(app, fake):
    fake.on("DELETE", "/groups/3", None, status=500)
    with app.test_request_context("/"):
        with pytest.raises(BackendError) as ei:
            backend.delete_group(3)
    assert ei.value.message is None
    assert ei.value.status == 500
    assert str(ei.value) == "500: Сервер вернул ошибку"

def test_timeout_becomes_unavailable(app, fake):
    fake.fail("GET", "/tickets", requests.Timeout("slow"))
    with app.test_request_context("/"):
        with pytest.raises(BackendUnavailable) as ei:
            backend.list_tickets()
    assert ei.value.status is None

def test_empty_body_returns_none(app, fake):
    fake.on("DELETE", "/users/9", None, status=204)
    with app.test_request_context("/"):
        assert backend.delete_user(9) is None

def test_score_update_uses_configured_method(app, fake):
    fake.on("PATCH", "/enrollments/42/score", {"id": 42, "score": 85})
    with app.test_request_context("/"):
        backend.update_score(42, 85)
    call = fake.last("PATCH", "/enrollments/42/score")
    assert call.json == {"score": 85}

def test_upload_sends_multipart_file(app, fake):
    fake.on("POST", "/users/upload-excel", {"users": []})
    upload = FileStorage(stream=io.BytesIO(b"data"), filename="users.xlsx",
                         content_type="application/vnd.ms-excel")
    with app.test_request_context("/"):
        backend.upload_users_excel(upload)
    files = fake.last("POST", "/users/upload-excel").files
    assert files["file"][0] == "users.xlsx"

@pytest.mark.parametrize("method,args,verb,path,body", [
    ("delete_users", ([1, 2],), "POST", "/users/bulk-delete", {"userIds": [1, 2]}),
    ("add_students_to_group_by_username", (3, ["a", "b"]), "POST", "/groups/3/students/bulk",
     {"usernames": ["a", "b"]}),
    ("remove_students_from_course_group", (4, [7]), "POST", "/course-groups/4/students/remove",
     {"studentIds": [7]}),
    ("create_enrollment", (5, 6), "POST", "/enrollments", {"studentId": 5, "groupId": 6}),
    ("submit_objection", (11, "почему 40?"), "POST", "/objections/submit",
     {"enrollmentId": 11, "reason": "почему 40?"}),
    ("resolve_objection", (2, "пересмотрено"), "POST", "/objections/2/resolve", {"response": "пересмотрено"}),
    ("add_ticket_comment", (8, "ок"), "POST", "/tickets/8/comments", {"text": "ок"}),
])
def test_endpoint_shapes(app, fake, method, args, verb, path, body):
    fake.on(verb, path, {})
    with app.test_request_context("/"):
        getattr(backend, method)(*args)
    assert fake.last(verb, path).json == body
