from __future__ import annotations
import io

from blueprints.teacher.services import filter_sheet, find_group, parse_courses, total_students
from tests.conftest import flashes, login_as

COURSES = {"courses": [{
    "id": 1, "name": "Физика", "code": "PH101", "units": 3,
    "groups": [{
        "id": 4, "groupNumber": 1, "enrollmentCount": 2,
        "students": [
            {"id": 10, "username": "ivan", "firstName": "Иван", "lastName": "Петров", "score": 75},
            {"id": 11, "username": "olga", "firstName": "Ольга", "lastName": "Смирнова", "score": None},
        ],
    }],
}]}

OBJECTIONS = [
    {"id": 7, "courseName": "Физика", "studentName": "Иван Петров", "currentScore": 55,
     "reason": "Ошибка в задаче 3", "status": "pending"},
    {"id": 8, "courseName": "Физика", "studentName": "Ольга", "reason": "—", "status": "resolved",
     "response": "Оставлено без изменений"},
]

def test_parse_courses_accepts_list_and_wrapper():
    courses = parse_courses(COURSES)
    assert courses[0].groups[0].students[1].score is None
    assert total_students(courses) == 2
    assert parse_courses(COURSES["courses"])[0].code == "PH101"
    assert parse_courses(None) == []

def test_find_and_filter():
    courses = parse_courses(COURSES)
    course, group = find_group(courses, 4)
    assert course.name == "Физика" and group.scored_count == 1
    assert find_group(courses, 99) == (None, None)
    assert [s.username for s in filter_sheet(group.students, mode="unscored")] == ["olga"]
    assert [s.username for s in filter_sheet(group.students, "петр")] == ["ivan"]

def test_string_scores_count_as_scored():
    raw = {"courses": [{"id": 1, "name": "Физика", "groups": [{"id": 4, "students": [
        {"id": 10, "username": "ivan", "score": "85.00"},
        {"id": 11, "username": "olga", "score": "12,5"},
        {"id": 12, "username": "petr", "score": "н/д"},
        {"id": 13, "username": "anna", "score": True},
    ]}]}]}
    group = parse_courses(raw)[0].groups[0]
    assert [s.score for s in group.students] == [85.0, 12.5, None, None]
    assert [s.username for s in filter_sheet(group.students, mode="unscored")] == ["petr", "anna"]
    assert group.scored_count == 2

def test_dashboard(client, fake):
    login_as(client, "teacher", user_id=2)
    fake.on("GET", "/course-groups/professor/courses", COURSES)
    fake.on("GET", "/objections/teacher", OBJECTIONS)
    html = client.get("/teacher/").get_data(as_text=True)
    assert "Физика" in html
    assert "студентов: 2" in html
    assert "апелляций на рассмотрении: 1" in html

def test_objections_tab(client, fake):
    login_as(client, "teacher", user_id=2)
    fake.on("GET", "/course-groups/professor/courses", COURSES)
    fake.on("GET", "/objections/teacher", OBJECTIONS)
    html = client.get("/teacher/?tab=objections").get_data(as_text=True)
    assert "Ошибка в задаче 3" in html
    assert "Оставлено без изменений" in html

def test_score_sheet_filters(client, fake):
    login_as(client, "teacher", user_id=2)
    fake.on("GET", "/course-groups/professor/courses", COURSES)
    html = client.get("/teacher/groups/4/scores?show=scored").get_data(as_text=True)
    assert "ivan" in html and "olga" not in html
    assert client.get("/teacher/groups/99/scores").status_code == 404

def test_submit_scores(client, fake):
    login_as(client, "teacher", user_id=2)
    fake.on("POST", "/course-groups/4/scores", {"updated": 1})
    rv = client.post("/teacher/groups/4/scores", data={"score_10": "80", "score_11": "", "score_12": "120"})
    assert rv.status_code == 302
    assert fake.last("POST", "/course-groups/4/scores").json == {"scores": [{"studentId": 10, "score": 80}]}
    assert any(cat == "warning" for cat, _ in flashes(client))

def test_submit_nothing(client, fake):
    login_as(client, "teacher", user_id=2)
    client.post("/teacher/groups/4/scores", data={"score_10": ""})
    assert fake.sent("POST", "/course-groups/4/scores") == []

def test_upload_scores(client, fake):
    login_as(client, "teacher", user_id=2)
    fake.on("POST", "/course-groups/4/scores/upload-excel", {"updated": 3})
    client.post("/teacher/groups/4/scores/upload", data={"file": (io.BytesIO(b"x"), "scores.xlsx")},
                content_type="multipart/form-data")
    assert fake.last("POST", "/course-groups/4/scores/upload-excel").files["file"][0] == "scores.xlsx"

def test_resolve_objection(client, fake):
    login_as(client, "teacher", user_id=2)
    fake.on("POST", "/objections/7/resolve", {})
    client.post("/teacher/objections/7/resolve", data={"response": "  "})
    assert fake.sent("POST", "/objections/7/resolve") == []
    client.post("/teacher/objections/7/resolve", data={"response": "Пересчитано"})
    assert fake.last("POST", "/objections/7/resolve").json == {"response": "Пересчитано"}
