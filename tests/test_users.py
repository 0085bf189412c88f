from __future__ import annotations
import io
import threading

from backend_api import BackendError, Page
from blueprints.users.services import UserListing, changed_fields, summarize_upload
from models import User
from tests.conftest import flashes, login_as

class StubClient:
    def __init__(self, pages=None, error=None):
        self.pages = pages or {}
        self.error = error
        self.calls = []
        self.created = []

    def list_users(self, **params):
        self.calls.append(params)
        if self.error:
            raise self.error
        return self.pages.get(params.get("search"), Page(items=[], total_pages=1))

    def create_user_manual(self, *args):
        self.created.append(args)

def test_fetch_merges_filters():
    client = StubClient()
    listing = UserListing(client, limit=10)
    listing.fetch_users(role="Teacher", search="  ")
    listing.fetch_users(page=2)
    assert client.calls[-1] == {"page": 2, "limit": 10, "search": None, "role": "teacher", "group_id": None}

def test_fetch_populates_users():
    client = StubClient(pages={"iv": Page(items=[{"id": 1, "username": "ivan", "role": "student"}],
                                          total_pages=3, total=25)})
    listing = UserListing(client)
    assert listing.fetch_users(search="iv") is True
    assert [u.username for u in listing.users] == ["ivan"]
    assert listing.total_pages == 3
    assert listing.loading is False and listing.error is None

def test_fetch_error_resets_list():
    listing = UserListing(StubClient(error=BackendError("Сервер недоступен", 503)))
    listing.users = [User(id=1, username="old")]
    assert listing.fetch_users() is False
    assert listing.users == []
    assert listing.total_pages == 1
    assert listing.error == "Сервер недоступен"

def test_newer_fetch_wins_over_slow_one():
    entered, gate = threading.Event(), threading.Event()

    class SlowClient(StubClient):
        def list_users(self, **params):
            self.calls.append(params)
            if params["search"] == "a":
                entered.set()
                gate.wait(5)
                return Page(items=[{"id": 1, "username": "stale"}], total_pages=9)
            return Page(items=[{"id": 2, "username": "fresh"}], total_pages=2)

    listing = UserListing(SlowClient())
    result = []
    t = threading.Thread(target=lambda: result.append(listing.fetch_users(search="a")))
    t.start()
    assert entered.wait(5)
    assert listing.fetch_users(search="ab") is True
    gate.set()
    t.join(5)

    assert result == [False]
    assert [u.username for u in listing.users] == ["fresh"]
    assert listing.total_pages == 2
    assert listing.filters.search == "ab"

def test_mutation_refetches():
    client = StubClient()
    listing = UserListing(client, role="student")
    assert listing.create_user("u", "p", "student", "Имя", "Фамилия", 3) is True
    assert client.created == [("u", "p", "Имя", "Фамилия", "student", 3)]
    assert client.calls[-1]["role"] == "student"

def test_changed_fields_only_diff():
    current = User(id=1, username="a", role="student", first_name="Иван", last_name="Петров")
    assert changed_fields(current, "a", "student", "Иван", "Петров", None) == {}
    assert changed_fields(current, "b", "teacher", "Иван", "", "pw") == {
        "username": "b", "role": "teacher", "lastName": "", "password": "pw",
    }

def test_summarize_upload():
    s = summarize_upload({"users": [{"username": "a"}], "reactivated": [{"username": "b"}],
                          "duplicates": [{"username": "c", "message": "exists"}], "errors": ["row 4"]})
    assert [u["username"] for u in s["valid"]] == ["a", "b"]
    assert s["errors"] == ["row 4"]

# ---------- страницы ----------
def test_users_page_renders(client, fake):
    login_as(client, "admin")
    fake.on("GET", "/users", {"items": [{"id": 1, "username": "ivan", "firstName": "Иван", "role": "student",
                                         "groupName": "ИТ-1"}], "meta": {"totalPages": 2}})
    fake.on("GET", "/groups", {"items": [{"id": 3, "name": "ИТ-1"}]})
    rv = client.get("/admin/users/?role=student&search=iv")
    assert rv.status_code == 200
    html = rv.get_data(as_text=True)
    assert "ivan" in html and "Страница 1 из 2" in html
    assert fake.sent("GET", "/users")[0].params == {"page": 1, "limit": 10, "search": "iv", "role": "student"}

def test_student_requires_group(client, fake):
    login_as(client, "admin")
    rv = client.post("/admin/users/", data={"username": "s", "password": "p", "first_name": "А",
                                            "last_name": "Б", "role": "student"})
    assert rv.status_code == 302
    assert fake.sent("POST", "/users/manual") == []
    assert any(cat == "error" for cat, _ in flashes(client))

def test_create_user(client, fake):
    login_as(client, "admin")
    fake.on("POST", "/users/manual", {"id": 9}, status=201)
    rv = client.post("/admin/users/", data={"username": "t", "password": "p", "first_name": "А",
                                            "last_name": "Б", "role": "teacher", "group_id": ""})
    assert rv.status_code == 302
    body = fake.last("POST", "/users/manual").json
    assert body["username"] == "t" and body["role"] == "teacher"
    assert "groupId" not in body

def test_update_sends_only_changes(client, fake):
    login_as(client, "admin")
    fake.on("PATCH", "/users/5", {"id": 5})
    client.post("/admin/users/5", data={
        "username": "a", "role": "student", "first_name": "Новое", "last_name": "Петров", "password": "",
        "orig_username": "a", "orig_role": "student", "orig_first_name": "Старое", "orig_last_name": "Петров",
    })
    assert fake.last("PATCH", "/users/5").json == {"firstName": "Новое"}

def test_bulk_delete(client, fake):
    login_as(client, "admin")
    fake.on("POST", "/users/bulk-delete", {"deleted": 2})
    rv = client.post("/admin/users/bulk-delete", data={"user_ids": ["1", "2", "2", "x"]})
    assert rv.status_code == 302
    assert fake.last("POST", "/users/bulk-delete").json == {"userIds": [1, 2]}

def test_delete_goes_through_listing_and_keeps_filters(client, fake):
    login_as(client, "admin")
    fake.on("DELETE", "/users/5", None, status=204)
    rv = client.post("/admin/users/5/delete?role=student&page=2")
    assert rv.status_code == 302
    assert "role=student" in rv.headers["Location"] and "page=2" in rv.headers["Location"]
    assert ("success", "Пользователь успешно удалён") in flashes(client)
    # список перечитает GET после redirect, не сам POST
    assert fake.sent("GET", "/users") == []

def test_delete_failure_flashes_listing_error(client, fake):
    login_as(client, "admin")
    fake.on("DELETE", "/users/5", None, status=500)
    client.post("/admin/users/5/delete")
    assert ("error", "Не удалось удалить пользователя") in flashes(client)
    fake.on("DELETE", "/users/5", {"message": "Нельзя удалить себя"}, status=400)
    client.post("/admin/users/5/delete")
    assert ("error", "Нельзя удалить себя") in flashes(client)

def test_listing_mutation_error_keeps_old_page():
    def boom(*args):
        raise BackendError(None, 500)

    client = StubClient()
    client.create_user_manual = boom
    listing = UserListing(client)
    assert listing.create_user("u", "p", "teacher", refresh=False) is False
    assert listing.error == "Не удалось создать пользователя"
    assert client.calls == []

def test_delete_all_students_needs_confirmation(client, fake):
    login_as(client, "admin")
    fake.on("DELETE", "/users/students", {})
    client.post("/admin/users/students/delete-all")
    assert fake.sent("DELETE", "/users/students") == []
    client.post("/admin/users/students/delete-all", data={"confirm": "yes"})
    assert len(fake.sent("DELETE", "/users/students")) == 1

def test_upload_shows_summary(client, fake):
    login_as(client, "admin")
    fake.on("POST", "/users/upload-excel", {"users": [{"username": "new1"}], "reactivated": [],
                                            "duplicates": [], "errors": []})
    fake.on("GET", "/users", {"items": []})
    rv = client.post("/admin/users/upload", data={"file": (io.BytesIO(b"xlsx"), "u.xlsx")},
                     content_type="multipart/form-data")
    assert rv.status_code == 200
    assert "new1" in rv.get_data(as_text=True)

def test_users_api_returns_camel_case(client, fake):
    login_as(client, "admin")
    fake.on("GET", "/users", {"items": [{"id": 1, "username": "ivan", "first_name": "Иван"}],
                              "meta": {"totalPages": 1}})
    rv = client.get("/api/v1/users?search=iv")
    data = rv.get_json()
    assert rv.status_code == 200
    assert data["items"][0]["firstName"] == "Иван"
    assert data["meta"]["totalPages"] == 1
