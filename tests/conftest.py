from __future__ import annotations
import json
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import pytest
import requests

from app import create_app
from extensions import backend

@dataclass
class Call:
    method: str
    path: str
    params: Dict[str, Any] = field(default_factory=dict)
    json: Any = None
    files: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

class FakeBackend:
    """Stands in for ``requests.Session`` inside the backend client."""

    def __init__(self, base_url: str):
        self.base_url = base_url.rstrip("/")
        self.routes: Dict[tuple, Any] = {}
        self.calls: list[Call] = []
        self.headers: Dict[str, str] = {}

    def on(self, method: str, path: str, body: Any = None, status: int = 200):
        self.routes[(method.upper(), path)] = (status, body)
        return self

    def fail(self, method: str, path: str, exc: Exception):
        self.routes[(method.upper(), path)] = exc
        return self

    def request(self, method, url, params=None, json=None, files=None, headers=None, timeout=None):
        path = url[len(self.base_url):]
        self.calls.append(Call(method.upper(), path, dict(params or {}), json, files, dict(headers or {})))
        route = self.routes.get((method.upper(), path))
        if isinstance(route, Exception):
            raise route
        status, body = route if route else (404, {"message": "Not Found", "statusCode": 404})
        return make_response(status, body)

    def sent(self, method: str, path: str) -> list[Call]:
        return [c for c in self.calls if c.method == method.upper() and c.path == path]

    def last(self, method: str, path: str) -> Optional[Call]:
        found = self.sent(method, path)
        return found[-1] if found else None

def make_response(status: int, body: Any = None) -> requests.Response:
    resp = requests.Response()
    resp.status_code = status
    resp.encoding = "utf-8"
    if body is None:
        resp._content = b""
    elif isinstance(body, (str, bytes)):
        resp._content = body.encode("utf-8") if isinstance(body, str) else body
        resp.headers["Content-Type"] = "text/plain"
    else:
        resp._content = json.dumps(body).encode("utf-8")
        resp.headers["Content-Type"] = "application/json"
    return resp

@pytest.fixture()
def app():
    return create_app("test")

@pytest.fixture()
def fake(app):
    fb = FakeBackend(app.config["BACKEND_API_URL"])
    backend.http = fb
    return fb

@pytest.fixture()
def client(app, fake):
    return app.test_client()

def login_as(client, role: str, user_id: int = 1, username: str = "user", token: str = "tok"):
    with client.session_transaction() as s:
        s["auth"] = {"token": token, "user_id": user_id, "role": role, "username": username}
        s["_user_id"] = str(user_id)
        s["_fresh"] = True

def flashes(client) -> list:
    with client.session_transaction() as s:
        return list(s.get("_flashes", []))
