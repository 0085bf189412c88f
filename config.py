from __future__ import annotations
import os
from pathlib import Path

class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
    BASE_DIR = Path(__file__).resolve().parent

    # внешний REST backend: единственный источник данных
    BACKEND_API_URL = os.getenv("BACKEND_API_URL", "http://localhost:3001")
    BACKEND_TIMEOUT = float(os.getenv("BACKEND_TIMEOUT", "10"))

    PAGE_SIZE = int(os.getenv("PAGE_SIZE", "10"))
    SEARCH_DEBOUNCE_MS = 500
    # "все" пользователи/курсы для виджета статистики и выпадающих списков
    LOOKUP_LIMIT = 100
    STATS_LIMIT = 1000

    # единая шкала оценок для всех экранов
    SCORE_MIN = 0
    SCORE_MAX = 100
    SCORE_PASSING = 60
    SCORE_UPDATE_METHOD = "PATCH"

    AUTH_SESSION_KEY = "auth"
    SESSION_COOKIE_SAMESITE = "Lax"
    SESSION_COOKIE_HTTPONLY = True

    WTF_CSRF_TIME_LIMIT = None
    WTF_CSRF_HEADERS = ["X-CSRF-Token", "X-CSRFToken"]

class DevConfig(BaseConfig):
    DEBUG = True

class ProdConfig(BaseConfig):
    DEBUG = False
    JSON_SORT_KEYS = False
    SESSION_COOKIE_SECURE = True

class TestConfig(BaseConfig):
    TESTING = True
    WTF_CSRF_ENABLED = False
    BACKEND_API_URL = "http://backend.test"

config_map = {
    "dev": DevConfig,
    "prod": ProdConfig,
    "test": TestConfig,
    "default": DevConfig,
}
