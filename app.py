from __future__ import annotations
import os
from importlib import import_module
from flask import Flask
from config import config_map
from extensions import backend, csrf, login_manager

def register_blueprints(app: Flask) -> None:
    # Жёстко импортируем модуль с маршрутами core перед взятием bp
    import_module("blueprints.core.routes")
    from blueprints.core import bp as core_bp, api_bp as core_api_bp
    from blueprints.auth.routes import bp as auth_bp
    from blueprints.admin.routes import bp as admin_bp, api_bp as admin_api_bp
    from blueprints.users.routes import bp as users_bp, api_bp as users_api_bp
    from blueprints.courses.routes import bp as courses_bp
    from blueprints.groups.routes import bp as groups_bp
    from blueprints.course_groups.routes import bp as course_groups_bp, api_bp as course_groups_api_bp
    from blueprints.enrollments.routes import bp as enrollments_bp
    from blueprints.teacher.routes import bp as teacher_bp
    from blueprints.student.routes import bp as student_bp
    from blueprints.tickets.routes import bp as tickets_bp

    # core и auth без префикса → '/', '/health', '/login' в корне
    app.register_blueprint(core_bp)
    app.register_blueprint(auth_bp)
    app.register_blueprint(admin_bp, url_prefix="/admin")
    app.register_blueprint(users_bp, url_prefix="/admin/users")
    app.register_blueprint(courses_bp, url_prefix="/admin/courses")
    app.register_blueprint(groups_bp, url_prefix="/admin/groups")
    app.register_blueprint(course_groups_bp, url_prefix="/admin/course-groups")
    app.register_blueprint(enrollments_bp, url_prefix="/admin")
    app.register_blueprint(teacher_bp, url_prefix="/teacher")
    app.register_blueprint(student_bp, url_prefix="/student")
    app.register_blueprint(tickets_bp, url_prefix="/tickets")
    app.register_blueprint(core_api_bp, url_prefix="/api/v1")
    app.register_blueprint(users_api_bp, url_prefix="/api/v1")
    app.register_blueprint(admin_api_bp, url_prefix="/api/v1")
    app.register_blueprint(course_groups_api_bp, url_prefix="/api/v1")

def create_app(config_name: str | None = None) -> Flask:
    app = Flask(__name__, instance_relative_config=True)
    app.config.setdefault("SECRET_KEY", "change-me-in-prod")
    cfg_name = config_name or os.getenv("FLASK_CONFIG", "default")
    app.config.from_object(config_map[cfg_name])
    # pytest всегда выставляет PYTEST_CURRENT_TEST: никаких походов в настоящий backend
    if os.environ.get("PYTEST_CURRENT_TEST"):
        app.config["TESTING"] = True
    app.config.setdefault("WTF_CSRF_TIME_LIMIT", None)
    app.config.setdefault("WTF_CSRF_CHECK_DEFAULT", True)
    app.config.setdefault("WTF_CSRF_HEADERS", ["X-CSRF-Token", "X-CSRFToken"])

    from blueprints.auth.session import current_token
    csrf.init_app(app)
    login_manager.init_app(app)
    backend.init_app(app, token_provider=current_token)
    register_blueprints(app)
    return app

if __name__ == "__main__":
    create_app().run()
