from flask_login import LoginManager
from flask_wtf import CSRFProtect

from backend_api import BackendClient

csrf = CSRFProtect()
login_manager = LoginManager()
login_manager.login_view = "auth.login"
backend = BackendClient()
