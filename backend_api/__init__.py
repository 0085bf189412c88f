from .client import BackendClient
from .errors import (
    BackendError,
    BackendException,
    BackendNotFound,
    BackendUnauthorized,
    BackendUnavailable,
    BackendValidationError,
)
from .pagination import Page, clamp_page, total_pages_for

__all__ = [
    "BackendClient",
    "BackendError",
    "BackendException",
    "BackendNotFound",
    "BackendUnauthorized",
    "BackendUnavailable",
    "BackendValidationError",
    "Page",
    "clamp_page",
    "total_pages_for",
]
