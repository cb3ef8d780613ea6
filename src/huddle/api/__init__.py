"""HTTP adapter helpers shared by routers mounted on the Huddle app."""

from .errors import STATUS_BY_CODE, register_exception_handlers, status_for

__all__ = ["STATUS_BY_CODE", "register_exception_handlers", "status_for"]
