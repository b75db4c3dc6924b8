"""HTTP translation of domain errors."""

from .errors import register_management_exception_handlers

__all__ = ["register_management_exception_handlers"]
