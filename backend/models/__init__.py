"""Models package - settings, Pydantic schemas and domain exceptions."""

from .schemas import ContactFormRequest, ContactFormResponse, ContactMessage

__all__ = [
    "ContactFormRequest",
    "ContactFormResponse",
    "ContactMessage",
]
