from src.emails.render import (
    EmailData,
    LocaleType,
    TemplateType,
    render_email,
)
from src.emails.sender import EmailSender

__all__ = [
    "EmailData",
    "EmailSender",
    "LocaleType",
    "TemplateType",
    "render_email",
]
