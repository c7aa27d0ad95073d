"""Notification utilities - email."""

from src.amuta.core.notifications.email import (
    build_invite_url,
    send_email,
    send_invite_email,
)

__all__ = [
    "build_invite_url",
    "send_email",
    "send_invite_email",
]
