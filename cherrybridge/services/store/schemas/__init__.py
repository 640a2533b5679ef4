"""Schemas for persisted session records."""

from cherrybridge.services.store.schemas.session_file import SessionRecord

__all__ = ["SessionRecord"]
