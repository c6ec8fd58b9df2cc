"""Reusable FastAPI dependencies."""

from .actor import (
    get_crediting_officer,
    get_current_actor,
    get_current_admin,
    get_debiting_officer,
    get_participant,
    get_token_scanner,
    require_roles,
)
from .database import get_app_container, get_db_session, get_transfer_coordinator

__all__ = [
    "get_app_container",
    "get_db_session",
    "get_transfer_coordinator",
    "get_crediting_officer",
    "get_current_actor",
    "get_current_admin",
    "get_debiting_officer",
    "get_participant",
    "get_token_scanner",
    "require_roles",
]
