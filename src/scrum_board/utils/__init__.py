"""Utility functions and helpers."""

from scrum_board.utils.db_compat import (
    DbDialect,
    detect_dialect,
    is_sync_url,
    mask_url_password,
    requires_static_pool,
)

__all__ = [
    "DbDialect",
    "detect_dialect",
    "is_sync_url",
    "mask_url_password",
    "requires_static_pool",
]
