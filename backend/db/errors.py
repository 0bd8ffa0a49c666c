"""Database error helpers."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy.exc import IntegrityError


def is_unique_violation(error: IntegrityError) -> bool:
    """Return True when the IntegrityError indicates a unique-constraint conflict."""
    original = getattr(error, "orig", None)
    sqlstate = getattr(original, "sqlstate", None) or getattr(original, "pgcode", None)
    if sqlstate == "23505":
        return True
    message = str(original or error).lower()
    return "duplicate key" in message or "unique constraint" in message


def unique_violation_field(
    error: IntegrityError,
    candidates: Iterable[str],
) -> str | None:
    """Best-effort guess of which column caused a unique violation.

    PostgreSQL reports ``Key (username)=(...)`` or the constraint name
    (``ix_users_username``); SQLite reports ``UNIQUE constraint failed:
    users.username``. Returns None when no candidate column is mentioned.
    """
    original = getattr(error, "orig", None)
    constraint_name = getattr(getattr(original, "diag", None), "constraint_name", None)
    message = f"{constraint_name or ''} {original or error}".lower()
    for field in candidates:
        lowered = field.lower()
        if (
            f"({lowered})" in message
            or f".{lowered}" in message
            or f"_{lowered}" in message
        ):
            return field
    return None


__all__ = ["is_unique_violation", "unique_violation_field"]
