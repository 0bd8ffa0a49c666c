"""Who is looking at a read operation."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union


@dataclass(frozen=True)
class Anonymous:
    """A request without a valid identity."""

    @property
    def user_id(self) -> None:
        return None


@dataclass(frozen=True)
class Identified:
    """A request authenticated as ``user_id``."""

    user_id: str


Viewer = Union[Anonymous, Identified]

ANONYMOUS = Anonymous()


def viewer_id_of(viewer: Viewer) -> str | None:
    if isinstance(viewer, Identified):
        return viewer.user_id
    return None


__all__ = ["ANONYMOUS", "Anonymous", "Identified", "Viewer", "viewer_id_of"]
