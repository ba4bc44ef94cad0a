"""Version-based change detection for the reactive components.

Each reactive component owns a ``ChangeTracker`` and hands it the
registry handles it reads. A handle counts as changed when its version
moved or when a different handle object was passed in.
"""

from __future__ import annotations

from typing import Optional

from .models import VersionedModel

__all__ = ["ChangeTracker"]


class ChangeTracker:
    def __init__(self) -> None:
        self._seen: Optional[tuple[tuple[int, int], ...]] = None

    @staticmethod
    def _snapshot(handles: tuple[VersionedModel, ...]) -> tuple[tuple[int, int], ...]:
        return tuple((id(h), h.version) for h in handles)

    def changed(self, *handles: VersionedModel) -> bool:
        """True on first use and whenever any handle changed since ``mark_seen``."""
        return self._snapshot(handles) != self._seen

    def mark_seen(self, *handles: VersionedModel) -> None:
        self._seen = self._snapshot(handles)

    def reset(self) -> None:
        """Force the next ``changed`` call to report a change."""
        self._seen = None
