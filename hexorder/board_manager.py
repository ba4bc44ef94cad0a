"""Board-level helpers for the hexorder rules engine.

This module is the only place the engine touches grid topology: adjacency
enumeration, the radius bound, and tile/unit lookups over a
``BoardState``. It performs no coordinate transforms beyond these.
"""
from __future__ import annotations

from collections import deque
from typing import Iterator

from .models import (
    ORIGIN,
    BoardState,
    EntityData,
    HexGridConfig,
    HexPosition,
    UnitInstance,
)

__all__ = ["BoardManager"]


class BoardManager:
    """Helper for board-level operations.

    It is side-effect-free; callers pass in ``BoardState`` /
    ``HexGridConfig`` instances and receive derived views.
    """

    @staticmethod
    def is_within_bounds(position: HexPosition, map_radius: int) -> bool:
        """Return True if ``position`` lies on a hexagonal map of ``map_radius``.

        Bound: ``max(|q|, |r|, |q + r|) <= map_radius``.
        """
        return max(
            abs(position.q),
            abs(position.r),
            abs(position.q + position.r),
        ) <= map_radius

    @staticmethod
    def neighbors_in_bounds(
        position: HexPosition, map_radius: int
    ) -> list[HexPosition]:
        return [
            n for n in position.neighbors()
            if BoardManager.is_within_bounds(n, map_radius)
        ]

    @staticmethod
    def iter_positions(map_radius: int) -> Iterator[HexPosition]:
        """Yield every in-bounds position, row by row."""
        for q in range(-map_radius, map_radius + 1):
            for r in range(-map_radius, map_radius + 1):
                pos = HexPosition(q=q, r=r)
                if BoardManager.is_within_bounds(pos, map_radius):
                    yield pos

    @staticmethod
    def position_count(map_radius: int) -> int:
        """Number of hexes on a map of ``map_radius`` (centred hexagon)."""
        return 3 * map_radius * (map_radius + 1) + 1

    @staticmethod
    def flood_fill(start: HexPosition, map_radius: int) -> set[HexPosition]:
        """All in-bounds positions reachable from ``start``, excluding it."""
        visited = {start}
        reached: set[HexPosition] = set()
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in BoardManager.neighbors_in_bounds(current, map_radius):
                if neighbor in visited:
                    continue
                visited.add(neighbor)
                reached.add(neighbor)
                queue.append(neighbor)
        return reached

    @staticmethod
    def get_tile_data(
        position: HexPosition, board: BoardState
    ) -> EntityData | None:
        """Return the cell data at ``position`` or ``None`` if no tile."""
        tile = board.tile_at(position)
        return tile.data if tile is not None else None

    @staticmethod
    def get_unit(unit_id: str | None, board: BoardState) -> UnitInstance | None:
        if unit_id is None:
            return None
        return board.get_unit(unit_id)

    @staticmethod
    def fill_board(
        board: BoardState,
        config: HexGridConfig,
        data_factory,
        center: HexPosition = ORIGIN,
    ) -> BoardState:
        """Place a tile on every in-bounds hex that has none yet.

        ``data_factory(position)`` returns the ``EntityData`` for each new
        tile. ``center`` is only used to order placement by distance.
        """
        positions = sorted(
            BoardManager.iter_positions(config.map_radius),
            key=lambda p: (p.distance(center), p.q, p.r),
        )
        for pos in positions:
            if board.tile_at(pos) is None:
                board.place_tile(pos, data_factory(pos))
        return board
