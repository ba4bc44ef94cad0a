"""
Hex grid and board-state types.

Axial coordinates (q, r) with the implicit third axis s = -q - r. The
rules engine only needs adjacency, distance and a radius bound; layout
and pixel transforms belong to the rendering side.
"""

from typing import ClassVar, Dict, List, Optional, Tuple

from pydantic import BaseModel, Field

from .core import EntityData, VersionedModel


class HexPosition(BaseModel):
    """Axial hex position"""
    q: int
    r: int

    # Clockwise from east, pointy-top layout.
    DIRECTIONS: ClassVar[Tuple[Tuple[int, int], ...]] = (
        (1, 0),
        (1, -1),
        (0, -1),
        (-1, 0),
        (-1, 1),
        (0, 1),
    )

    class Config:
        frozen = True

    @property
    def s(self) -> int:
        return -self.q - self.r

    def to_key(self) -> str:
        """Convert position to string key"""
        return f"{self.q},{self.r}"

    @classmethod
    def from_key(cls, key: str) -> "HexPosition":
        q, r = key.split(",")
        return cls(q=int(q), r=int(r))

    def neighbors(self) -> List["HexPosition"]:
        """The six adjacent positions, in direction order."""
        return [
            HexPosition(q=self.q + dq, r=self.r + dr)
            for dq, dr in self.DIRECTIONS
        ]

    def distance(self, other: "HexPosition") -> int:
        return max(
            abs(self.q - other.q),
            abs(self.r - other.r),
            abs(self.s - other.s),
        )

    def is_adjacent(self, other: "HexPosition") -> bool:
        return self.distance(other) == 1

    def __repr__(self) -> str:
        return f"HexPosition({self.q}, {self.r})"


ORIGIN = HexPosition(q=0, r=0)


class HexGridConfig(BaseModel):
    """Global grid configuration"""
    map_radius: int = Field(ge=0)


class Tile(BaseModel):
    """A board position with its cell data"""
    position: HexPosition
    data: EntityData


class UnitInstance(BaseModel):
    """A unit placed on the board"""
    id: str
    position: HexPosition
    data: EntityData


class BoardState(BaseModel):
    """Live board contents: tiles keyed by position key, units by id"""
    tiles: Dict[str, Tile] = Field(default_factory=dict)
    units: Dict[str, UnitInstance] = Field(default_factory=dict)

    def tile_at(self, position: HexPosition) -> Optional[Tile]:
        return self.tiles.get(position.to_key())

    def place_tile(self, position: HexPosition, data: EntityData) -> Tile:
        tile = Tile(position=position, data=data)
        self.tiles[position.to_key()] = tile
        return tile

    def place_unit(
        self, unit_id: str, position: HexPosition, data: EntityData
    ) -> UnitInstance:
        unit = UnitInstance(id=unit_id, position=position, data=data)
        self.units[unit_id] = unit
        return unit

    def get_unit(self, unit_id: str) -> Optional[UnitInstance]:
        return self.units.get(unit_id)

    def remove_unit(self, unit_id: str) -> Optional[UnitInstance]:
        return self.units.pop(unit_id, None)


class SelectedUnit(VersionedModel):
    """Tracks the currently selected unit, if any"""
    entity: Optional[str] = None

    def select(self, unit_id: Optional[str]) -> None:
        if unit_id == self.entity:
            return
        self.entity = unit_id
        self.mark_changed()

    def clear(self) -> None:
        self.select(None)
