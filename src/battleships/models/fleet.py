"""Fleet, ship and coordinate models."""

from enum import Enum
from typing import NamedTuple, Optional
from pydantic import BaseModel, ConfigDict, Field

BOARD_SIZE = 10


class Coord(NamedTuple):
    """A board coordinate. Tuples order by row, then column."""

    row: int
    col: int

    def in_bounds(self) -> bool:
        return 0 <= self.row < BOARD_SIZE and 0 <= self.col < BOARD_SIZE

    def to_dict(self) -> dict:
        return {"row": self.row, "col": self.col}


class ShipKind(str, Enum):
    """The five ship kinds every fleet must contain."""

    CARRIER = "carrier"
    BATTLESHIP = "battleship"
    CRUISER = "cruiser"
    SUBMARINE = "submarine"
    DESTROYER = "destroyer"


class ShipSpec(BaseModel):
    """Required size and display name for one ship kind."""

    kind: ShipKind
    name: str
    size: int

    model_config = ConfigDict(frozen=True)


# Standard fleet: 5 + 4 + 3 + 3 + 2 = 17 occupied cells
FLEET_CONFIG = [
    ShipSpec(kind=ShipKind.CARRIER, name="Carrier", size=5),
    ShipSpec(kind=ShipKind.BATTLESHIP, name="Battleship", size=4),
    ShipSpec(kind=ShipKind.CRUISER, name="Cruiser", size=3),
    ShipSpec(kind=ShipKind.SUBMARINE, name="Submarine", size=3),
    ShipSpec(kind=ShipKind.DESTROYER, name="Destroyer", size=2),
]

SHIP_SPECS: dict[ShipKind, ShipSpec] = {spec.kind: spec for spec in FLEET_CONFIG}

FLEET_CELL_COUNT = sum(spec.size for spec in FLEET_CONFIG)


class Ship(BaseModel):
    """A placed ship and the cells of it that have been hit.

    Invariant: hits is a subset of cells and size matches the kind's spec.
    """

    kind: ShipKind
    name: str
    size: int
    cells: set[Coord] = Field(default_factory=set)
    hits: set[Coord] = Field(default_factory=set)

    def is_sunk(self) -> bool:
        return len(self.hits) == self.size


class Cell(BaseModel):
    """An occupied board cell. Empty cells are absent from the board."""

    kind: ShipKind
    hit: bool = False


def get_spec(kind: str) -> Optional[ShipSpec]:
    """Look up the spec for a kind given as enum or raw string."""
    try:
        return SHIP_SPECS[ShipKind(kind)]
    except ValueError:
        return None
