"""Models package."""

from battleships.models.fleet import (
    BOARD_SIZE,
    Coord,
    ShipKind,
    ShipSpec,
    Ship,
    Cell,
    FLEET_CONFIG,
    SHIP_SPECS,
    FLEET_CELL_COUNT,
    get_spec,
)
from battleships.models.player import (
    SEATS,
    Player,
    default_name,
    opponent_of,
)

__all__ = [
    "BOARD_SIZE",
    "Coord",
    "ShipKind",
    "ShipSpec",
    "Ship",
    "Cell",
    "FLEET_CONFIG",
    "SHIP_SPECS",
    "FLEET_CELL_COUNT",
    "get_spec",
    "SEATS",
    "Player",
    "default_name",
    "opponent_of",
]
