"""Per-seat player state."""

from typing import Optional
from pydantic import BaseModel, Field

from battleships.models.fleet import Cell, Coord, Ship, ShipKind

# The two fixed seat labels
SEATS = (1, 2)


def opponent_of(seat: int) -> int:
    """Return the other seat label."""
    return 2 if seat == 1 else 1


def default_name(seat: int) -> str:
    return f"Player {seat}"


class Player(BaseModel):
    """Everything the server tracks for one seat.

    A vacant seat has connection_id None. Board and fleet are keyed by
    Coord and ShipKind; shots holds every coordinate this seat fired at.
    """

    connection_id: Optional[str] = None
    name: Optional[str] = None
    ready: bool = False
    board: dict[Coord, Cell] = Field(default_factory=dict)
    fleet: dict[ShipKind, Ship] = Field(default_factory=dict)
    shots: set[Coord] = Field(default_factory=set)

    @property
    def is_seated(self) -> bool:
        return self.connection_id is not None

    def has_full_fleet(self) -> bool:
        return len(self.fleet) == len(ShipKind)

    def all_ships_sunk(self) -> bool:
        """True when every ship in the fleet is sunk."""
        return all(ship.is_sunk() for ship in self.fleet.values())

    def clear_match_data(self) -> None:
        """Drop board, fleet, shots and readiness; keep connection and name."""
        self.ready = False
        self.board = {}
        self.fleet = {}
        self.shots = set()

    def to_dict(self) -> dict:
        """Public seat summary, hiding board contents."""
        return {
            "connected": self.is_seated,
            "ready": self.ready,
            "name": self.name,
        }
