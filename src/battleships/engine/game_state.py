"""Game state store for a Battleships match."""

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field

from battleships.models.player import SEATS, Player, opponent_of
from battleships.events.game_events import Phase


def _empty_seats() -> dict[int, Player]:
    return {seat: Player() for seat in SEATS}


class GameState(BaseModel):
    """The single source of truth for the running match.

    Holds the phase, whose turn it is, the winner, and one Player per
    seat. Exactly one instance is live at a time, owned by the session
    manager; a reset replaces it wholesale.
    """

    phase: Phase = Phase.LOBBY
    turn: Optional[int] = None  # seat to fire next, only while IN_PROGRESS
    winner: Optional[int] = None  # only once FINISHED
    players: dict[int, Player] = Field(default_factory=_empty_seats)
    created_at: str = Field(default_factory=lambda: datetime.now().isoformat())

    def get_player(self, seat: int) -> Player:
        """Get the player record for a seat.

        Args:
            seat: Seat label (1 or 2)

        Returns:
            The Player for that seat
        """
        return self.players[seat]

    def get_opponent(self, seat: int) -> Player:
        return self.players[opponent_of(seat)]

    def seat_of(self, connection_id: str) -> Optional[int]:
        """Find the seat bound to a connection, if any."""
        for seat, player in self.players.items():
            if player.connection_id == connection_id:
                return seat
        return None

    def owns_seat(self, connection_id: str, seat: int) -> bool:
        player = self.players.get(seat)
        return player is not None and player.connection_id == connection_id

    def both_seated(self) -> bool:
        """Check if both seats are occupied."""
        return all(player.is_seated for player in self.players.values())

    def both_ready(self) -> bool:
        return all(player.ready for player in self.players.values())

    def vacate(self, seat: int) -> None:
        """Replace a seat's player with a fresh, unoccupied record."""
        self.players[seat] = Player()
