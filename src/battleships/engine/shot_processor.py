"""Shot resolution against the game state."""

import logging
from typing import Optional

from battleships.models.fleet import Coord
from battleships.models.player import opponent_of
from battleships.events.game_events import (
    CoordPayload,
    Phase,
    ShotOutcome,
    ShotResultKind,
)
from battleships.validation.exceptions import (
    AuthorizationError,
    PhaseError,
    RepeatActionError,
    TurnError,
    ValidationError,
)
from .game_state import GameState
from . import phase_machine

logger = logging.getLogger(__name__)


def check_can_fire(state: GameState, connection_id: str, seat: int, target: Coord) -> None:
    """Raise the matching GameError if this shot may not be taken."""
    if state.phase != Phase.IN_PROGRESS:
        raise PhaseError("The battle is not in progress.")
    if not state.owns_seat(connection_id, seat):
        raise AuthorizationError()
    if state.turn != seat:
        raise TurnError()
    if not target.in_bounds():
        raise ValidationError("Shot out of bounds.")
    if target in state.get_player(seat).shots:
        raise RepeatActionError()


def resolve_shot(state: GameState, seat: int, target: Coord) -> ShotOutcome:
    """Apply a shot from seat at target and advance turn or finish.

    Preconditions are assumed checked by check_can_fire.

    A cell already flagged hit reports "hit" again without a new sunk
    check. Only the shooter's own history blocks repeats, so this is
    reachable only if the opponent board was hit by other means.
    """
    shooter = state.get_player(seat)
    opponent_seat = opponent_of(seat)
    opponent = state.get_player(opponent_seat)

    result = ShotResultKind.MISS
    sunk_ship: Optional[str] = None

    cell = opponent.board.get(target)
    if cell is not None and not cell.hit:
        cell.hit = True
        result = ShotResultKind.HIT
        ship = opponent.fleet[cell.kind]
        ship.hits.add(target)
        if ship.is_sunk():
            sunk_ship = ship.name
    elif cell is not None:
        result = ShotResultKind.HIT

    shooter.shots.add(target)

    if opponent.all_ships_sunk():
        phase_machine.finish(state, winner=seat)
    else:
        state.turn = opponent_seat

    logger.info(
        "Seat %d fired at (%d, %d): %s%s",
        seat, target.row, target.col, result.value,
        f", sank {sunk_ship}" if sunk_ship else "",
    )

    return ShotOutcome(
        by=seat,
        at=CoordPayload(row=target.row, col=target.col),
        result=result,
        sunk_ship=sunk_ship,
        next_turn=state.turn,
        phase=state.phase,
        winner=state.winner,
    )


def fire(state: GameState, connection_id: str, seat: int, target: Coord) -> ShotOutcome:
    """Check preconditions, then resolve the shot."""
    check_can_fire(state, connection_id, seat, target)
    return resolve_shot(state, seat, target)
