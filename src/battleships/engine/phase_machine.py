"""Phase transitions for a match.

LOBBY -> PLACING -> IN_PROGRESS -> FINISHED, and any phase back to LOBBY.
Every function here mutates the GameState it is given.
"""

import logging
import random

from battleships.models.player import SEATS
from battleships.events.game_events import Phase
from battleships.validation.exceptions import PhaseError
from .game_state import GameState

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[Phase, set[Phase]] = {
    Phase.LOBBY: {Phase.PLACING},
    Phase.PLACING: {Phase.IN_PROGRESS, Phase.LOBBY},
    Phase.IN_PROGRESS: {Phase.FINISHED, Phase.LOBBY},
    Phase.FINISHED: {Phase.LOBBY},
}


def transition(state: GameState, new_phase: Phase) -> None:
    """Move to a new phase, keeping turn/winner consistent with it.

    Turn survives only into IN_PROGRESS and winner only into FINISHED;
    callers set them after the transition.

    Raises:
        PhaseError: If the edge is not in ALLOWED_TRANSITIONS
    """
    if new_phase == state.phase:
        return
    if new_phase not in ALLOWED_TRANSITIONS[state.phase]:
        raise PhaseError(f"Cannot move from {state.phase.value} to {new_phase.value}.")

    logger.info("Phase %s -> %s", state.phase.value, new_phase.value)
    state.phase = new_phase
    if new_phase != Phase.IN_PROGRESS:
        state.turn = None
    if new_phase != Phase.FINISHED:
        state.winner = None


def maybe_begin_placing(state: GameState) -> bool:
    """LOBBY -> PLACING once both seats are occupied."""
    if state.phase == Phase.LOBBY and state.both_seated():
        transition(state, Phase.PLACING)
        return True
    return False


def maybe_begin_battle(state: GameState, rng: random.Random) -> bool:
    """PLACING -> IN_PROGRESS once both seats are ready.

    The first turn is drawn uniformly from the two seats.
    """
    if state.phase != Phase.PLACING or not state.both_ready():
        return False
    transition(state, Phase.IN_PROGRESS)
    state.turn = rng.choice(SEATS)
    logger.info("Battle begins, seat %d fires first", state.turn)
    return True


def finish(state: GameState, winner: int) -> None:
    """IN_PROGRESS -> FINISHED with the given winner."""
    transition(state, Phase.FINISHED)
    state.winner = winner
    logger.info("Seat %d wins", winner)


def return_to_lobby(state: GameState) -> None:
    """Drop back to LOBBY from any phase, clearing turn and winner."""
    transition(state, Phase.LOBBY)
    state.turn = None
    state.winner = None


def reset_game(state: GameState) -> GameState:
    """Build a fresh GameState keeping seat occupancy and names.

    Boards, fleets, shot histories, readiness, turn and winner are
    discarded. The result is PLACING when both seats are occupied,
    otherwise LOBBY.
    """
    fresh = GameState()
    for seat in SEATS:
        previous = state.players[seat]
        fresh.players[seat].connection_id = previous.connection_id
        fresh.players[seat].name = previous.name
    if fresh.both_seated():
        fresh.phase = Phase.PLACING
    logger.info("Game reset, phase %s", fresh.phase.value)
    return fresh
