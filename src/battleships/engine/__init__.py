"""Engine package - match state and rule enforcement."""

from .game_state import GameState
from .phase_machine import (
    ALLOWED_TRANSITIONS,
    transition,
    maybe_begin_placing,
    maybe_begin_battle,
    finish,
    return_to_lobby,
    reset_game,
)
from .shot_processor import check_can_fire, resolve_shot, fire
from .session_manager import SessionManager

__all__ = [
    "GameState",
    "ALLOWED_TRANSITIONS",
    "transition",
    "maybe_begin_placing",
    "maybe_begin_battle",
    "finish",
    "return_to_lobby",
    "reset_game",
    "check_can_fire",
    "resolve_shot",
    "fire",
    "SessionManager",
]
