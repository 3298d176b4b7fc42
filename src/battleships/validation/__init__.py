"""Battleships validation module.

Files:
- types.py: Shared ValidationViolation, ValidationSeverity
- exceptions.py: GameError taxonomy reported back to players
- placement.py: P.0-P.7 fleet placement rules
- state_consistency.py: S.1-S.5 state invariant checks
"""

from .types import ValidationViolation, ValidationSeverity
from .exceptions import (
    GameError,
    AuthorizationError,
    PhaseError,
    TurnError,
    ValidationError,
    RepeatActionError,
)
from .placement import (
    ShipPlacement,
    parse_placements,
    validate_placement,
    build_fleet,
)
from .state_consistency import validate_fleet_consistency, validate_state_consistency

__all__ = [
    # Types and exceptions
    "ValidationViolation",
    "ValidationSeverity",
    "GameError",
    "AuthorizationError",
    "PhaseError",
    "TurnError",
    "ValidationError",
    "RepeatActionError",
    # Placement
    "ShipPlacement",
    "parse_placements",
    "validate_placement",
    "build_fleet",
    # State consistency
    "validate_fleet_consistency",
    "validate_state_consistency",
]
