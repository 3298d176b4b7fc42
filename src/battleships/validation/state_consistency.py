"""State Consistency Validators (S.1-S.5).

Rules:
- S.1: Occupied cells equal the union of the fleet's ship cells, no overlap
- S.2: Fleet has the five kinds at their required sizes (17 cells)
- S.3: Each ship's hits are a subset of its cells and match the board flags
- S.4: turn is set iff IN_PROGRESS, and names a seat
- S.5: winner is set iff FINISHED, and names a seat
"""

from typing import TYPE_CHECKING

from battleships.models.fleet import FLEET_CELL_COUNT, SHIP_SPECS
from battleships.models.player import SEATS
from battleships.events.game_events import Phase
from .types import ValidationViolation, ValidationSeverity

if TYPE_CHECKING:
    from battleships.engine.game_state import GameState

CATEGORY = "State Consistency"


def _violation(rule_id: str, message: str, **context) -> ValidationViolation:
    return ValidationViolation(
        rule_id=rule_id,
        category=CATEGORY,
        message=message,
        severity=ValidationSeverity.ERROR,
        context=context or None,
    )


def validate_fleet_consistency(seat: int, state: "GameState") -> list[ValidationViolation]:
    """Check S.1-S.3 for one seat's board and fleet."""
    violations: list[ValidationViolation] = []
    player = state.get_player(seat)

    # S.1: board cells == union of ship cells, no shared cells
    ship_cells = set()
    for ship in player.fleet.values():
        overlap = ship_cells & ship.cells
        if overlap:
            violations.append(_violation(
                "S.1", f"Seat {seat} ships share cells {sorted(overlap)}", seat=seat,
            ))
        ship_cells |= ship.cells
    if set(player.board) != ship_cells:
        violations.append(_violation(
            "S.1", f"Seat {seat} board cells do not match fleet cells", seat=seat,
        ))

    # S.2: five kinds, mandated sizes, 17 cells
    if set(player.fleet) != set(SHIP_SPECS):
        violations.append(_violation(
            "S.2", f"Seat {seat} fleet kinds are {sorted(k.value for k in player.fleet)}",
            seat=seat,
        ))
    for kind, ship in player.fleet.items():
        spec = SHIP_SPECS.get(kind)
        if spec is not None and (ship.size != spec.size or len(ship.cells) != spec.size):
            violations.append(_violation(
                "S.2", f"Seat {seat} {spec.name} has size {len(ship.cells)}, expected {spec.size}",
                seat=seat, kind=kind.value,
            ))
    if len(player.board) != FLEET_CELL_COUNT:
        violations.append(_violation(
            "S.2", f"Seat {seat} occupies {len(player.board)} cells, expected {FLEET_CELL_COUNT}",
            seat=seat,
        ))

    # S.3: hits subset of cells, and agree with board hit flags
    for kind, ship in player.fleet.items():
        if not ship.hits <= ship.cells:
            violations.append(_violation(
                "S.3", f"Seat {seat} {ship.name} has hits outside its cells",
                seat=seat, kind=kind.value,
            ))
        for coord in ship.cells:
            cell = player.board.get(coord)
            if cell is not None and cell.hit != (coord in ship.hits):
                violations.append(_violation(
                    "S.3", f"Seat {seat} board hit flag at {tuple(coord)} disagrees with {ship.name}",
                    seat=seat, kind=kind.value,
                ))

    return violations


def validate_state_consistency(state: "GameState") -> list[ValidationViolation]:
    """Validate game-wide invariants.

    Fleet rules are only enforced once the battle has started, since
    boards may be partial while seats are still placing.

    Args:
        state: Current game state

    Returns:
        List of validation violations (empty if valid)
    """
    violations: list[ValidationViolation] = []

    if state.phase in (Phase.IN_PROGRESS, Phase.FINISHED):
        for seat in SEATS:
            violations.extend(validate_fleet_consistency(seat, state))

    # S.4: turn iff IN_PROGRESS
    if state.phase == Phase.IN_PROGRESS:
        if state.turn not in SEATS:
            violations.append(_violation("S.4", f"Turn is {state.turn} during battle"))
    elif state.turn is not None:
        violations.append(_violation(
            "S.4", f"Turn is {state.turn} in phase {state.phase.value}",
        ))

    # S.5: winner iff FINISHED
    if state.phase == Phase.FINISHED:
        if state.winner not in SEATS:
            violations.append(_violation("S.5", f"Winner is {state.winner} after the match"))
    elif state.winner is not None:
        violations.append(_violation(
            "S.5", f"Winner is {state.winner} in phase {state.phase.value}",
        ))

    return violations


__all__ = ["validate_fleet_consistency", "validate_state_consistency"]
