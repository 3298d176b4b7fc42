"""Fleet placement validation.

Rules (checked per ship in submission order, first failure wins):
- P.0: submission is a list of ship objects with a kind and integer cells
- P.1: kind is one of the five fleet kinds and appears only once
- P.2: cell count equals the kind's size
- P.3: all cells share a row or all share a column
- P.4: every cell lies on the 10x10 board
- P.5: no cell is claimed by two ships
- P.6: cells form a contiguous run along the varying axis
- P.7: every fleet kind is present (checked after all ships)
"""

from typing import Any

from pydantic import BaseModel, field_validator
from pydantic import ValidationError as PayloadError

from battleships.models.fleet import (
    FLEET_CONFIG,
    Cell,
    Coord,
    Ship,
    ShipKind,
    get_spec,
)
from .exceptions import ValidationError


class ShipPlacement(BaseModel):
    """One ship descriptor as submitted by a client."""

    kind: str
    cells: list[Coord]

    @field_validator("cells", mode="before")
    @classmethod
    def normalize_cells(cls, value: Any) -> Any:
        """Accept [r, c], {"row": r, "col": c} or {"r": r, "c": c}."""
        if not isinstance(value, list):
            return value
        normalized = []
        for cell in value:
            if isinstance(cell, list):
                cell = tuple(cell)
            elif isinstance(cell, dict):
                if "row" in cell and "col" in cell:
                    cell = (cell["row"], cell["col"])
                elif "r" in cell and "c" in cell:
                    cell = (cell["r"], cell["c"])
            normalized.append(cell)
        return normalized


def parse_placements(payload: Any) -> list[ShipPlacement]:
    """Parse raw descriptors into ShipPlacement models (rule P.0)."""
    if not isinstance(payload, list):
        raise ValidationError("Invalid placement format.")

    placements = []
    for item in payload:
        if isinstance(item, ShipPlacement):
            placements.append(item)
            continue
        try:
            placements.append(ShipPlacement.model_validate(item))
        except PayloadError:
            raise ValidationError("Invalid ship object.") from None
    return placements


def _is_contiguous(cells: list[Coord], same_row: bool) -> bool:
    axis = [c.col if same_row else c.row for c in cells]
    axis.sort()
    return all(b == a + 1 for a, b in zip(axis, axis[1:]))


def validate_placement(payload: Any) -> list[ShipPlacement]:
    """Validate a full fleet submission.

    Args:
        payload: Raw list of ship descriptors, or ShipPlacement models

    Returns:
        The parsed placements, in submission order

    Raises:
        ValidationError: On the first rule violation, with a reason string
    """
    placements = parse_placements(payload)

    seen_kinds: set[ShipKind] = set()
    occupied: set[Coord] = set()

    for ship in placements:
        # P.1: known kind, no repeats
        spec = get_spec(ship.kind)
        if spec is None:
            raise ValidationError(f"Unexpected ship kind: {ship.kind}")
        if spec.kind in seen_kinds:
            raise ValidationError(f"Duplicate ship: {spec.kind.value}")
        seen_kinds.add(spec.kind)

        # P.2: size
        if len(ship.cells) != spec.size:
            raise ValidationError(f"{spec.name} has incorrect size.")

        # P.3: straight
        same_row = all(c.row == ship.cells[0].row for c in ship.cells)
        same_col = all(c.col == ship.cells[0].col for c in ship.cells)
        if not same_row and not same_col:
            raise ValidationError(f"{spec.name} must be straight.")

        # P.4 / P.5: bounds and overlap, cell by cell
        for cell in ship.cells:
            if not cell.in_bounds():
                raise ValidationError("Placement out of bounds.")
            if cell in occupied:
                raise ValidationError("Ships cannot overlap.")
            occupied.add(cell)

        # P.6: contiguous
        if not _is_contiguous(ship.cells, same_row):
            raise ValidationError("Gaps in ship cells.")

    # P.7: all kinds present
    for spec in FLEET_CONFIG:
        if spec.kind not in seen_kinds:
            raise ValidationError(f"Missing ship: {spec.kind.value}")

    return placements


def build_fleet(
    placements: list[ShipPlacement],
) -> tuple[dict[Coord, Cell], dict[ShipKind, Ship]]:
    """Build a fresh board and fleet from validated placements."""
    board: dict[Coord, Cell] = {}
    fleet: dict[ShipKind, Ship] = {}
    for placement in placements:
        spec = get_spec(placement.kind)
        fleet[spec.kind] = Ship(
            kind=spec.kind,
            name=spec.name,
            size=spec.size,
            cells=set(placement.cells),
        )
        for cell in placement.cells:
            board[cell] = Cell(kind=spec.kind)
    return board, fleet


__all__ = [
    "ShipPlacement",
    "parse_placements",
    "validate_placement",
    "build_fleet",
]
