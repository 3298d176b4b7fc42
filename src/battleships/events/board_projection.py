"""Per-viewer board projections.

Each seated viewer sees:

- Own board: every occupied cell with its ship kind and hit flag, plus a
  fleet summary (name, size, hit cells, sunk) per ship
- Opponent board: only the cells the viewer has fired at, tagged hit or
  miss ("fog")

Once the match is FINISHED both viewers get the opponent's full board and
fleet summary instead of the fog.
"""

from typing import TYPE_CHECKING

from battleships.models.fleet import Cell, Coord, Ship, ShipKind
from battleships.models.player import SEATS, Player
from .game_events import (
    BoardsPayload,
    CellView,
    CoordPayload,
    FogCell,
    FogView,
    FullOpponentView,
    OwnBoardView,
    Phase,
    SeatSummary,
    ShipSummary,
    ShotResultKind,
    StatePayload,
)

if TYPE_CHECKING:
    from battleships.engine.game_state import GameState


def board_cells(board: dict[Coord, Cell]) -> list[CellView]:
    """Every occupied cell, ordered by coordinate."""
    return [
        CellView(row=coord.row, col=coord.col, kind=cell.kind.value, hit=cell.hit)
        for coord, cell in sorted(board.items())
    ]


def summarize_fleet(fleet: dict[ShipKind, Ship]) -> dict[str, ShipSummary]:
    return {
        kind.value: ShipSummary(
            name=ship.name,
            size=ship.size,
            hits=[CoordPayload(row=c.row, col=c.col) for c in sorted(ship.hits)],
            sunk=ship.is_sunk(),
        )
        for kind, ship in fleet.items()
    }


def fog_of_war(viewer: Player, opponent: Player) -> list[FogCell]:
    """Results of the viewer's own shots, and nothing else."""
    fog = []
    for coord in sorted(viewer.shots):
        cell = opponent.board.get(coord)
        result = ShotResultKind.HIT if cell is not None and cell.hit else ShotResultKind.MISS
        fog.append(FogCell(row=coord.row, col=coord.col, result=result))
    return fog


def project_boards(state: "GameState", seat: int) -> BoardsPayload:
    """Build the boards payload for the viewer holding a seat.

    Args:
        state: Current game state
        seat: The viewer's seat

    Returns:
        BoardsPayload with full own view and fog or full opponent view
    """
    viewer = state.get_player(seat)
    opponent = state.get_opponent(seat)

    you = OwnBoardView(
        board=board_cells(viewer.board),
        fleet_summary=summarize_fleet(viewer.fleet),
    )
    if state.phase == Phase.FINISHED:
        theirs = FullOpponentView(
            full=board_cells(opponent.board),
            fleet_summary=summarize_fleet(opponent.fleet),
        )
    else:
        theirs = FogView(fog=fog_of_war(viewer, opponent))
    return BoardsPayload(you=you, opponent=theirs)


def project_public_state(state: "GameState") -> StatePayload:
    """Public state shared with every connection, seated or not."""
    return StatePayload(
        phase=state.phase,
        turn=state.turn,
        winner=state.winner,
        players={
            seat: SeatSummary(**state.get_player(seat).to_dict())
            for seat in SEATS
        },
    )
