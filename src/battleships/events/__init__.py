"""Events package - wire payloads and per-viewer projections."""

from .game_events import (
    Phase,
    ShotResultKind,
    NoticeKind,
    EventName,
    WireModel,
    JoinRequest,
    PlaceShipsRequest,
    ReadyRequest,
    FireRequest,
    ChatRequest,
    ResetRequest,
    Hello,
    Notice,
    Joined,
    SeatSummary,
    StatePayload,
    CoordPayload,
    CellView,
    FogCell,
    ShipSummary,
    OwnBoardView,
    FogView,
    FullOpponentView,
    BoardsPayload,
    ShotOutcome,
    ChatMessage,
    Outbound,
)
from .board_projection import (
    board_cells,
    summarize_fleet,
    fog_of_war,
    project_boards,
    project_public_state,
)

__all__ = [
    "Phase",
    "ShotResultKind",
    "NoticeKind",
    "EventName",
    "WireModel",
    "JoinRequest",
    "PlaceShipsRequest",
    "ReadyRequest",
    "FireRequest",
    "ChatRequest",
    "ResetRequest",
    "Hello",
    "Notice",
    "Joined",
    "SeatSummary",
    "StatePayload",
    "CoordPayload",
    "CellView",
    "FogCell",
    "ShipSummary",
    "OwnBoardView",
    "FogView",
    "FullOpponentView",
    "BoardsPayload",
    "ShotOutcome",
    "ChatMessage",
    "Outbound",
    "board_cells",
    "summarize_fleet",
    "fog_of_war",
    "project_boards",
    "project_public_state",
]
