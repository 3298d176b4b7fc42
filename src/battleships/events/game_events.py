"""Wire event types: inbound requests, outbound payloads and envelopes."""

from datetime import datetime
from enum import Enum
from typing import Any, Literal, Optional
from pydantic import BaseModel, ConfigDict, Field


class Phase(str, Enum):
    """Match phases."""

    LOBBY = "lobby"
    PLACING = "placing"
    IN_PROGRESS = "in-progress"
    FINISHED = "finished"


class ShotResultKind(str, Enum):
    HIT = "hit"
    MISS = "miss"


class NoticeKind(str, Enum):
    ERROR = "error"
    OK = "ok"


class EventName(str, Enum):
    """Inbound and outbound event names."""

    # Inbound
    CONNECT = "connect"
    DISCONNECT = "disconnect"
    JOIN = "join"
    PLACE_SHIPS = "placeShips"
    READY = "ready"
    FIRE = "fire"
    CHAT = "chat"
    RESET = "reset"

    # Outbound
    HELLO = "hello"
    NOTICE = "notice"
    STATE = "state"
    BOARDS = "boards"
    SHOT_RESULT = "shotResult"
    JOINED = "joined"


class WireModel(BaseModel):
    """Base for payloads that travel as camelCase JSON."""

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


# ============================================================================
# Inbound requests
# ============================================================================


class JoinRequest(WireModel):
    seat: Literal[1, 2]
    name: Optional[str] = None


class PlaceShipsRequest(WireModel):
    seat: Literal[1, 2]
    # Descriptors are checked by the placement validator, which reports
    # per-ship problems back to the submitter.
    ships: Any


class ReadyRequest(WireModel):
    seat: Literal[1, 2]


class FireRequest(WireModel):
    seat: Literal[1, 2]
    row: int
    col: int


class ChatRequest(WireModel):
    sender: Optional[str] = Field(default=None, alias="from")
    text: Any = None


class ResetRequest(WireModel):
    pass


# ============================================================================
# Outbound payloads
# ============================================================================


class Hello(WireModel):
    msg: str = "Welcome to Battleships!"


class Notice(WireModel):
    kind: NoticeKind
    text: str


class Joined(WireModel):
    seat: int


class SeatSummary(WireModel):
    connected: bool
    ready: bool
    name: Optional[str] = None


class StatePayload(WireModel):
    """Public match state, identical for every observer."""

    phase: Phase
    turn: Optional[int] = None
    winner: Optional[int] = None
    players: dict[int, SeatSummary]


class CoordPayload(WireModel):
    row: int
    col: int


class CellView(WireModel):
    row: int
    col: int
    kind: str
    hit: bool


class FogCell(WireModel):
    row: int
    col: int
    result: ShotResultKind


class ShipSummary(WireModel):
    name: str
    size: int
    hits: list[CoordPayload]
    sunk: bool


class OwnBoardView(WireModel):
    board: list[CellView]
    fleet_summary: dict[str, ShipSummary] = Field(alias="fleetSummary")


class FogView(WireModel):
    fog: list[FogCell]


class FullOpponentView(WireModel):
    full: list[CellView]
    fleet_summary: dict[str, ShipSummary] = Field(alias="fleetSummary")


class BoardsPayload(WireModel):
    you: OwnBoardView
    opponent: FogView | FullOpponentView


class ShotOutcome(WireModel):
    """Result of one resolved shot, broadcast to every observer."""

    by: int
    at: CoordPayload
    result: ShotResultKind
    sunk_ship: Optional[str] = Field(default=None, alias="sunkShip")
    next_turn: Optional[int] = Field(default=None, alias="nextTurn")
    phase: Phase
    winner: Optional[int] = None


class ChatMessage(WireModel):
    sender: str = Field(alias="from")
    text: str
    timestamp: str = Field(default_factory=lambda: datetime.now().isoformat())


# ============================================================================
# Envelope
# ============================================================================


class Outbound(BaseModel):
    """One message to deliver. target None means every connection."""

    target: Optional[str] = None
    event: EventName
    payload: WireModel

    @property
    def is_broadcast(self) -> bool:
        return self.target is None

    def to_frame(self) -> dict:
        return {"event": self.event.value, "data": self.payload.to_wire()}
