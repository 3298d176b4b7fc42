"""SessionManager - binds connections to seats and routes inbound events.

The manager is the only owner of the live GameState. Every inbound event
runs to completion inside handle() and returns the ordered list of
outbound messages it produced; the transport delivers them before it
hands over the next event.

Usage:
    manager = SessionManager(rng=random.Random(7))
    outbound = manager.connect("conn-a")
    outbound = manager.handle("conn-a", "join", {"seat": 1})
"""

import logging
import random
from typing import Any, Callable, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PayloadError

from battleships.models.fleet import Coord
from battleships.models.player import SEATS, default_name, opponent_of
from battleships.events import (
    ChatMessage,
    ChatRequest,
    EventName,
    FireRequest,
    Hello,
    JoinRequest,
    Joined,
    Notice,
    NoticeKind,
    Outbound,
    Phase,
    PlaceShipsRequest,
    ReadyRequest,
    ResetRequest,
    project_boards,
    project_public_state,
)
from battleships.validation import (
    AuthorizationError,
    GameError,
    PhaseError,
    ValidationError,
    build_fleet,
    validate_placement,
    validate_state_consistency,
)
from .game_state import GameState
from . import phase_machine
from . import shot_processor

logger = logging.getLogger(__name__)

DEFAULT_CHAT_MAX_LENGTH = 400

# Phases in which fleets may be (re)placed and readied
SETUP_PHASES = (Phase.LOBBY, Phase.PLACING)


class SessionManager:
    """Owns the match state and applies one inbound event at a time."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        chat_max_length: int = DEFAULT_CHAT_MAX_LENGTH,
        validate: bool = False,
    ):
        """Initialize the SessionManager.

        Args:
            rng: Random source for the first-turn draw. Defaults to a
                 fresh random.Random().
            chat_max_length: Chat messages are truncated to this many
                             characters.
            validate: Run state consistency checks after every event and
                      log any violation.
        """
        self._rng = rng or random.Random()
        self._chat_max_length = chat_max_length
        self._validate = validate
        self.state = GameState()

        self._routes: dict[str, tuple[type[BaseModel], Callable[[str, Any], list[Outbound]]]] = {
            EventName.JOIN.value: (JoinRequest, self._on_join),
            EventName.PLACE_SHIPS.value: (PlaceShipsRequest, self._on_place_ships),
            EventName.READY.value: (ReadyRequest, self._on_ready),
            EventName.FIRE.value: (FireRequest, self._on_fire),
            EventName.CHAT.value: (ChatRequest, self._on_chat),
            EventName.RESET.value: (ResetRequest, self._on_reset),
        }

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def connect(self, connection_id: str) -> list[Outbound]:
        """Greet a new connection and send it the public state."""
        logger.info("Connection %s opened", connection_id)
        return [
            Outbound(target=connection_id, event=EventName.HELLO, payload=Hello()),
            Outbound(
                target=connection_id,
                event=EventName.STATE,
                payload=project_public_state(self.state),
            ),
        ]

    def disconnect(self, connection_id: str) -> list[Outbound]:
        """Vacate the connection's seat and fall back to LOBBY if needed."""
        logger.info("Connection %s closed", connection_id)
        seat = self.state.seat_of(connection_id)
        if seat is None:
            return []

        aborted = self.state.phase in (Phase.IN_PROGRESS, Phase.FINISHED)
        self.state.vacate(seat)
        logger.info("Seat %d vacated", seat)

        if not self.state.both_seated():
            phase_machine.return_to_lobby(self.state)
            if aborted:
                # The match is over for the remaining seat too
                self.state.get_player(opponent_of(seat)).clear_match_data()
        return self._after_change(connection_id)

    def handle(self, connection_id: str, event: str, payload: Any = None) -> list[Outbound]:
        """Apply one inbound event and return the messages it produced.

        Unknown events and payloads missing required fields are dropped.
        Rejected actions produce a single error notice to the sender.
        """
        if event == EventName.CONNECT.value:
            return self.connect(connection_id)
        if event == EventName.DISCONNECT.value:
            return self.disconnect(connection_id)

        route = self._routes.get(event)
        if route is None:
            logger.debug("Dropping unknown event %r from %s", event, connection_id)
            return []
        model, handler = route

        try:
            request = model.model_validate(payload if payload is not None else {})
        except PayloadError as e:
            logger.debug("Dropping malformed %s from %s: %s", event, connection_id, e)
            return []

        try:
            return handler(connection_id, request)
        except GameError as e:
            logger.info("Rejected %s from %s: %s", event, connection_id, e.notice_text)
            return [self._notice(connection_id, NoticeKind.ERROR, e.notice_text)]

    # ------------------------------------------------------------------
    # Event handlers
    # ------------------------------------------------------------------

    def _on_join(self, connection_id: str, request: JoinRequest) -> list[Outbound]:
        seat = request.seat
        player = self.state.get_player(seat)
        if player.is_seated and player.connection_id != connection_id:
            raise AuthorizationError("That seat is already taken.")

        reclaim = player.connection_id == connection_id
        if reclaim and self.state.phase in (Phase.IN_PROGRESS, Phase.FINISHED):
            # Re-acknowledge without wiping a fleet mid-match
            logger.info("Seat %d reclaimed by %s mid-match", seat, connection_id)
            return [self._joined(connection_id, seat), *self._boards(seat)]

        # At most one seat per connection
        other = opponent_of(seat)
        if self.state.owns_seat(connection_id, other):
            self.state.vacate(other)
            logger.info("Seat %d vacated by move to seat %d", other, seat)

        self.state.vacate(seat)
        player = self.state.get_player(seat)
        player.connection_id = connection_id
        player.name = request.name or default_name(seat)
        logger.info("Seat %d taken by %s (%s)", seat, connection_id, player.name)

        phase_machine.maybe_begin_placing(self.state)
        return [self._joined(connection_id, seat), *self._after_change(connection_id)]

    def _require_setup_seat(self, connection_id: str, seat: int) -> None:
        if not self.state.owns_seat(connection_id, seat):
            raise AuthorizationError()
        if self.state.phase not in SETUP_PHASES:
            raise PhaseError("Fleets can only be changed before the battle.")

    def _on_place_ships(self, connection_id: str, request: PlaceShipsRequest) -> list[Outbound]:
        self._require_setup_seat(connection_id, request.seat)

        placements = validate_placement(request.ships)
        board, fleet = build_fleet(placements)

        player = self.state.get_player(request.seat)
        player.board = board
        player.fleet = fleet
        player.ready = False
        logger.info("Seat %d placed its fleet", request.seat)

        return [
            *self._after_change(connection_id),
            self._notice(connection_id, NoticeKind.OK, "Placement saved."),
        ]

    def _on_ready(self, connection_id: str, request: ReadyRequest) -> list[Outbound]:
        self._require_setup_seat(connection_id, request.seat)

        player = self.state.get_player(request.seat)
        if not player.has_full_fleet():
            raise ValidationError("Place all ships first.")
        player.ready = True
        logger.info("Seat %d is ready", request.seat)

        phase_machine.maybe_begin_battle(self.state, self._rng)
        return self._after_change(connection_id)

    def _on_fire(self, connection_id: str, request: FireRequest) -> list[Outbound]:
        target = Coord(request.row, request.col)
        outcome = shot_processor.fire(self.state, connection_id, request.seat, target)

        outbound = [Outbound(event=EventName.SHOT_RESULT, payload=outcome)]
        for seat in SEATS:
            outbound.extend(self._boards(seat))
        outbound.append(self._state_broadcast())
        self._check_consistency(connection_id)
        return outbound

    def _on_chat(self, connection_id: str, request: ChatRequest) -> list[Outbound]:
        text = "" if request.text is None else str(request.text)
        text = text[: self._chat_max_length]
        if not text.strip():
            return []

        seat = self.state.seat_of(connection_id)
        label = default_name(seat) if seat is not None else "Spectator"
        message = ChatMessage(sender=request.sender or label, text=text)
        return [Outbound(event=EventName.CHAT, payload=message)]

    def _on_reset(self, connection_id: str, request: ResetRequest) -> list[Outbound]:
        if self.state.seat_of(connection_id) is None:
            raise AuthorizationError("Only seated players can reset the game.")
        self.state = phase_machine.reset_game(self.state)
        return self._after_change(connection_id)

    # ------------------------------------------------------------------
    # Outbound helpers
    # ------------------------------------------------------------------

    def _notice(self, connection_id: str, kind: NoticeKind, text: str) -> Outbound:
        return Outbound(
            target=connection_id,
            event=EventName.NOTICE,
            payload=Notice(kind=kind, text=text),
        )

    def _joined(self, connection_id: str, seat: int) -> Outbound:
        return Outbound(target=connection_id, event=EventName.JOINED, payload=Joined(seat=seat))

    def _state_broadcast(self) -> Outbound:
        return Outbound(event=EventName.STATE, payload=project_public_state(self.state))

    def _boards(self, seat: int) -> list[Outbound]:
        """Boards payload for a seat's viewer, or nothing if vacant."""
        player = self.state.get_player(seat)
        if not player.is_seated:
            return []
        return [
            Outbound(
                target=player.connection_id,
                event=EventName.BOARDS,
                payload=project_boards(self.state, seat),
            )
        ]

    def _after_change(self, connection_id: str) -> list[Outbound]:
        """State broadcast followed by fresh boards for each seated viewer."""
        outbound = [self._state_broadcast()]
        for seat in SEATS:
            outbound.extend(self._boards(seat))
        self._check_consistency(connection_id)
        return outbound

    def _check_consistency(self, connection_id: str) -> None:
        if not self._validate:
            return
        for violation in validate_state_consistency(self.state):
            logger.error(
                "[%s] %s (after event from %s)",
                violation.rule_id, violation.message, connection_id,
            )
