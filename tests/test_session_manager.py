"""Integration tests: SessionManager routing full matches event by event."""

import pytest

from battleships.engine import SessionManager
from battleships.events import EventName, Phase
from battleships.models import Coord, ShipKind
from battleships.validation import validate_state_consistency


# ============================================================================
# Helper Functions
# ============================================================================

class FirstSeatRandom:
    """Random stand-in whose choice() always picks the first option."""

    def choice(self, seq):
        return seq[0]


def standard_fleet() -> list[dict]:
    """A legal fleet laid out horizontally on the even rows."""
    return [
        {"kind": "carrier", "cells": [[0, c] for c in range(5)]},
        {"kind": "battleship", "cells": [[2, c] for c in range(4)]},
        {"kind": "cruiser", "cells": [[4, c] for c in range(3)]},
        {"kind": "submarine", "cells": [[6, c] for c in range(3)]},
        {"kind": "destroyer", "cells": [[8, c] for c in range(2)]},
    ]


def vertical_fleet() -> list[dict]:
    """A different legal fleet laid out vertically on the odd columns."""
    return [
        {"kind": "carrier", "cells": [[r, 1] for r in range(5)]},
        {"kind": "battleship", "cells": [[r, 3] for r in range(4)]},
        {"kind": "cruiser", "cells": [[r, 5] for r in range(3)]},
        {"kind": "submarine", "cells": [[r, 7] for r in range(3)]},
        {"kind": "destroyer", "cells": [[r, 9] for r in range(2)]},
    ]


def of_event(outbound, event: EventName) -> list:
    return [m for m in outbound if m.event == event]


def notices(outbound) -> list[tuple[str, str, str]]:
    return [
        (m.target, m.payload.kind.value, m.payload.text)
        for m in of_event(outbound, EventName.NOTICE)
    ]


def seat_both(manager: SessionManager) -> None:
    manager.connect("a")
    manager.connect("b")
    manager.handle("a", "join", {"seat": 1})
    manager.handle("b", "join", {"seat": 2})


def start_battle(manager: SessionManager) -> None:
    """Seat a and b, place standard fleets, ready both. Seat 1 fires first."""
    seat_both(manager)
    manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})
    manager.handle("b", "placeShips", {"seat": 2, "ships": standard_fleet()})
    manager.handle("a", "ready", {"seat": 1})
    manager.handle("b", "ready", {"seat": 2})


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager(rng=FirstSeatRandom())


# ============================================================================
# Connection and seating
# ============================================================================

class TestConnect:
    """Tests for new connections."""

    def test_connect_sends_hello_then_state(self, manager):
        outbound = manager.connect("a")
        assert [m.event for m in outbound] == [EventName.HELLO, EventName.STATE]
        assert all(m.target == "a" for m in outbound)
        assert outbound[0].to_frame() == {
            "event": "hello", "data": {"msg": "Welcome to Battleships!"},
        }

    def test_connect_via_handle(self, manager):
        outbound = manager.handle("a", "connect")
        assert outbound[0].event == EventName.HELLO


class TestJoin:
    """Seat binding rules."""

    def test_join_acknowledges_and_broadcasts(self, manager):
        outbound = manager.handle("a", "join", {"seat": 1})

        assert outbound[0].event == EventName.JOINED
        assert outbound[0].target == "a"
        assert outbound[0].payload.seat == 1
        state = of_event(outbound, EventName.STATE)[0]
        assert state.is_broadcast
        boards = of_event(outbound, EventName.BOARDS)
        assert [m.target for m in boards] == ["a"]
        assert manager.state.get_player(1).name == "Player 1"
        assert manager.state.phase == Phase.LOBBY

    def test_custom_name(self, manager):
        manager.handle("a", "join", {"seat": 2, "name": "Ada"})
        assert manager.state.get_player(2).name == "Ada"

    def test_both_seats_move_to_placing(self, manager):
        seat_both(manager)
        assert manager.state.phase == Phase.PLACING

    def test_taken_seat_rejected(self, manager):
        manager.handle("a", "join", {"seat": 1})
        outbound = manager.handle("b", "join", {"seat": 1})

        assert notices(outbound) == [("b", "error", "That seat is already taken.")]
        assert len(outbound) == 1
        assert manager.state.get_player(1).connection_id == "a"

    def test_reclaim_own_seat_reinitializes(self, manager):
        manager.handle("a", "join", {"seat": 1})
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})
        manager.handle("a", "ready", {"seat": 1})

        outbound = manager.handle("a", "join", {"seat": 1})

        assert outbound[0].event == EventName.JOINED
        player = manager.state.get_player(1)
        assert player.connection_id == "a"
        assert player.fleet == {}
        assert not player.ready

    def test_switching_seats_vacates_previous(self, manager):
        manager.handle("a", "join", {"seat": 1})
        manager.handle("a", "join", {"seat": 2})

        assert not manager.state.get_player(1).is_seated
        assert manager.state.get_player(2).connection_id == "a"
        assert manager.state.phase == Phase.LOBBY

    def test_reclaim_mid_battle_keeps_fleet(self, manager):
        start_battle(manager)
        outbound = manager.handle("a", "join", {"seat": 1})

        assert outbound[0].event == EventName.JOINED
        assert len(manager.state.get_player(1).fleet) == 5
        assert manager.state.phase == Phase.IN_PROGRESS


# ============================================================================
# Placement and readiness
# ============================================================================

class TestPlacement:
    """placeShips and ready handling."""

    def test_valid_placement_saved(self, manager):
        seat_both(manager)
        outbound = manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})

        assert notices(outbound) == [("a", "ok", "Placement saved.")]
        assert of_event(outbound, EventName.STATE)
        assert len(manager.state.get_player(1).board) == 17

    def test_invalid_placement_unicast_and_untouched(self, manager):
        seat_both(manager)
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})
        before = manager.state.get_player(1).model_copy(deep=True)

        bad = standard_fleet()[:4]
        outbound = manager.handle("a", "placeShips", {"seat": 1, "ships": bad})

        assert len(outbound) == 1
        assert notices(outbound) == [("a", "error", "Missing ship: destroyer")]
        assert manager.state.get_player(1) == before

    def test_second_placement_replaces_first(self, manager):
        seat_both(manager)
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})
        manager.handle("a", "placeShips", {"seat": 1, "ships": vertical_fleet()})

        player = manager.state.get_player(1)
        assert not player.ready
        assert Coord(0, 0) not in player.board
        assert Coord(0, 1) in player.board
        assert player.fleet[ShipKind.CARRIER].cells == {Coord(r, 1) for r in range(5)}
        assert len(player.board) == 17

    def test_placement_clears_readiness(self, manager):
        seat_both(manager)
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})
        manager.handle("a", "ready", {"seat": 1})
        assert manager.state.get_player(1).ready

        manager.handle("a", "placeShips", {"seat": 1, "ships": vertical_fleet()})
        assert not manager.state.get_player(1).ready

    def test_placing_for_another_seat_rejected(self, manager):
        seat_both(manager)
        outbound = manager.handle("a", "placeShips", {"seat": 2, "ships": standard_fleet()})
        assert notices(outbound)[0][1] == "error"
        assert manager.state.get_player(2).fleet == {}

    def test_placement_rejected_during_battle(self, manager):
        start_battle(manager)
        outbound = manager.handle("a", "placeShips", {"seat": 1, "ships": vertical_fleet()})
        assert notices(outbound) == [
            ("a", "error", "Fleets can only be changed before the battle."),
        ]
        assert Coord(0, 0) in manager.state.get_player(1).board

    def test_ready_without_fleet_rejected(self, manager):
        seat_both(manager)
        outbound = manager.handle("a", "ready", {"seat": 1})
        assert notices(outbound) == [("a", "error", "Place all ships first.")]
        assert not manager.state.get_player(1).ready

    def test_both_ready_starts_battle(self, manager):
        start_battle(manager)
        assert manager.state.phase == Phase.IN_PROGRESS
        assert manager.state.turn == 1
        assert manager.state.winner is None

    def test_ready_in_lobby_does_not_start(self, manager):
        manager.handle("a", "join", {"seat": 1})
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})
        manager.handle("a", "ready", {"seat": 1})
        assert manager.state.phase == Phase.LOBBY
        assert manager.state.get_player(1).ready


# ============================================================================
# Firing
# ============================================================================

class TestFire:
    """fire handling and broadcast shape."""

    def test_fire_before_battle_rejected(self, manager):
        seat_both(manager)
        manager.handle("a", "placeShips", {"seat": 1, "ships": [standard_fleet()[0]]})
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})

        outbound = manager.handle("a", "fire", {"seat": 1, "row": 0, "col": 0})

        assert notices(outbound) == [("a", "error", "The battle is not in progress.")]
        assert manager.state.get_player(1).shots == set()

    def test_carrier_only_then_fire_rejected(self, manager):
        seat_both(manager)
        outbound = manager.handle(
            "a", "placeShips", {"seat": 1, "ships": [standard_fleet()[0]]},
        )
        assert notices(outbound) == [("a", "error", "Missing ship: battleship")]

        outbound = manager.handle("a", "fire", {"seat": 1, "row": 5, "col": 5})
        assert notices(outbound)[0][1] == "error"
        assert manager.state.phase == Phase.PLACING

    def test_shot_result_then_boards_then_state(self, manager):
        start_battle(manager)
        outbound = manager.handle("a", "fire", {"seat": 1, "row": 0, "col": 0})

        assert [m.event for m in outbound] == [
            EventName.SHOT_RESULT, EventName.BOARDS, EventName.BOARDS, EventName.STATE,
        ]
        assert outbound[0].is_broadcast
        assert outbound[0].to_frame()["data"] == {
            "by": 1,
            "at": {"row": 0, "col": 0},
            "result": "hit",
            "sunkShip": None,
            "nextTurn": 2,
            "phase": "in-progress",
            "winner": None,
        }
        assert [m.target for m in outbound[1:3]] == ["a", "b"]

    def test_out_of_turn_rejected(self, manager):
        start_battle(manager)
        outbound = manager.handle("b", "fire", {"seat": 2, "row": 0, "col": 0})
        assert notices(outbound) == [("b", "error", "It is not your turn.")]

    def test_firing_for_other_seat_rejected(self, manager):
        start_battle(manager)
        outbound = manager.handle("b", "fire", {"seat": 1, "row": 0, "col": 0})
        assert notices(outbound) == [("b", "error", "You do not hold that seat.")]
        assert manager.state.turn == 1

    def test_repeat_fire_rejected_without_change(self, manager):
        start_battle(manager)
        manager.handle("a", "fire", {"seat": 1, "row": 9, "col": 9})
        manager.handle("b", "fire", {"seat": 2, "row": 9, "col": 9})
        snapshot = manager.state.model_copy(deep=True)

        outbound = manager.handle("a", "fire", {"seat": 1, "row": 9, "col": 9})

        assert notices(outbound) == [("a", "error", "You already fired there.")]
        assert manager.state == snapshot

    def test_full_match_to_victory(self, manager):
        start_battle(manager)
        targets = [Coord(r, c) for ship in standard_fleet() for r, c in ship["cells"]]
        misses = iter(Coord(r, c) for r in (1, 3, 5, 7, 9) for c in range(10))

        for i, target in enumerate(targets):
            outbound = manager.handle("a", "fire", {"seat": 1, "row": target.row, "col": target.col})
            if i < len(targets) - 1:
                miss = next(misses)
                manager.handle("b", "fire", {"seat": 2, "row": miss.row, "col": miss.col})

        result = of_event(outbound, EventName.SHOT_RESULT)[0].payload
        assert result.phase == Phase.FINISHED
        assert result.winner == 1
        assert result.sunk_ship == "Destroyer"
        assert manager.state.phase == Phase.FINISHED
        assert manager.state.winner == 1
        assert manager.state.turn is None

        # Both viewers now see the opponent's full board
        for board in of_event(outbound, EventName.BOARDS):
            assert "full" in board.to_frame()["data"]["opponent"]

        for conn, seat in (("a", 1), ("b", 2)):
            outbound = manager.handle(conn, "fire", {"seat": seat, "row": 9, "col": 8})
            assert notices(outbound) == [(conn, "error", "The battle is not in progress.")]

        assert validate_state_consistency(manager.state) == []


# ============================================================================
# Chat, reset, disconnect, malformed input
# ============================================================================

class TestChat:
    """Chat is a broadcast passthrough."""

    def test_chat_broadcast_with_seat_label(self, manager):
        manager.handle("a", "join", {"seat": 1})
        outbound = manager.handle("a", "chat", {"text": "hello"})

        assert len(outbound) == 1
        message = outbound[0]
        assert message.is_broadcast
        data = message.to_frame()["data"]
        assert data["from"] == "Player 1"
        assert data["text"] == "hello"
        assert data["timestamp"]

    def test_spectator_label_and_explicit_from(self, manager):
        outbound = manager.handle("z", "chat", {"text": "hi"})
        assert outbound[0].payload.sender == "Spectator"

        outbound = manager.handle("z", "chat", {"from": "Zed", "text": "hi"})
        assert outbound[0].payload.sender == "Zed"

    def test_chat_truncated(self):
        manager = SessionManager(chat_max_length=5)
        outbound = manager.handle("a", "chat", {"text": "abcdefgh"})
        assert outbound[0].payload.text == "abcde"

    def test_blank_chat_dropped(self, manager):
        assert manager.handle("a", "chat", {"text": "   "}) == []
        assert manager.handle("a", "chat", {}) == []

    def test_chat_does_not_change_state(self, manager):
        start_battle(manager)
        snapshot = manager.state.model_copy(deep=True)
        manager.handle("a", "chat", {"text": "good luck"})
        assert manager.state == snapshot


class TestReset:
    """Reset from a seated connection."""

    def test_reset_mid_battle(self, manager):
        start_battle(manager)
        manager.handle("a", "fire", {"seat": 1, "row": 0, "col": 0})

        outbound = manager.handle("b", "reset", {})

        assert of_event(outbound, EventName.STATE)
        state = manager.state
        assert state.phase == Phase.PLACING
        assert state.turn is None
        assert state.winner is None
        for seat, conn in ((1, "a"), (2, "b")):
            player = state.get_player(seat)
            assert player.connection_id == conn
            assert player.name == f"Player {seat}"
            assert player.fleet == {}
            assert player.shots == set()
            assert not player.ready

    def test_reset_from_spectator_rejected(self, manager):
        start_battle(manager)
        outbound = manager.handle("z", "reset", {})
        assert notices(outbound) == [("z", "error", "Only seated players can reset the game.")]
        assert manager.state.phase == Phase.IN_PROGRESS

    def test_reset_without_payload(self, manager):
        seat_both(manager)
        manager.handle("a", "reset")
        assert manager.state.phase == Phase.PLACING


class TestDisconnect:
    """Disconnects vacate seats and fall back to LOBBY."""

    def test_disconnect_mid_battle_aborts(self, manager):
        start_battle(manager)
        manager.handle("a", "fire", {"seat": 1, "row": 0, "col": 0})

        outbound = manager.handle("b", "disconnect")

        state = manager.state
        assert state.phase == Phase.LOBBY
        assert state.turn is None
        assert state.winner is None
        seat2 = state.get_player(2)
        assert not seat2.is_seated
        assert seat2.fleet == {} and seat2.board == {} and not seat2.ready
        seat1 = state.get_player(1)
        assert seat1.name == "Player 1"
        assert seat1.connection_id == "a"
        assert seat1.shots == set()

        assert of_event(outbound, EventName.STATE)[0].is_broadcast
        assert [m.target for m in of_event(outbound, EventName.BOARDS)] == ["a"]

    def test_disconnect_after_finish_clears_winner(self, manager):
        start_battle(manager)
        state = manager.state
        state.phase = Phase.FINISHED
        state.turn = None
        state.winner = 1

        manager.disconnect("a")

        assert state.phase == Phase.LOBBY
        assert state.winner is None

    def test_disconnect_while_placing_keeps_remaining_fleet(self, manager):
        seat_both(manager)
        manager.handle("a", "placeShips", {"seat": 1, "ships": standard_fleet()})

        manager.disconnect("b")

        assert manager.state.phase == Phase.LOBBY
        assert len(manager.state.get_player(1).fleet) == 5

    def test_spectator_disconnect_is_silent(self, manager):
        start_battle(manager)
        assert manager.disconnect("z") == []
        assert manager.state.phase == Phase.IN_PROGRESS

    def test_new_player_can_take_vacated_seat(self, manager):
        start_battle(manager)
        manager.disconnect("b")
        manager.handle("c", "join", {"seat": 2})
        assert manager.state.phase == Phase.PLACING
        assert manager.state.get_player(2).connection_id == "c"


class TestMalformedEvents:
    """Malformed events are dropped silently."""

    @pytest.mark.parametrize("event, payload", [
        ("join", {}),
        ("join", {"seat": 3}),
        ("placeShips", {"ships": []}),
        ("ready", None),
        ("fire", {"seat": 1, "row": 0}),
        ("fire", {"seat": 1, "row": "a", "col": 0}),
        ("teleport", {"seat": 1}),
    ])
    def test_dropped(self, manager, event, payload):
        seat_both(manager)
        snapshot = manager.state.model_copy(deep=True)
        assert manager.handle("a", event, payload) == []
        assert manager.state == snapshot


class TestConsistencyChecks:
    """validate=True logs violations instead of raising."""

    def test_clean_match_logs_nothing(self, caplog):
        manager = SessionManager(rng=FirstSeatRandom(), validate=True)
        with caplog.at_level("ERROR"):
            start_battle(manager)
            manager.handle("a", "fire", {"seat": 1, "row": 0, "col": 0})
        assert caplog.records == []

    def test_corrupt_state_logged(self, caplog):
        manager = SessionManager(rng=FirstSeatRandom(), validate=True)
        start_battle(manager)
        manager.state.winner = 2  # winner outside FINISHED
        with caplog.at_level("ERROR"):
            manager.handle("a", "fire", {"seat": 1, "row": 9, "col": 9})
        assert any("S.5" in record.getMessage() for record in caplog.records)
