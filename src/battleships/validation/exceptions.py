"""Game action errors.

Every rejected action raises a GameError subclass. The session manager
turns it into a unicast notice to the originating connection; nothing is
mutated and nothing is broadcast.
"""


class GameError(Exception):
    """Base class for rejected player actions."""

    default_text = "Action rejected."

    def __init__(self, text: str | None = None):
        self.notice_text = text or self.default_text
        super().__init__(self.notice_text)


class AuthorizationError(GameError):
    """Seat bound to a different connection, or acting on a seat not owned."""

    default_text = "You do not hold that seat."


class PhaseError(GameError):
    """Action not valid in the current phase."""

    default_text = "That action is not allowed right now."


class TurnError(PhaseError):
    """Firing while it is the opponent's turn."""

    default_text = "It is not your turn."


class ValidationError(GameError):
    """Malformed or illegal fleet placement (or coordinate)."""

    default_text = "Invalid placement."


class RepeatActionError(GameError):
    """Firing at a coordinate already in the shooter's shot history."""

    default_text = "You already fired there."
