from enum import Enum


class ReservationState(str, Enum):
    """
    Reservation lifecycle.

    Flow: held -> committed | released (exactly one, never both)
    """

    HELD = "held"
    COMMITTED = "committed"
    RELEASED = "released"

    def is_terminal(self) -> bool:
        return self != ReservationState.HELD


class CreditTransactionType(str, Enum):
    GRANT = "grant"
    CONSUMPTION = "consumption"
    REFUND = "refund"
