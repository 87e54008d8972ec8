class ActionRejected(Exception):
    """Base for every rejected action. The game state is left untouched."""
    reason = "rejected"

    def __init__(self, message: str = ""):
        super().__init__(message or self.reason)
        self.message = message or self.reason


class InvalidSelection(ActionRejected):
    # no movable piece on the square, or wrong side to move
    reason = "invalid_selection"


class IllegalDestination(ActionRejected):
    # destination not in the legal set (self-check included)
    reason = "illegal_destination"


class AmbiguousPendingPromotion(ActionRejected):
    reason = "pending_promotion"


class ActionAlreadyUsed(ActionRejected):
    reason = "action_already_used"


class InvalidEntanglementTarget(ActionRejected):
    reason = "invalid_entanglement_target"
