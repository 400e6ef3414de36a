"""Domain errors raised by the referee.

Every rejection the engine can produce is a ``RefereeError`` (a
``ValueError``), so routers can map the whole family onto client errors.
Store errors that have no domain mapping are left as SQLAlchemy errors.
"""


class RefereeError(ValueError):
    """Base class for every rule violation reported by the engine."""


class InvalidAction(RefereeError):
    pass


class MissingUser(RefereeError):
    def __init__(self, message: str = "unset user string"):
        super().__init__(message)


class UserNotRegistered(RefereeError):
    def __init__(self, message: str = "user is not registered in the game"):
        super().__init__(message)


class NoTargetTerritory(RefereeError):
    def __init__(self, message: str = "missing target territory name or abbreviation"):
        super().__init__(message)


class UnknownTerritory(RefereeError):
    def __init__(self, query: str):
        super().__init__(f"unrecognized abbreviation, name, or alias {query!r}")
        self.query = query


class PlayerAlreadyJoined(RefereeError):
    def __init__(self, message: str = "the player already joined"):
        super().__init__(message)


class NationAlreadyJoined(RefereeError):
    def __init__(self, message: str = "a nation with the given name already exists"):
        super().__init__(message)


class TerritoryAlreadyOccupied(RefereeError):
    def __init__(self, message: str = "the territory is already occupied"):
        super().__init__(message)


class ColorInUse(RefereeError):
    def __init__(self, message: str = "color already in use by another player"):
        super().__init__(message)


class InvalidColor(RefereeError):
    pass


class InsufficientArmies(RefereeError):
    pass


class NoArmiesToRaise(InsufficientArmies):
    pass


class NoArmiesToMove(InsufficientArmies):
    pass


class NoAttackingArmies(InsufficientArmies):
    pass


class NoDefendingArmies(InsufficientArmies):
    pass


class MaxArmiesReached(RefereeError):
    pass


class NotNeighboring(RefereeError):
    pass


class FriendlyFireNotAllowed(RefereeError):
    pass


class InvalidForceSize(RefereeError):
    def __init__(self, attacking: int, defending: int):
        super().__init__(
            f"invalid army sizes: attacking={attacking}, defending={defending}"
        )
        self.attacking = attacking
        self.defending = defending


class NoDefendingNation(RefereeError):
    def __init__(self, territory: str):
        super().__init__(f"no defending nation found for territory {territory}")
        self.territory = territory


class CounterattackNotImplemented(RefereeError):
    def __init__(self, message: str = "attack with counterattack not implemented yet"):
        super().__init__(message)


class InvalidGameConfig(RefereeError):
    pass
