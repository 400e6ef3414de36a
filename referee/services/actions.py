"""Action values submitted by players, the engine context, and result base."""

from __future__ import annotations

import random
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar, Union

from referee.config import GameConfig
from referee.models.action_log import ActionType
from referee.services.combat_service import RandomSource
from referee.services.territory_service import TerritoryDirectory


@dataclass
class GameContext:
    """Everything a handler needs besides the database session.

    ``rng`` drives die rolls; pass a ``FixedRoll`` for deterministic play.
    ``color_rng`` picks the random colors assigned on join.
    """
    config: GameConfig
    directory: TerritoryDirectory
    rng: RandomSource = field(default_factory=random.Random)
    color_rng: random.Random = field(default_factory=random.Random)

    @classmethod
    def from_config(cls, config: GameConfig, **kwargs) -> GameContext:
        return cls(config=config, directory=TerritoryDirectory.from_config(config), **kwargs)


@dataclass(frozen=True)
class JoinAction:
    player: str
    territory: str
    nation: str = ""
    action_type: ClassVar[ActionType] = ActionType.join


@dataclass(frozen=True)
class ColorAction:
    player: str
    color: str
    action_type: ClassVar[ActionType] = ActionType.color


@dataclass(frozen=True)
class RaiseAction:
    player: str
    territory: str
    action_type: ClassVar[ActionType] = ActionType.raise_army


@dataclass(frozen=True)
class MoveAction:
    player: str
    source: str
    destination: str
    armies: int = 0  # 0 moves every army in the source territory
    action_type: ClassVar[ActionType] = ActionType.move


@dataclass(frozen=True)
class AttackAction:
    player: str
    attacking: str
    defending: str
    action_type: ClassVar[ActionType] = ActionType.attack


Action = Union[JoinAction, ColorAction, RaiseAction, MoveAction, AttackAction]


@dataclass
class ActionResult:
    """Outcome of a committed action, ready for logging or notification."""
    player: str
    action_type: ClassVar[ActionType]

    @property
    def summary(self) -> str:
        return str(self)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
