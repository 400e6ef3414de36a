"""Combat resolution for attacks and invasions.

One d20 roll decides a battle between two armies:

  success = roll > (defending - attacking) * 2 + 10
  success: losses =  floor(roll / 2 + attacking - defending - 5)
  failure: losses = -floor(roll / 2 + defending - attacking - 5)

A positive result is lost by the defender (at least 1 on success, at most
all of them), a negative one by the attacker (at most all of them). A
failed roll can still come out positive; it then counts against the
defender as well. A failed roll of 1 always costs the attacker at least one
army, and a result of zero is a stalemate.

Odds with the default cap of 5 armies per territory:
  - 19 or 20 always succeeds
  - 13+ succeeds when defenders outnumber attackers by one
  - 11+ succeeds at parity
  - 9+ succeeds when attackers outnumber defenders by one
  - 1 always costs the attacker one army
"""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Protocol

from referee.errors import InvalidForceSize

DIE_SIDES = 20
GARRISON_SIZE = 1


class RandomSource(Protocol):
    def randint(self, a: int, b: int) -> int: ...


class FixedRoll:
    """Random source that always rolls the same value (clamped into range)."""

    def __init__(self, value: int):
        self.value = value

    def randint(self, a: int, b: int) -> int:
        return min(max(self.value, a), b)


@dataclass(frozen=True)
class CombatOutcome:
    """Result of one roll.

    losses > 0: defending armies destroyed.
    losses < 0: attacking armies destroyed (magnitude).
    losses == 0: stalemate, nobody lost anything.
    """
    die_roll: int
    losses: int
    success: bool

    @property
    def defender_losses(self) -> int:
        return max(self.losses, 0)

    @property
    def attacker_losses(self) -> int:
        return max(-self.losses, 0)


def attack_succeeds(die_roll: int, attacking: int, defending: int) -> bool:
    # A 20 always succeeds and a 1 always fails, whatever the army cap
    if die_roll >= DIE_SIDES:
        return True
    if die_roll <= 1:
        return False
    return die_roll > (defending - attacking) * 2 + 10


def calculate_losses(die_roll: int, attacking: int, defending: int) -> int:
    """Deterministic part of combat: signed losses for a given roll."""
    if attacking <= 0 or defending <= 0:
        raise InvalidForceSize(attacking, defending)

    if attack_succeeds(die_roll, attacking, defending):
        losses = math.floor(0.5 * die_roll + attacking - defending - 5)
        return min(max(losses, 1), defending)

    losses = -math.floor(0.5 * die_roll + defending - attacking - 5)
    if die_roll == 1 and losses >= 0:
        losses = -1
    return min(max(losses, -attacking), defending)


def resolve_combat(
    attacking: int,
    defending: int,
    rng: RandomSource | None = None,
) -> CombatOutcome:
    """Roll a d20 and compute the losses of a battle between two armies."""
    if attacking <= 0 or defending <= 0:
        raise InvalidForceSize(attacking, defending)
    _rand = rng or random
    die_roll = _rand.randint(1, DIE_SIDES)
    return CombatOutcome(
        die_roll,
        calculate_losses(die_roll, attacking, defending),
        attack_succeeds(die_roll, attacking, defending),
    )
