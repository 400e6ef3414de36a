"""Tests for the ATTACK action and action dispatch.

Covers:
- Successful attacks reduce the defender; losing the last holding removes the nation
- Failed rolls reduce the attacker, or the defender when the result comes out positive;
  stalemates change nothing
- Rejections: friendly fire, not neighboring, no attacking/defending armies,
  counterattack flag
- process_action returns errors as values and leaves the store untouched
"""

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from referee.errors import (
    CounterattackNotImplemented,
    FriendlyFireNotAllowed,
    NoAttackingArmies,
    NoDefendingArmies,
    NotNeighboring,
    TerritoryAlreadyOccupied,
    UnknownTerritory,
)
from referee.models.nation import Nation
from referee.services.actions import AttackAction, JoinAction, MoveAction, RaiseAction
from referee.services.combat_service import FixedRoll
from referee.services.holding_service import get_territory_holding
from referee.services.attack_service import execute_attack
from referee.services.join_service import execute_join
from referee.services.movement_service import execute_move
from referee.services.raise_service import execute_raise
from referee.services.referee_service import process_action


async def _setup(db: AsyncSession, ctx) -> None:
    await execute_join(db, ctx, JoinAction(player="alice", territory="CA"))
    await execute_join(db, ctx, JoinAction(player="bob", territory="NV"))


async def _army(db: AsyncSession, territory: str) -> int | None:
    holding = await get_territory_holding(db, territory)
    return holding.army_size if holding is not None else None


async def _nation_exists(db: AsyncSession, player: str) -> bool:
    result = await db.execute(select(func.count()).select_from(Nation).where(Nation.player == player))
    return result.scalar_one() > 0


# ---------------------------------------------------------------------------
# Outcomes
# ---------------------------------------------------------------------------

async def test_successful_attack_reduces_defender(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(11))
    await _setup(db_session, ctx)

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == 1
    assert result.defender == "bob"
    assert result.eliminated_player is None
    assert str(result) == (
        "alice attacked Nevada from California, attack succeeded (rolled 11) "
        "and 1 defending armies were lost"
    )
    assert await _army(db_session, "CA") == 3
    assert await _army(db_session, "NV") == 2


async def test_attack_eliminates_defending_nation(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(20))
    await _setup(db_session, ctx)

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == 3
    assert result.nation_removed
    assert result.eliminated_player == "bob"
    assert str(result).endswith("; bob has no territories left")
    assert await _army(db_session, "NV") is None
    assert not await _nation_exists(db_session, "bob")
    assert await _army(db_session, "CA") == 3


async def test_defender_with_other_holdings_survives(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(20))
    await _setup(db_session, ctx)
    await execute_move(db_session, ctx, MoveAction(player="bob", source="NV", destination="OR", armies=1))

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == 2
    assert not result.nation_removed
    assert await _army(db_session, "NV") is None
    assert await _army(db_session, "OR") == 1
    assert await _nation_exists(db_session, "bob")


async def test_failed_attack_reduces_attacker(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(1))
    await _setup(db_session, ctx)

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == -1
    assert str(result) == (
        "alice attacked Nevada from California, attack failed (rolled 1) "
        "and 1 attacking armies were lost"
    )
    assert await _army(db_session, "CA") == 2
    assert await _army(db_session, "NV") == 3


async def test_failed_attack_against_stronger_defender(db_session: AsyncSession, make_ctx):
    # 3 against 4 needs 13+; -floor(6 + 1 - 5) = -2
    ctx = make_ctx(FixedRoll(12))
    await _setup(db_session, ctx)
    await execute_raise(db_session, ctx, RaiseAction(player="bob", territory="NV"))

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == -2
    assert await _army(db_session, "CA") == 1
    assert await _army(db_session, "NV") == 4


async def test_failed_attack_can_eliminate_attacker(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(1), initialArmies=1)
    await _setup(db_session, ctx)
    await execute_raise(db_session, ctx, RaiseAction(player="bob", territory="NV"))
    await execute_raise(db_session, ctx, RaiseAction(player="bob", territory="NV"))

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == -1
    assert result.eliminated_player == "alice"
    assert not await _nation_exists(db_session, "alice")
    assert await _army(db_session, "NV") == 3


async def test_failed_roll_can_still_cost_defender(db_session: AsyncSession, make_ctx):
    # parity needs 11+; -floor(4.5 - 5) = 1 goes against the defender
    ctx = make_ctx(FixedRoll(9))
    await _setup(db_session, ctx)

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == 1
    assert await _army(db_session, "CA") == 3
    assert await _army(db_session, "NV") == 2


async def test_stalemate_changes_nothing(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(10))
    await _setup(db_session, ctx)

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.losses == 0
    assert "no armies were lost" in str(result)
    assert await _army(db_session, "CA") == 3
    assert await _army(db_session, "NV") == 3


async def test_outnumbering_defender_improves_odds(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(9))
    await _setup(db_session, ctx)
    await execute_raise(db_session, ctx, RaiseAction(player="alice", territory="CA"))

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))

    assert result.attacking == 4
    assert result.defending == 3
    assert result.losses == 1
    assert await _army(db_session, "NV") == 2


async def test_attack_own_neighboring_holding(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(11))
    await _setup(db_session, ctx)
    await execute_move(db_session, ctx, MoveAction(player="alice", source="CA", destination="OR", armies=1))

    result = await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="OR"))

    assert result.defender == "alice"
    assert result.losses == 1
    assert await _army(db_session, "OR") is None
    assert await _nation_exists(db_session, "alice")


# ---------------------------------------------------------------------------
# Rejections
# ---------------------------------------------------------------------------

async def test_friendly_fire(db_session: AsyncSession, ctx):
    await _setup(db_session, ctx)
    with pytest.raises(FriendlyFireNotAllowed):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="Cali"))


async def test_attack_not_neighboring(db_session: AsyncSession, ctx):
    await _setup(db_session, ctx)
    await execute_join(db_session, ctx, JoinAction(player="carol", territory="UT"))
    with pytest.raises(NotNeighboring):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="UT"))
    assert await _army(db_session, "UT") == 3


async def test_attack_without_armies(db_session: AsyncSession, ctx):
    await _setup(db_session, ctx)
    with pytest.raises(NoAttackingArmies):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="OR", defending="NV"))
    with pytest.raises(NoAttackingArmies):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="NV", defending="CA"))


async def test_attack_unclaimed_territory(db_session: AsyncSession, ctx):
    await _setup(db_session, ctx)
    with pytest.raises(NoDefendingArmies):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="AZ"))


async def test_attack_unknown_territory(db_session: AsyncSession, ctx):
    await _setup(db_session, ctx)
    with pytest.raises(UnknownTerritory):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="Texas"))


async def test_counterattack_not_supported(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(20), doCounterattack=True)
    await _setup(db_session, ctx)
    with pytest.raises(CounterattackNotImplemented):
        await execute_attack(db_session, ctx, AttackAction(player="alice", attacking="CA", defending="NV"))
    assert await _army(db_session, "NV") == 3


# ---------------------------------------------------------------------------
# process_action
# ---------------------------------------------------------------------------

async def test_process_action_returns_result(db_session: AsyncSession, make_ctx):
    ctx = make_ctx(FixedRoll(11))
    await _setup(db_session, ctx)

    result, error = await process_action(
        AttackAction(player="alice", attacking="CA", defending="NV"), db_session, ctx
    )

    assert error is None
    assert result.losses == 1
    assert result.summary == str(result)


async def test_process_action_returns_error(db_session: AsyncSession, ctx):
    await _setup(db_session, ctx)

    result, error = await process_action(
        MoveAction(player="alice", source="CA", destination="NV"), db_session, ctx
    )

    assert result is None
    assert isinstance(error, TerritoryAlreadyOccupied)
    assert await _army(db_session, "CA") == 3
    assert await _army(db_session, "NV") == 3
