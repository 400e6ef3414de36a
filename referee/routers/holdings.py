from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import get_db
from referee.schemas.action import HoldingResponse, HoldingsCountResponse
from referee.services.holding_service import get_all_holdings, holdings_count

router = APIRouter(tags=["holdings"])


@router.get("/holdings", response_model=list[HoldingResponse])
async def list_holdings(db: AsyncSession = Depends(get_db)):
    """Every holding with its owning nation, ordered by player then territory."""
    rows = await get_all_holdings(db)
    return [HoldingResponse.model_validate(dict(row._mapping)) for row in rows]


@router.get("/nations/{player}/holdings/count", response_model=HoldingsCountResponse)
async def count_player_holdings(player: str, db: AsyncSession = Depends(get_db)):
    return HoldingsCountResponse(player=player, holdings=await holdings_count(db, player))
