from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from referee.database import get_db
from referee.dependencies import get_game_context
from referee.errors import (
    ColorInUse,
    NationAlreadyJoined,
    PlayerAlreadyJoined,
    RefereeError,
    TerritoryAlreadyOccupied,
    UserNotRegistered,
)
from referee.schemas.action import ActionLogResponse, ActionRequest, ActionResultResponse
from referee.services.action_log_service import get_action_log, record_action
from referee.services.actions import GameContext
from referee.services.referee_service import parse_action, process_action

router = APIRouter(prefix="/actions", tags=["actions"])

_CONFLICTS = (ColorInUse, NationAlreadyJoined, PlayerAlreadyJoined, TerritoryAlreadyOccupied)


def _status_for(error: Exception) -> int:
    if isinstance(error, UserNotRegistered):
        return status.HTTP_403_FORBIDDEN
    if isinstance(error, _CONFLICTS):
        return status.HTTP_409_CONFLICT
    if isinstance(error, RefereeError):
        return status.HTTP_400_BAD_REQUEST
    return status.HTTP_500_INTERNAL_SERVER_ERROR


@router.post("", response_model=ActionResultResponse, status_code=status.HTTP_201_CREATED)
async def submit_action(
    body: ActionRequest,
    db: AsyncSession = Depends(get_db),
    ctx: GameContext = Depends(get_game_context),
):
    """Validate and apply one player action, then append it to the action log."""
    try:
        action = parse_action(body.action_type, body.player, *body.args)
    except RefereeError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    result, error = await process_action(action, db, ctx)
    if error is not None:
        detail = str(error) if isinstance(error, RefereeError) else "Unable to apply action"
        raise HTTPException(status_code=_status_for(error), detail=detail)

    await record_action(db, result.player, result.action_type)
    return ActionResultResponse(
        action_type=result.action_type,
        player=result.player,
        summary=result.summary,
        details=result.to_dict(),
    )


@router.get("/log", response_model=list[ActionLogResponse])
async def list_action_log(db: AsyncSession = Depends(get_db)):
    return await get_action_log(db)
