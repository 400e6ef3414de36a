from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, Field

from referee.models.action_log import ActionType


class ActionRequest(BaseModel):
    """An action in its positional form, e.g. ``{"action_type": "move", "player": "alice",
    "args": ["CA", "NV"]}``. ``action_type`` also accepts ``moveN``."""

    action_type: str
    player: str
    args: list[str] = Field(default_factory=list)


class ActionResultResponse(BaseModel):
    action_type: ActionType
    player: str
    summary: str
    details: dict[str, Any]


class ActionLogResponse(BaseModel):
    id: int
    nation_id: Optional[int]
    action_type: ActionType
    is_new_turn: bool
    timestamp: datetime

    model_config = {"from_attributes": True}


class HoldingResponse(BaseModel):
    id: int
    nation_id: Optional[int]
    country_name: Optional[str]
    color: Optional[str]
    territory: str
    army_size: int
    player: Optional[str]

    model_config = {"from_attributes": True}


class HoldingsCountResponse(BaseModel):
    player: str
    holdings: int
