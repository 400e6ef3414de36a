from referee.models.base import Base  # noqa: F401
from referee.models.action_log import ActionLogEntry, ActionType  # noqa: F401
from referee.models.holding import Holding  # noqa: F401
from referee.models.nation import Nation  # noqa: F401
from referee.models.nation_holdings import nation_holdings  # noqa: F401
