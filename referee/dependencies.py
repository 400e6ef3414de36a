from functools import lru_cache

from referee.config import load_game_config, settings
from referee.services.actions import GameContext


@lru_cache
def _load_context(path: str) -> GameContext:
    return GameContext.from_config(load_game_config(path))


def get_game_context() -> GameContext:
    """Game context built from the configured game file (loaded once per path)."""
    return _load_context(str(settings.game_config_file))
