"""Territory lookups: name/abbreviation/alias resolution and adjacency."""

from referee.config import GameConfig, Territory
from referee.errors import UnknownTerritory


class TerritoryDirectory:
    def __init__(self, territories: list[Territory]):
        self._territories = list(territories)

    @classmethod
    def from_config(cls, config: GameConfig) -> "TerritoryDirectory":
        return cls(config.territories)

    def __iter__(self):
        return iter(self._territories)

    def __len__(self) -> int:
        return len(self._territories)

    def resolve(self, query: str) -> Territory:
        """Return the territory whose abbreviation, name or alias matches (case-insensitive)."""
        for territory in self._territories:
            if territory.matches(query):
                return territory
        raise UnknownTerritory(query)

    def is_neighboring(self, a: Territory | str, b: Territory | str) -> bool:
        first = a if isinstance(a, Territory) else self.resolve(a)
        second = b if isinstance(b, Territory) else self.resolve(b)
        return any(
            self.resolve(neighbor).abbreviation == second.abbreviation
            for neighbor in first.neighbors
        )
