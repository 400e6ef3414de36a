import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from referee.errors import InvalidGameConfig

DEFAULT_INITIAL_ARMIES = 3
DEFAULT_MAX_ARMIES_PER_TERRITORY = 5


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="REFEREE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = "sqlite+aiosqlite:///./territories.db"
    game_config_file: Path = Path("config.json")
    log_level: str = "INFO"


settings = Settings()


def configure_logging(level: str | int | None = None) -> None:
    logging.basicConfig(
        level=level or settings.log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class Territory(BaseModel):
    """A map region as declared in the game file."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    abbreviation: str = Field(alias="abbr", min_length=1)
    name: str = Field(min_length=1)
    aliases: tuple[str, ...] = ()
    neighbors: tuple[str, ...] = ()

    def matches(self, query: str) -> bool:
        query = query.lower()
        return (
            query == self.abbreviation.lower()
            or query == self.name.lower()
            or any(query == alias.lower() for alias in self.aliases)
        )


class GameConfig(BaseModel):
    """Numeric policy and map definition for one game.

    Keys follow the camelCase layout of the game's ``config.json``; the
    snake_case field names are accepted too.
    """

    model_config = ConfigDict(populate_by_name=True)

    initial_armies: int = Field(default=DEFAULT_INITIAL_ARMIES, alias="initialArmies")
    max_armies_per_territory: int = Field(
        default=DEFAULT_MAX_ARMIES_PER_TERRITORY, alias="maxArmiesPerTerritory"
    )
    # Unclaimed territories hold a phantom army of 1 that a move has to defeat
    unclaimed_territories_have_garrison: bool = Field(
        default=False, alias="unclaimedTerritoriesHave1Army"
    )
    do_counterattack: bool = Field(default=False, alias="doCounterattack")
    territories: list[Territory]

    @field_validator("initial_armies", "max_armies_per_territory")
    @classmethod
    def _default_when_not_positive(cls, value: int, info) -> int:
        if value <= 0:
            return cls.model_fields[info.field_name].default
        return value

    @model_validator(mode="after")
    def _validate_map(self) -> "GameConfig":
        if not self.territories:
            raise ValueError("at least one territory is required")

        seen: set[str] = set()
        for territory in self.territories:
            for key in (territory.abbreviation, territory.name, *territory.aliases):
                if key.lower() in seen:
                    raise ValueError(f"found non-unique territory with query {key!r}")
                seen.add(key.lower())

        for territory in self.territories:
            if not territory.neighbors:
                raise ValueError(f"found territory {territory.name!r} with no neighbors")
            for query in territory.neighbors:
                neighbor = self._find(query)
                if neighbor is None:
                    raise ValueError(f"unrecognized neighbor {query!r} of {territory.name!r}")
                if neighbor.abbreviation == territory.abbreviation:
                    raise ValueError(
                        f"found territory {territory.abbreviation!r} with itself as a neighbor"
                    )
                if not any(territory.matches(q) for q in neighbor.neighbors):
                    raise ValueError(
                        f"found non-mutual neighbors {territory.abbreviation!r} "
                        f"and {neighbor.abbreviation!r}"
                    )
        return self

    def _find(self, query: str) -> Territory | None:
        for territory in self.territories:
            if territory.matches(query):
                return territory
        return None


def load_game_config(path: str | Path | None = None) -> GameConfig:
    """Read and validate the JSON game file."""
    path = Path(path or settings.game_config_file)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidGameConfig(f"failed to open config file: {exc}") from exc
    except json.JSONDecodeError as exc:
        raise InvalidGameConfig(f"failed to decode config file: {exc}") from exc
    try:
        return GameConfig.model_validate(data)
    except ValidationError as exc:
        raise InvalidGameConfig(f"invalid game config {path}: {exc}") from exc
