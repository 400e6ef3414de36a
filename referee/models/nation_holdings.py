"""Read view joining holdings to their owning nation.

Ownership and army-size lookups go through this view so that a single
query answers "who holds this territory and with how many armies".
The view is created and dropped alongside the ORM tables.
"""

from sqlalchemy import DDL, Column, Integer, MetaData, String, Table, event

from referee.models.base import Base

VIEW_NAME = "v_nation_holdings"

_VIEW_SELECT = (
    "SELECT holdings.id AS id, nations.id AS nation_id, country_name, color, "
    "territory, army_size, player "
    "FROM holdings LEFT JOIN nations ON holdings.nation_id = nations.id"
)

# Kept out of Base.metadata so create_all does not try to create a table
view_metadata = MetaData()

nation_holdings = Table(
    VIEW_NAME,
    view_metadata,
    Column("id", Integer, primary_key=True),
    Column("nation_id", Integer),
    Column("country_name", String),
    Column("color", String),
    Column("territory", String),
    Column("army_size", Integer),
    Column("player", String),
)

event.listen(
    Base.metadata,
    "after_create",
    DDL(f"CREATE VIEW IF NOT EXISTS {VIEW_NAME} AS {_VIEW_SELECT}").execute_if(dialect="sqlite"),
)
event.listen(
    Base.metadata,
    "after_create",
    DDL(f"CREATE OR REPLACE VIEW {VIEW_NAME} AS {_VIEW_SELECT}").execute_if(
        dialect="postgresql"
    ),
)
event.listen(Base.metadata, "before_drop", DDL(f"DROP VIEW IF EXISTS {VIEW_NAME}"))
