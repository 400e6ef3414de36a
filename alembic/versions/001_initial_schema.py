"""initial schema: nations, holdings, actions and v_nation_holdings

Revision ID: 001
Revises:
Create Date: 2026-10-18

"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "001"
down_revision = None
branch_labels = None
depends_on = None

VIEW_SELECT = (
    "SELECT holdings.id AS id, nations.id AS nation_id, country_name, color, "
    "territory, army_size, player "
    "FROM holdings LEFT JOIN nations ON holdings.nation_id = nations.id"
)


def upgrade() -> None:
    op.create_table(
        "nations",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("country_name", sa.String(length=125), nullable=False),
        sa.Column("player", sa.String(length=90), nullable=False),
        sa.Column("color", sa.CHAR(length=6), nullable=False),
        sa.CheckConstraint("length(country_name) > 0", name="country_name_length"),
        sa.CheckConstraint("length(player) > 0", name="player_length"),
        sa.CheckConstraint("length(color) = 6", name="color_length"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("country_name"),
        sa.UniqueConstraint("player"),
        sa.UniqueConstraint("color"),
    )
    op.create_index(op.f("ix_nations_id"), "nations", ["id"], unique=False)

    op.create_table(
        "holdings",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("territory", sa.String(length=10), nullable=False),
        sa.Column("nation_id", sa.Integer(), nullable=False),
        sa.Column("army_size", sa.Integer(), nullable=False),
        sa.CheckConstraint("army_size > 0", name="army_size_positive"),
        sa.ForeignKeyConstraint(["nation_id"], ["nations.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("territory"),
    )
    op.create_index(op.f("ix_holdings_id"), "holdings", ["id"], unique=False)
    op.create_index(op.f("ix_holdings_nation_id"), "holdings", ["nation_id"], unique=False)

    op.create_table(
        "actions",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("nation_id", sa.Integer(), nullable=True),
        sa.Column("action_type", sa.String(length=45), nullable=False),
        sa.Column("is_new_turn", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column(
            "timestamp",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["nation_id"], ["nations.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_actions_id"), "actions", ["id"], unique=False)
    op.create_index(op.f("ix_actions_nation_id"), "actions", ["nation_id"], unique=False)

    op.execute(f"CREATE VIEW v_nation_holdings AS {VIEW_SELECT}")


def downgrade() -> None:
    op.execute("DROP VIEW IF EXISTS v_nation_holdings")
    op.drop_index(op.f("ix_actions_nation_id"), table_name="actions")
    op.drop_index(op.f("ix_actions_id"), table_name="actions")
    op.drop_table("actions")
    op.drop_index(op.f("ix_holdings_nation_id"), table_name="holdings")
    op.drop_index(op.f("ix_holdings_id"), table_name="holdings")
    op.drop_table("holdings")
    op.drop_index(op.f("ix_nations_id"), table_name="nations")
    op.drop_table("nations")
