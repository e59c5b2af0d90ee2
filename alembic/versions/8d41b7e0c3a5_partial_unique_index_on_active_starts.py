"""partial unique index on active start times

Revision ID: 8d41b7e0c3a5
Revises: 3f1c0a9d7b21
Create Date: 2025-10-20 10:31:52.407811

"""

from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "8d41b7e0c3a5"
down_revision: str | Sequence[str] | None = "3f1c0a9d7b21"
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

INDEX_NAME = "ux_appt_prof_date_start_active"


def upgrade() -> None:
    # ÍNDICE ÚNICO PARCIAL: só vale para agendamentos não cancelados
    op.create_index(
        INDEX_NAME,
        "appointments",
        ["professional_id", "date", "start_time"],
        unique=True,
        postgresql_where=sa.text("cancelled = false"),
        sqlite_where=sa.text("cancelled = 0"),
    )


def downgrade() -> None:
    op.drop_index(INDEX_NAME, table_name="appointments")
