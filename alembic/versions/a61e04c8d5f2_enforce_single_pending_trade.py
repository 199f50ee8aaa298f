"""enforce single active session and single pending trade per requested book

Revision ID: a61e04c8d5f2
Revises: 3f9c2a7d41be
Create Date: 2026-09-14 10:31:07.226410

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = "a61e04c8d5f2"
down_revision: Union[str, Sequence[str], None] = "3f9c2a7d41be"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _cleanup_duplicate_pending_trades() -> None:
    op.execute(
        sa.text(
            """
            UPDATE trades
            SET status = 'cancelled'
            WHERE id IN (
                SELECT id FROM (
                    SELECT
                        id,
                        ROW_NUMBER() OVER (
                            PARTITION BY requester_id, book_requested_id
                            ORDER BY created_at DESC, id DESC
                        ) AS rn
                    FROM trades
                    WHERE status = 'pending'
                ) ranked
                WHERE rn > 1
            )
            """
        )
    )


def upgrade() -> None:
    """Upgrade schema to enforce the single-session and single-pending-trade rules."""
    _cleanup_duplicate_pending_trades()

    bind = op.get_bind()
    dialect = bind.dialect.name

    if dialect == "sqlite":
        op.execute(
            sa.text(
                "CREATE UNIQUE INDEX IF NOT EXISTS uq_sessions_user_active "
                "ON sessions(user_id) WHERE revoked = 0"
            )
        )
        op.execute(
            sa.text(
                "CREATE UNIQUE INDEX IF NOT EXISTS uq_trades_requester_book_pending "
                "ON trades(requester_id, book_requested_id) WHERE status = 'pending'"
            )
        )
    elif dialect == "postgresql":
        op.create_index(
            "uq_sessions_user_active",
            "sessions",
            ["user_id"],
            unique=True,
            postgresql_where=sa.text("revoked = false"),
        )
        op.create_index(
            "uq_trades_requester_book_pending",
            "trades",
            ["requester_id", "book_requested_id"],
            unique=True,
            postgresql_where=sa.text("status = 'pending'"),
        )
    else:
        # Without partial indexes the duplicate checks in the services still apply.
        pass


def downgrade() -> None:
    """Downgrade schema changes."""
    bind = op.get_bind()
    dialect = bind.dialect.name

    if dialect == "sqlite":
        op.execute(sa.text("DROP INDEX IF EXISTS uq_trades_requester_book_pending"))
        op.execute(sa.text("DROP INDEX IF EXISTS uq_sessions_user_active"))
    elif dialect == "postgresql":
        op.drop_index("uq_trades_requester_book_pending", table_name="trades")
        op.drop_index("uq_sessions_user_active", table_name="sessions")
