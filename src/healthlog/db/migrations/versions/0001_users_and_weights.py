"""users and weights tables

Revision ID: 0001_users_and_weights
Revises:
Create Date: 2026-10-18
"""

from alembic import op

revision = "0001_users_and_weights"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          login VARCHAR(50) NOT NULL UNIQUE,
          created_at TEXT NOT NULL
        )
        """
    )
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS weights (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          date_time TIMESTAMP NOT NULL,
          value DOUBLE NOT NULL,
          user_id INTEGER REFERENCES users(id)
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_weights_date_time ON weights(date_time)")
    op.execute("CREATE INDEX IF NOT EXISTS idx_weights_user_date_time ON weights(user_id, date_time)")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_weights_user_date_time")
    op.execute("DROP INDEX IF EXISTS idx_weights_date_time")
    op.execute("DROP TABLE IF EXISTS weights")
    op.execute("DROP TABLE IF EXISTS users")
