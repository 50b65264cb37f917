"""blood pressure readings

Revision ID: 0002_blood_pressures
Revises: 0001_users_and_weights
Create Date: 2026-10-18
"""

from alembic import op

revision = "0002_blood_pressures"
down_revision = "0001_users_and_weights"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.execute(
        """
        CREATE TABLE IF NOT EXISTS blood_pressures (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          date_time TIMESTAMP NOT NULL,
          systolic INTEGER NOT NULL,
          diastolic INTEGER NOT NULL,
          user_id INTEGER REFERENCES users(id)
        )
        """
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_blood_pressures_user ON blood_pressures(user_id)")


def downgrade() -> None:
    op.execute("DROP INDEX IF EXISTS idx_blood_pressures_user")
    op.execute("DROP TABLE IF EXISTS blood_pressures")
