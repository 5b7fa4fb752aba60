"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-18
"""
from alembic import op

from skillbridge.database import Base
from skillbridge import models  # noqa: F401

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    # Baseline: every table as currently declared on the models
    Base.metadata.create_all(bind=op.get_bind())


def downgrade() -> None:
    Base.metadata.drop_all(bind=op.get_bind())
