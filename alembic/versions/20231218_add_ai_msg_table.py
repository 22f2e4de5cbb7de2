"""add biomedgps_ai_message table

Revision ID: 20231218_add_ai_msg_table
Revises:
Create Date: 2023-12-18
"""
import os

from alembic import op

revision = "20231218_add_ai_msg_table"
down_revision = None
branch_labels = None
depends_on = None

SQL_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    "migrations",
    "20231218_add_ai_msg_table.up.sql",
)


def upgrade():
    # The .up.sql file is the deployed DDL; run it as-is
    with open(SQL_FILE, "r", encoding="utf-8") as f:
        op.execute(f.read())


def downgrade():
    op.execute("DROP TABLE IF EXISTS biomedgps_ai_message")
