"""Create site_content table

Revision ID: 5f2a9c1d7e40
Revises:
Create Date: 2026-02-03 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '5f2a9c1d7e40'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # One row per content id; content_data is the JSON document as text
    op.create_table('site_content',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('content_data', sa.Text(), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )


def downgrade():
    op.drop_table('site_content')
