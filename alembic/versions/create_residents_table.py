"""create residents table

Revision ID: 3c1f0a7be214
Revises:
Create Date: 2026-01-20 10:12:41

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f0a7be214'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


resident_status = sa.Enum('ACTIVE', 'INACTIVE', name='resident_status')


def upgrade() -> None:
    op.create_table(
        'residents',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('block', sa.String(length=20), nullable=True),
        sa.Column('status', resident_status, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_residents_status', 'residents', ['status'])


def downgrade() -> None:
    op.drop_index('ix_residents_status', table_name='residents')
    op.drop_table('residents')
    resident_status.drop(op.get_bind(), checkfirst=True)
