"""create billing audit logs

Revision ID: e57a91c3d6f8
Revises: 8d4e2b9c5a03
Create Date: 2026-01-21 09:05:33

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = 'e57a91c3d6f8'
down_revision: Union[str, Sequence[str], None] = '8d4e2b9c5a03'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


billing_action = sa.Enum(
    'CREATE_TEMPLATE', 'UPDATE_TEMPLATE', 'DEACTIVATE_TEMPLATE', 'DELETE_TEMPLATE',
    'CREATE_CHARGE', 'GENERATE_BATCH', 'RECORD_PAYMENT', 'CANCEL_CHARGE',
    'ATTACH_CHECKOUT_REF', 'OVERDUE_SWEEP',
    name='billing_action',
)


def upgrade() -> None:
    op.create_table(
        'billing_audit_logs',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('operator', sa.String(length=100), nullable=True),
        sa.Column('action', billing_action, nullable=False),
        sa.Column('template_id', sa.Uuid(), nullable=True),
        sa.Column('charge_id', sa.Uuid(), nullable=True),
        sa.Column('detail', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_billing_audit_logs_template_id', 'billing_audit_logs', ['template_id'])
    op.create_index('ix_billing_audit_logs_charge_id', 'billing_audit_logs', ['charge_id'])


def downgrade() -> None:
    op.drop_index('ix_billing_audit_logs_charge_id', table_name='billing_audit_logs')
    op.drop_index('ix_billing_audit_logs_template_id', table_name='billing_audit_logs')
    op.drop_table('billing_audit_logs')
    billing_action.drop(op.get_bind(), checkfirst=True)
