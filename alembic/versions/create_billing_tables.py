"""create fee templates and charges tables

Revision ID: 8d4e2b9c5a03
Revises: 3c1f0a7be214
Create Date: 2026-01-20 10:40:17

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8d4e2b9c5a03'
down_revision: Union[str, Sequence[str], None] = '3c1f0a7be214'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


fee_category = sa.Enum(
    'ORDINARY', 'EXTRAORDINARY', 'RESERVE_FUND', 'WATER', 'GAS', 'FINE',
    name='fee_category',
)
charge_status = sa.Enum('PENDING', 'PAID', 'OVERDUE', 'CANCELLED', name='charge_status')


def upgrade() -> None:
    op.create_table(
        'fee_templates',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('category', fee_category, nullable=False),
        sa.Column('default_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('due_day', sa.Integer(), nullable=False),
        sa.Column('recurring', sa.Boolean(), nullable=False),
        sa.Column('active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('default_amount > 0', name='ck_fee_templates_amount_positive'),
        sa.CheckConstraint('due_day BETWEEN 1 AND 28', name='ck_fee_templates_due_day'),
    )

    op.create_table(
        'charges',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('source_template_id', sa.Uuid(), nullable=True),
        sa.Column('resident_id', sa.Uuid(), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('block', sa.String(length=20), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=False),
        sa.Column('competency_period', sa.String(length=7), nullable=True),
        sa.Column('status', charge_status, nullable=False),
        sa.Column('paid_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('paid_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('external_payment_ref', sa.String(length=255), nullable=True),
        sa.Column('external_checkout_ref', sa.String(length=255), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['source_template_id'], ['fee_templates.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['resident_id'], ['residents.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.CheckConstraint('amount > 0', name='ck_charges_amount_positive'),
        sa.CheckConstraint('paid_amount >= 0', name='ck_charges_paid_amount_non_negative'),
    )

    op.create_index('ix_charges_resident_id', 'charges', ['resident_id'])
    op.create_index('ix_charges_status_due_date', 'charges', ['status', 'due_date'])
    op.create_index('ix_charges_competency_period', 'charges', ['competency_period'])

    # 취소되지 않은 청구만 (템플릿, 입주자, 기간) 당 1건 허용
    # - 동시에 실행된 일괄 청구가 같은 입주자에게 중복 청구하지 못하도록 DB 레벨에서 보장
    # - 취소(CANCELLED)된 청구는 제외되므로 취소 후 재청구 가능
    op.create_index(
        'uq_charges_template_resident_period_open',
        'charges',
        ['source_template_id', 'resident_id', 'competency_period'],
        unique=True,
        postgresql_where=sa.text("status <> 'CANCELLED'"),
    )


def downgrade() -> None:
    op.drop_index('uq_charges_template_resident_period_open', table_name='charges')
    op.drop_index('ix_charges_competency_period', table_name='charges')
    op.drop_index('ix_charges_status_due_date', table_name='charges')
    op.drop_index('ix_charges_resident_id', table_name='charges')
    op.drop_table('charges')
    op.drop_table('fee_templates')
    charge_status.drop(op.get_bind(), checkfirst=True)
    fee_category.drop(op.get_bind(), checkfirst=True)
