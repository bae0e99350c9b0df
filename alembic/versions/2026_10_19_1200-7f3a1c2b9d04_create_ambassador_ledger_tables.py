"""create_ambassador_ledger_tables

Revision ID: 7f3a1c2b9d04
Revises: 
Create Date: 2026-10-19 12:00:00.000000+00:00

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '7f3a1c2b9d04'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'ambassadors',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pending', comment='none/pending/approved/rejected'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true', comment='Admin switch; inactive codes fail storefront validation'),
        sa.Column('referral_code', sa.String(length=50), nullable=True, comment='Generated once at approval time'),
        sa.Column('referral_link', sa.String(length=500), nullable=True),
        sa.Column('coupon_code', sa.String(length=50), nullable=True, comment='Admin-settable, defaults to referral code'),
        sa.Column('discount_percent', sa.Integer(), nullable=False, server_default='10', comment='Customer discount percentage'),
        sa.Column('commission_rate', sa.Numeric(precision=5, scale=4), nullable=False, server_default='0.10', comment='Fraction of order amount credited to the ambassador'),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('application', sa.JSON(), nullable=True),
        sa.Column('application_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('application_ref', sa.String(length=50), nullable=True),
        sa.Column('review_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.String(length=255), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('sales', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('earnings', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('orders', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('payments_pending', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('payments_paid', sa.Numeric(precision=12, scale=2), nullable=False, server_default='0'),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_ambassadors_email'), 'ambassadors', ['email'], unique=True)
    op.create_index(op.f('ix_ambassadors_status'), 'ambassadors', ['status'], unique=False)
    op.create_index(op.f('ix_ambassadors_referral_code'), 'ambassadors', ['referral_code'], unique=False)
    op.create_index(op.f('ix_ambassadors_coupon_code'), 'ambassadors', ['coupon_code'], unique=False)
    
    op.create_table(
        'ambassador_orders',
        sa.Column('id', sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column('ambassador_id', sa.BigInteger(), nullable=False),
        sa.Column('order_id', sa.String(length=255), nullable=False, comment='Storefront order ID'),
        sa.Column('order_date', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('commission', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('is_paid', sa.Boolean(), nullable=False, server_default='false'),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['ambassador_id'], ['ambassadors.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('ambassador_id', 'order_id', name='uq_ambassador_orders_ambassador_order'),
    )
    op.create_index(op.f('ix_ambassador_orders_ambassador_id'), 'ambassador_orders', ['ambassador_id'], unique=False)
    op.create_index(op.f('ix_ambassador_orders_is_paid'), 'ambassador_orders', ['is_paid'], unique=False)


def downgrade() -> None:
    op.drop_index(op.f('ix_ambassador_orders_is_paid'), table_name='ambassador_orders')
    op.drop_index(op.f('ix_ambassador_orders_ambassador_id'), table_name='ambassador_orders')
    op.drop_table('ambassador_orders')
    op.drop_index(op.f('ix_ambassadors_coupon_code'), table_name='ambassadors')
    op.drop_index(op.f('ix_ambassadors_referral_code'), table_name='ambassadors')
    op.drop_index(op.f('ix_ambassadors_status'), table_name='ambassadors')
    op.drop_index(op.f('ix_ambassadors_email'), table_name='ambassadors')
    op.drop_table('ambassadors')
