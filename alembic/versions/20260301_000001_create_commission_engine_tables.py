"""Create commission engine tables

Revision ID: 20260301_000001
Revises: 
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '20260301_000001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True) -> list[sa.Column]:
    columns = [
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]
    if with_updated:
        columns.append(
            sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now())
        )
    return columns


def upgrade() -> None:
    # Read-only inputs maintained by other parts of the platform
    op.create_table(
        'plans',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('is_free', sa.Boolean(), nullable=False, server_default='false'),
        sa.PrimaryKeyConstraint('id')
    )

    op.create_table(
        'subscriptions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(64), nullable=False),
        sa.Column('plan_id', sa.String(64), nullable=False),
        sa.Column('status', sa.String(50), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.ForeignKeyConstraint(['plan_id'], ['plans.id'], ondelete='RESTRICT'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_subscriptions_user_status', 'subscriptions', ['user_id', 'status'])

    op.create_table(
        'sub_affiliates',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('parent_affiliate_id', sa.String(64), nullable=False),
        sa.Column('sub_affiliate_id', sa.String(255), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint('level >= 1', name='check_sub_affiliates_level_positive'),
        sa.UniqueConstraint('parent_affiliate_id', 'sub_affiliate_id', name='uq_sub_affiliates_parent_child'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_sub_affiliates_parent_affiliate_id', 'sub_affiliates', ['parent_affiliate_id'])
    op.create_index('idx_sub_affiliates_child_level', 'sub_affiliates', ['sub_affiliate_id', 'level'])

    op.create_table(
        'product_commission_levels',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('plan_type', sa.String(10), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('percentage', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        *_timestamps(),
        sa.CheckConstraint(
            'percentage >= 0 AND percentage <= 100',
            name='check_product_commission_levels_percentage_range',
        ),
        sa.UniqueConstraint('product_id', 'plan_type', 'level', name='uq_product_commission_levels_key'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_product_commission_levels_product_id', 'product_commission_levels', ['product_id'])

    op.create_table(
        'app_settings',
        sa.Column('key', sa.String(100), nullable=False),
        sa.Column('value', sa.Text(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('key')
    )

    op.create_table(
        'affiliate_profiles',
        sa.Column('id', sa.String(64), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('withdrawal_day', sa.Integer(), nullable=False, server_default='1'),
        *_timestamps(),
        sa.CheckConstraint('withdrawal_day BETWEEN 1 AND 5', name='check_affiliate_profiles_withdrawal_day'),
        sa.PrimaryKeyConstraint('id')
    )

    # Unified records pushed by external products
    op.create_table(
        'unified_users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_user_id', sa.String(255), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('name', sa.String(255), nullable=True),
        sa.Column('phone', sa.String(50), nullable=True),
        sa.Column('cpf', sa.String(20), nullable=True),
        sa.Column('affiliate_code', sa.String(100), nullable=True),
        sa.Column('affiliate_id', sa.String(64), nullable=True),
        sa.Column('environment', sa.String(20), nullable=True),
        sa.Column('plan_id', sa.String(64), nullable=True),
        sa.Column('status', sa.String(50), nullable=True),
        sa.Column('cancel_at_period_end', sa.Boolean(), nullable=True),
        sa.Column('trial_end', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_period_start', sa.DateTime(timezone=True), nullable=True),
        sa.Column('current_period_end', sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('external_user_id', 'product_id', name='uq_unified_users_external_product'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_unified_users_product_id', 'unified_users', ['product_id'])
    op.create_index('idx_unified_users_affiliate', 'unified_users', ['affiliate_id'])

    op.create_table(
        'unified_payments',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('external_payment_id', sa.String(255), nullable=True),
        sa.Column('unified_user_id', sa.Integer(), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('plan_id', sa.String(64), nullable=True),
        sa.Column('stripe_invoice_id', sa.String(255), nullable=False),
        sa.Column('stripe_subscription_id', sa.String(255), nullable=True),
        sa.Column('amount', sa.DECIMAL(18, 4), nullable=False),
        sa.Column('currency', sa.String(10), nullable=False, server_default='brl'),
        sa.Column('billing_reason', sa.String(50), nullable=True),
        sa.Column('status', sa.String(50), nullable=False, server_default='paid'),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column('affiliate_id', sa.String(64), nullable=True),
        sa.Column('affiliate_coupon_id', sa.String(255), nullable=True),
        sa.Column('environment', sa.String(20), nullable=False, server_default='production'),
        sa.Column('metadata', postgresql.JSONB(), nullable=False, server_default='{}'),
        sa.Column('processed', sa.Boolean(), nullable=True, server_default='false'),
        sa.Column('processed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('commissions_generated', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('last_error', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['unified_user_id'], ['unified_users.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint('external_payment_id', 'product_id', name='uq_unified_payments_external_product'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_unified_payments_unified_user_id', 'unified_payments', ['unified_user_id'])
    op.create_index('idx_unified_payments_invoice', 'unified_payments', ['stripe_invoice_id', 'product_id'])
    op.create_index('idx_unified_payments_pending', 'unified_payments', ['processed', 'created_at'])

    # Commission ledger
    op.create_table(
        'commissions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('affiliate_id', sa.String(64), nullable=False),
        sa.Column('product_id', sa.String(64), nullable=False),
        sa.Column('unified_payment_id', sa.Integer(), nullable=False),
        sa.Column('unified_user_id', sa.Integer(), nullable=False),
        sa.Column('amount', sa.DECIMAL(18, 4), nullable=False),
        sa.Column('percentage', sa.DECIMAL(5, 2), nullable=False),
        sa.Column('level', sa.Integer(), nullable=False),
        sa.Column('commission_type', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('payment_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('reference_month', sa.Date(), nullable=False),
        sa.Column('available_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.ForeignKeyConstraint(['unified_payment_id'], ['unified_payments.id'], ondelete='RESTRICT'),
        sa.ForeignKeyConstraint(['unified_user_id'], ['unified_users.id'], ondelete='RESTRICT'),
        sa.UniqueConstraint(
            'unified_payment_id', 'affiliate_id', 'level',
            name='uq_commissions_payment_affiliate_level',
        ),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_commissions_unified_payment_id', 'commissions', ['unified_payment_id'])
    op.create_index('idx_commissions_status_payment_date', 'commissions', ['status', 'payment_date'])
    op.create_index('idx_commissions_affiliate_status', 'commissions', ['affiliate_id', 'status'])

    # Business defaults
    op.bulk_insert(
        sa.table('app_settings', sa.column('key', sa.String), sa.column('value', sa.Text)),
        [
            {'key': 'commission_days_to_available', 'value': '7'},
            {'key': 'commission_min_withdrawal', 'value': '50.00'},
            {'key': 'commission_check_schedule', 'value': 'hourly'},
        ],
    )


def downgrade() -> None:
    op.drop_index('idx_commissions_affiliate_status', table_name='commissions')
    op.drop_index('idx_commissions_status_payment_date', table_name='commissions')
    op.drop_index('ix_commissions_unified_payment_id', table_name='commissions')
    op.drop_table('commissions')

    op.drop_index('idx_unified_payments_pending', table_name='unified_payments')
    op.drop_index('idx_unified_payments_invoice', table_name='unified_payments')
    op.drop_index('ix_unified_payments_unified_user_id', table_name='unified_payments')
    op.drop_table('unified_payments')

    op.drop_index('idx_unified_users_affiliate', table_name='unified_users')
    op.drop_index('ix_unified_users_product_id', table_name='unified_users')
    op.drop_table('unified_users')

    op.drop_table('affiliate_profiles')
    op.drop_table('app_settings')

    op.drop_index('ix_product_commission_levels_product_id', table_name='product_commission_levels')
    op.drop_table('product_commission_levels')

    op.drop_index('idx_sub_affiliates_child_level', table_name='sub_affiliates')
    op.drop_index('ix_sub_affiliates_parent_affiliate_id', table_name='sub_affiliates')
    op.drop_table('sub_affiliates')

    op.drop_index('idx_subscriptions_user_status', table_name='subscriptions')
    op.drop_table('subscriptions')
    op.drop_table('plans')
