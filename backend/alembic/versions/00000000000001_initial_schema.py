"""Initial schema - users, transactions, portfolio positions, currency balances

Revision ID: 00000000000001
Revises: None
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '00000000000001'
down_revision = None
branch_labels = None
depends_on = None

transaction_type = sa.Enum('BUY', 'SELL', 'MINT', 'BURN', name='transactiontype')
transaction_status = sa.Enum('SUCCESS', 'FAILED', name='transactionstatus')
market = sa.Enum('PUBLIC', 'PRIVATE', name='market')


def upgrade() -> None:
    """Create all tables."""

    # ===========================================
    # 1. USERS TABLE
    # ===========================================
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('wallet_address', sa.String(130), unique=True, index=True, nullable=False),
        sa.Column('base_currency', sa.String(8), nullable=False, server_default='INR'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now()),
    )

    # ===========================================
    # 2. TRANSACTIONS TABLE (append-only)
    # ===========================================
    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('transaction_type', transaction_type, nullable=False),
        sa.Column('market', market, nullable=True),
        sa.Column('stock_symbol', sa.String(20), nullable=True, index=True),
        sa.Column('currency_symbol', sa.String(8), nullable=True),
        sa.Column('quantity', sa.Numeric(24, 6), nullable=False),
        sa.Column('price_per_unit', sa.Numeric(24, 6), nullable=True),
        sa.Column('total_value', sa.Numeric(24, 6), nullable=False),
        sa.Column('fee_amount', sa.Numeric(24, 6), nullable=False, server_default='0'),
        sa.Column('settlement_currency', sa.String(8), nullable=True),
        sa.Column('realized_pnl', sa.Numeric(24, 6), nullable=True),
        sa.Column('tx_hash', sa.String(130), nullable=False, index=True),
        sa.Column('status', transaction_status, nullable=False, server_default='SUCCESS'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), index=True),
        sa.CheckConstraint(
            '(stock_symbol IS NULL) <> (currency_symbol IS NULL)',
            name='ck_transactions_one_symbol',
        ),
    )

    # ===========================================
    # 3. PORTFOLIO POSITIONS TABLE
    # ===========================================
    op.create_table(
        'portfolio_positions',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('stock_symbol', sa.String(20), nullable=False, index=True),
        sa.Column('market', market, nullable=False, server_default='PUBLIC'),
        sa.Column('current_quantity', sa.Numeric(24, 6), nullable=False, server_default='0'),
        sa.Column('total_cost_basis', sa.Numeric(24, 6), nullable=False, server_default='0'),
        sa.Column('average_cost_per_share', sa.Numeric(30, 12), nullable=False, server_default='0'),
        sa.Column('realized_profit_loss', sa.Numeric(24, 6), nullable=False, server_default='0'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
        sa.Column('last_updated', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'stock_symbol', name='uq_position_user_symbol'),
        sa.CheckConstraint('current_quantity >= 0', name='ck_positions_quantity_non_negative'),
        sa.CheckConstraint('total_cost_basis >= 0', name='ck_positions_basis_non_negative'),
    )

    # ===========================================
    # 4. CURRENCY BALANCES TABLE
    # ===========================================
    op.create_table(
        'currency_balances',
        sa.Column('id', sa.Integer(), primary_key=True, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('currency_symbol', sa.String(8), nullable=False),
        sa.Column('balance', sa.Numeric(24, 6), nullable=False, server_default='0'),
        sa.Column('last_updated', sa.DateTime(), server_default=sa.func.now()),
        sa.UniqueConstraint('user_id', 'currency_symbol', name='uq_currency_balance_user_currency'),
    )


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table('currency_balances')
    op.drop_table('portfolio_positions')
    op.drop_table('transactions')
    op.drop_table('users')

    bind = op.get_bind()
    market.drop(bind, checkfirst=True)
    transaction_status.drop(bind, checkfirst=True)
    transaction_type.drop(bind, checkfirst=True)
