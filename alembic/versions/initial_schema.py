"""initial schema: users, categories, transactions, recurring transactions, budgets, goals, notifications

Revision ID: initial_schema
Revises:
Create Date: 2026-10-19

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = 'initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('email', sa.String(length=320), nullable=False),
        sa.Column('hashed_password', sa.String(length=1024), nullable=False),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('is_superuser', sa.Boolean, nullable=False),
        sa.Column('is_verified', sa.Boolean, nullable=False),
        sa.Column('full_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'categories',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('icon', sa.String(length=50), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=True),
        sa.Column('is_default', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'name', name='uq_category_user_name'),
    )
    op.create_index('ix_categories_user_id', 'categories', ['user_id'])

    op.create_table(
        'recurring_transactions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('frequency', sa.String(length=10), nullable=False),
        sa.Column('start_date', sa.Date, nullable=False),
        sa.Column('end_date', sa.Date, nullable=True),
        sa.Column('day_of_month', sa.Integer, nullable=True),
        sa.Column('day_of_week', sa.Integer, nullable=True),
        sa.Column('is_active', sa.Boolean, nullable=False),
        sa.Column('last_generated_date', sa.Date, nullable=True),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_recurring_transactions_user_id', 'recurring_transactions', ['user_id'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.String(length=10), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('transaction_date', sa.Date, nullable=False),
        sa.Column(
            'recurring_transaction_id',
            sa.Uuid(),
            sa.ForeignKey('recurring_transactions.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('recurring_transaction_id', 'transaction_date', name='uq_transaction_recurring_date'),
    )
    op.create_index('ix_transactions_user_date', 'transactions', ['user_id', 'transaction_date'])

    op.create_table(
        'budgets',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('amount', sa.Float, nullable=False),
        sa.Column('month', sa.Integer, nullable=False),
        sa.Column('year', sa.Integer, nullable=False),
        sa.Column('alert_at_50', sa.Boolean, nullable=False),
        sa.Column('alert_at_80', sa.Boolean, nullable=False),
        sa.Column('alert_at_100', sa.Boolean, nullable=False),
        sa.Column('alert_50_sent', sa.Boolean, nullable=False),
        sa.Column('alert_80_sent', sa.Boolean, nullable=False),
        sa.Column('alert_100_sent', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.Column('updated_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'category_id', 'month', 'year', name='uq_budget_user_category_period'),
    )
    op.create_index('ix_budgets_user_id', 'budgets', ['user_id'])

    op.create_table(
        'goals',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='RESTRICT'), nullable=False),
        sa.Column('target_amount', sa.Float, nullable=False),
        sa.Column('month', sa.Integer, nullable=False),
        sa.Column('year', sa.Integer, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
        sa.UniqueConstraint('user_id', 'category_id', 'month', 'year', name='uq_goal_user_category_period'),
    )
    op.create_index('ix_goals_user_id', 'goals', ['user_id'])

    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('title', sa.String, nullable=False),
        sa.Column('message', sa.String, nullable=False),
        sa.Column('type', sa.String, nullable=False),
        sa.Column('status', sa.String, nullable=False),
        sa.Column('category_id', sa.Uuid(), sa.ForeignKey('categories.id', ondelete='SET NULL'), nullable=True),
        sa.Column('percentage', sa.Float, nullable=True),
        sa.Column('is_read', sa.Boolean, nullable=False),
        sa.Column('created_at', sa.DateTime, nullable=True),
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])


def downgrade():
    op.drop_table('notifications')
    op.drop_table('goals')
    op.drop_table('budgets')
    op.drop_table('transactions')
    op.drop_table('recurring_transactions')
    op.drop_table('categories')
    op.drop_table('users')
