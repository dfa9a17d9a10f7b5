"""initial_schema

Create the BudgetFlow tables: department, cost_center, user_profile,
budget and budget_line_item.

Revision ID: 3c7b1d9e4a20
Revises:
Create Date: 2024-01-08 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '3c7b1d9e4a20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.func.now(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'department',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False, unique=True),
        sa.Column('code', sa.String(20), nullable=False, unique=True),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('head_of_department', sa.String(200), nullable=True),
        sa.Column('budget_limit', sa.Numeric(15, 2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )

    op.create_table(
        'cost_center',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('department_id', sa.Integer(), sa.ForeignKey('department.id'), nullable=False),
        sa.Column('code', sa.String(50), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('budget_limit', sa.Numeric(15, 2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('department_id', 'code', name='uq_cost_center_department_code'),
    )

    op.create_table(
        'user_profile',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(100), nullable=False, unique=True),
        sa.Column('email', sa.String(200), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(200), nullable=False),
        sa.Column('full_name', sa.String(300), nullable=True),
        sa.Column('role', sa.String(50), nullable=False, server_default='view_only'),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('cost_center', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('last_login_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'budget',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('budget_id', sa.String(20), nullable=False, unique=True),
        sa.Column('department', sa.String(200), nullable=True),
        sa.Column('cost_center', sa.String(50), nullable=True),
        sa.Column('budget_type', sa.String(10), nullable=True),
        sa.Column('amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('currency', sa.String(3), nullable=False, server_default='USD'),
        sa.Column('description', sa.String(1000), nullable=True),
        sa.Column('justification', sa.Text(), nullable=True),
        sa.Column('period_start', sa.Date(), nullable=True),
        sa.Column('period_end', sa.Date(), nullable=True),
        sa.Column('status', sa.String(30), nullable=False, server_default='Draft'),
        sa.Column('submitted_by', sa.String(100), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_by', sa.String(100), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('review_comments', sa.Text(), nullable=True),
        sa.Column('created_by', sa.String(100), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_budget_department', 'budget', ['department'])
    op.create_index('ix_budget_status', 'budget', ['status'])

    op.create_table(
        'budget_line_item',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('budget_id', sa.Integer(), sa.ForeignKey('budget.id', ondelete='CASCADE'), nullable=False),
        sa.Column('category', sa.String(100), nullable=True),
        sa.Column('subcategory', sa.String(100), nullable=True),
        sa.Column('description', sa.String(500), nullable=True),
        sa.Column('quantity', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('unit_cost', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('total_amount', sa.Numeric(15, 2), nullable=False, server_default='0'),
        sa.Column('notes', sa.String(1000), nullable=True),
    )


def downgrade() -> None:
    op.drop_table('budget_line_item')
    op.drop_index('ix_budget_status', table_name='budget')
    op.drop_index('ix_budget_department', table_name='budget')
    op.drop_table('budget')
    op.drop_table('user_profile')
    op.drop_table('cost_center')
    op.drop_table('department')
