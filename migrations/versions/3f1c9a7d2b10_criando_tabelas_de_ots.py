"""Criando tabelas de usuarios e OTs

Revision ID: 3f1c9a7d2b10
Revises:
Create Date: 2026-10-19 09:12:40.118532

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '3f1c9a7d2b10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    # --- 1. Usuários ---
    op.create_table('usuarios',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('username', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=120), nullable=True),
        sa.Column('password_hash', sa.String(length=256), nullable=True),
        sa.Column('is_active_user', sa.Boolean(), nullable=False, server_default=sa.text('1')),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('username')
    )

    # --- 2. OTs ---
    op.create_table('work_orders',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('ot', sa.String(length=64), nullable=False),
        sa.Column('client', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('tag', sa.String(length=64), nullable=False),
        sa.Column('status', sa.String(length=64), nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False),
        sa.Column('location', sa.String(length=10), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['created_by'], ['usuarios.id']),
        sa.ForeignKeyConstraint(['updated_by'], ['usuarios.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ot')
    )

    # --- 3. Datas por etapa ---
    op.create_table('work_order_dates',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('work_order_id', sa.Integer(), nullable=False),
        sa.Column('stage', sa.String(length=64), nullable=False),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=True),
        sa.Column('updated_by', sa.Integer(), nullable=True),
        sa.ForeignKeyConstraint(['work_order_id'], ['work_orders.id']),
        sa.ForeignKeyConstraint(['created_by'], ['usuarios.id']),
        sa.ForeignKeyConstraint(['updated_by'], ['usuarios.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('work_order_id', 'stage', name='uq_work_order_stage')
    )

    # --- 4. Histórico de mudanças ---
    op.create_table('work_order_history',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('work_order_id', sa.Integer(), nullable=False),
        sa.Column('field', sa.String(length=64), nullable=False),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('changed_by', sa.Integer(), nullable=True),
        sa.Column('changed_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['work_order_id'], ['work_orders.id']),
        sa.ForeignKeyConstraint(['changed_by'], ['usuarios.id']),
        sa.PrimaryKeyConstraint('id')
    )
    with op.batch_alter_table('work_order_history', schema=None) as batch_op:
        batch_op.create_index('ix_work_order_history_changed_at', ['changed_at'], unique=False)


def downgrade():
    with op.batch_alter_table('work_order_history', schema=None) as batch_op:
        batch_op.drop_index('ix_work_order_history_changed_at')

    op.drop_table('work_order_history')
    op.drop_table('work_order_dates')
    op.drop_table('work_orders')
    op.drop_table('usuarios')
