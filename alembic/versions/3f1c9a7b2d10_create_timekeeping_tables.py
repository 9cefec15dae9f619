"""create timekeeping tables

Revision ID: 3f1c9a7b2d10
Revises:
Create Date: 2025-03-10 08:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '3f1c9a7b2d10'
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        'operators',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('registration', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('pin_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=16), nullable=False, server_default='operator'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_operators_registration', 'operators', ['registration'], unique=True)

    op.create_table(
        'processes',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
    )

    op.create_table(
        'work_orders',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('code', sa.String(length=64), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('reference', sa.String(length=255), nullable=True),
        sa.Column('description', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='open'),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_work_orders_code', 'work_orders', ['code'], unique=True)

    # 机台与机头
    op.create_table(
        'machines',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(length=255), nullable=False, unique=True),
        sa.Column('kind', sa.String(length=32), nullable=False, server_default='standard'),
        sa.Column('head_count', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
    )
    op.create_table(
        'machine_heads',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('machine_id', sa.Integer(), sa.ForeignKey('machines.id'), nullable=False),
        sa.Column('number', sa.Integer(), nullable=False),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='ok'),
        sa.Column('last_problem', sa.String(length=255), nullable=True),
        sa.UniqueConstraint('machine_id', 'number', name='uq_machine_head_number'),
    )

    op.create_table(
        'activities',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('operator_id', sa.String(length=36), sa.ForeignKey('operators.id'), nullable=False),
        sa.Column('process_id', sa.String(length=36), sa.ForeignKey('processes.id'), nullable=False),
        sa.Column('work_order_id', sa.String(length=36), sa.ForeignKey('work_orders.id'), nullable=False),
        sa.Column('machine_id', sa.Integer(), sa.ForeignKey('machines.id'), nullable=True),
        sa.Column('heads_in_use', sa.JSON(), nullable=True),
        sa.Column('head_efficiency_pct', sa.Integer(), nullable=True),
        sa.Column('planned_qty', sa.Integer(), nullable=False),
        sa.Column('realized_qty', sa.Integer(), nullable=True),
        sa.Column('scrap_qty', sa.Integer(), nullable=True),
        sa.Column('scrap_reason', sa.String(length=255), nullable=True),
        sa.Column('status', sa.String(length=16), nullable=False, server_default='active'),
        sa.Column('in_progress', sa.Boolean(), nullable=False, server_default=sa.true()),
        # 每个操作员最多一个进行中的活动
        sa.Column('open_operator_id', sa.String(length=36), nullable=True, unique=True),
        sa.Column('pieces_done', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('pauses', sa.JSON(), nullable=False),
        sa.Column('start_ts', sa.DateTime(), nullable=False),
        sa.Column('end_ts', sa.DateTime(), nullable=True),
        sa.Column('total_elapsed_s', sa.Integer(), nullable=True),
        sa.Column('time_per_unit_s', sa.Float(), nullable=True),
        sa.Column('origin_device', sa.String(length=64), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.func.now()),
    )
    op.create_index('ix_activities_operator_id', 'activities', ['operator_id'])
    op.create_index('ix_activities_work_order_id', 'activities', ['work_order_id'])

    op.create_table(
        'piece_records',
        sa.Column('id', sa.String(length=36), primary_key=True),
        sa.Column('activity_id', sa.String(length=36), sa.ForeignKey('activities.id'), nullable=False),
        sa.Column('sequence', sa.Integer(), nullable=False),
        sa.Column('cumulative_elapsed_s', sa.Integer(), nullable=False),
        sa.Column('completed_at', sa.DateTime(), nullable=False),
        sa.UniqueConstraint('activity_id', 'sequence', name='uq_piece_activity_sequence'),
    )
    op.create_index('ix_piece_records_activity_id', 'piece_records', ['activity_id'])


def downgrade():
    op.drop_index('ix_piece_records_activity_id', table_name='piece_records')
    op.drop_table('piece_records')
    op.drop_index('ix_activities_work_order_id', table_name='activities')
    op.drop_index('ix_activities_operator_id', table_name='activities')
    op.drop_table('activities')
    op.drop_table('machine_heads')
    op.drop_table('machines')
    op.drop_index('ix_work_orders_code', table_name='work_orders')
    op.drop_table('work_orders')
    op.drop_table('processes')
    op.drop_index('ix_operators_registration', table_name='operators')
    op.drop_table('operators')
