"""Initial cash drawer schema

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None

employee_role = sa.Enum('CASHIER', 'MANAGER', 'ADMIN', name='employeerole')
employee_status = sa.Enum('active', 'inactive', name='employeestatus')
order_type = sa.Enum('DINE_IN', 'TAKEOUT', 'DELIVERY', name='ordertype')
transaction_status = sa.Enum(
    'PENDING', 'PREPARING', 'READY', 'SERVED', 'COMPLETED', 'VOIDED',
    name='transactionstatus',
)
payment_method = sa.Enum('CASH', 'CREDIT_CARD', 'DEBIT_CARD', 'GCASH', 'PAYMAYA', name='paymentmethod')
display_event_kind = sa.Enum('PENDING_ORDER', 'PENDING_PAYMENT', 'CLEAR', name='displayeventkind')


def upgrade() -> None:
    op.create_table(
        'employees',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('role', employee_role, nullable=False),
        sa.Column('pin_hash', sa.String(255), nullable=True),
        sa.Column('status', employee_status, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )

    op.create_table(
        'transactions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('employee_id', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('order_type', order_type, nullable=False),
        sa.Column('status', transaction_status, nullable=False),
        sa.Column('total_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('tip', sa.Numeric(12, 2), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_transactions_employee_id', 'transactions', ['employee_id'])
    op.create_index('idx_transactions_created', 'transactions', ['created_at'])

    op.create_table(
        'payments',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('transaction_id', sa.Uuid(), sa.ForeignKey('transactions.id'), nullable=False),
        sa.Column('method', payment_method, nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('reference', sa.String(255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_payments_transaction_id', 'payments', ['transaction_id'])

    op.create_table(
        'cash_drawers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('employee_id', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('active_employee_id', sa.Uuid(), nullable=True, unique=True),
        sa.Column('opening_amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('opened_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('closing_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('expected_amount', sa.Numeric(12, 2), nullable=True),
        sa.Column('net_cash_movement', sa.Numeric(12, 2), nullable=True),
        sa.Column('difference', sa.Numeric(12, 2), nullable=True),
        sa.Column('denomination_breakdown', sa.JSON(), nullable=True),
        sa.Column('denomination_total', sa.Numeric(12, 2), nullable=True),
        sa.Column('closed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_cash_drawers_employee_id', 'cash_drawers', ['employee_id'])
    op.create_index('idx_cash_drawers_employee_opened', 'cash_drawers', ['employee_id', 'opened_at'])
    op.create_index('idx_cash_drawers_closed', 'cash_drawers', ['closed_at'])

    op.create_table(
        'cash_drops',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('drawer_id', sa.Uuid(), sa.ForeignKey('cash_drawers.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('dropped_by', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('dropped_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_cash_drops_drawer_id', 'cash_drops', ['drawer_id'])

    op.create_table(
        'cash_pickups',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('drawer_id', sa.Uuid(), sa.ForeignKey('cash_drawers.id'), nullable=False),
        sa.Column('amount', sa.Numeric(12, 2), nullable=False),
        sa.Column('reason', sa.Text(), nullable=False),
        sa.Column('picked_up_by', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('picked_up_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_cash_pickups_drawer_id', 'cash_pickups', ['drawer_id'])

    op.create_table(
        'shift_notes',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('drawer_id', sa.Uuid(), sa.ForeignKey('cash_drawers.id'), nullable=False),
        sa.Column('note', sa.Text(), nullable=False),
        sa.Column('created_by', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_shift_notes_drawer_id', 'shift_notes', ['drawer_id'])

    op.create_table(
        'cash_drawer_transactions',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('drawer_id', sa.Uuid(), sa.ForeignKey('cash_drawers.id'), nullable=False),
        sa.Column('transaction_id', sa.Uuid(), sa.ForeignKey('transactions.id'), nullable=False),
        sa.Column('attached_at', sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint('drawer_id', 'transaction_id', name='uq_cash_drawer_transaction'),
    )
    op.create_index('ix_cash_drawer_transactions_drawer_id', 'cash_drawer_transactions', ['drawer_id'])

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('actor_employee_id', sa.Uuid(), sa.ForeignKey('employees.id'), nullable=False),
        sa.Column('action', sa.String(100), nullable=False),
        sa.Column('entity_type', sa.String(50), nullable=False),
        sa.Column('entity_id', sa.Uuid(), nullable=True),
        sa.Column('metadata_json', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('idx_audit_logs_created', 'audit_logs', ['created_at'])
    op.create_index('idx_audit_logs_actor', 'audit_logs', ['actor_employee_id'])
    op.create_index('idx_audit_logs_entity', 'audit_logs', ['entity_type', 'entity_id'])

    op.create_table(
        'display_events',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('terminal_id', sa.String(100), nullable=False),
        sa.Column('kind', display_event_kind, nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('expires_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('acknowledged_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('idx_display_events_terminal_kind', 'display_events', ['terminal_id', 'kind', 'created_at'])


def downgrade() -> None:
    op.drop_index('idx_display_events_terminal_kind', table_name='display_events')
    op.drop_table('display_events')

    op.drop_index('idx_audit_logs_entity', table_name='audit_logs')
    op.drop_index('idx_audit_logs_actor', table_name='audit_logs')
    op.drop_index('idx_audit_logs_created', table_name='audit_logs')
    op.drop_table('audit_logs')

    op.drop_index('ix_cash_drawer_transactions_drawer_id', table_name='cash_drawer_transactions')
    op.drop_table('cash_drawer_transactions')
    op.drop_index('ix_shift_notes_drawer_id', table_name='shift_notes')
    op.drop_table('shift_notes')
    op.drop_index('ix_cash_pickups_drawer_id', table_name='cash_pickups')
    op.drop_table('cash_pickups')
    op.drop_index('ix_cash_drops_drawer_id', table_name='cash_drops')
    op.drop_table('cash_drops')

    op.drop_index('idx_cash_drawers_closed', table_name='cash_drawers')
    op.drop_index('idx_cash_drawers_employee_opened', table_name='cash_drawers')
    op.drop_index('ix_cash_drawers_employee_id', table_name='cash_drawers')
    op.drop_table('cash_drawers')

    op.drop_index('ix_payments_transaction_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('idx_transactions_created', table_name='transactions')
    op.drop_index('ix_transactions_employee_id', table_name='transactions')
    op.drop_table('transactions')
    op.drop_table('employees')

    bind = op.get_bind()
    for enum_type in (
        display_event_kind,
        payment_method,
        transaction_status,
        order_type,
        employee_status,
        employee_role,
    ):
        enum_type.drop(bind, checkfirst=True)
