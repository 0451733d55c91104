"""create_planning_tables

Revision ID: 4c1f7a9e2b10
Revises:
Create Date: 2026-10-18 10:12:41.208315

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4c1f7a9e2b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps():
    return [
        sa.Column('created', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.Column('updated', sa.DateTime(), nullable=False, server_default=sa.func.now()),
    ]


def _file_columns(parent_column: str, parent_table: str):
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column(parent_column, sa.String(length=36), nullable=False),
        sa.Column('file_name', sa.String(length=255), nullable=False, server_default=''),
        sa.Column('file_key', sa.String(length=500), nullable=False, server_default=''),
        sa.Column('content_type', sa.String(length=150), nullable=False, server_default=''),
        sa.Column('notes', sa.Text(), nullable=False, server_default=''),
        *_timestamps(),
        sa.ForeignKeyConstraint([parent_column], [f'{parent_table}.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade() -> None:
    """Upgrade schema."""
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('login', sa.String(length=100), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_login', 'users', ['login'], unique=True)

    op.create_table(
        'clients',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('email', sa.String(length=200), nullable=False, server_default=''),
        sa.Column('login', sa.String(length=100), nullable=True),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_clients_login', 'clients', ['login'], unique=True)

    op.create_table(
        'audit_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('actor', sa.String(length=200), nullable=True),
        sa.Column('action', sa.String(length=100), nullable=False),
        sa.Column('resource_type', sa.String(length=50), nullable=False),
        sa.Column('resource_id', sa.String(length=200), nullable=True),
        sa.Column('resource_name', sa.String(length=500), nullable=True),
        sa.Column('details', sa.Text(), nullable=True),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.Column('user_agent', sa.String(length=500), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.func.now()),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_audit_logs_id', 'audit_logs', ['id'])

    op.create_table(
        'project_categories',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('code', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('code'),
    )

    op.create_table(
        'project_types',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('category_id', sa.String(length=36), nullable=False),
        sa.Column('code', sa.String(length=100), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['category_id'], ['project_categories.id'], name='project_types_category_id_fkey'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_types_category_id', 'project_types', ['category_id'])
    op.create_index('project_types_code_lower_key', 'project_types', [sa.text('lower(code)')], unique=True)
    op.create_index('project_types_category_name_lower_key', 'project_types',
                    ['category_id', sa.text('lower(name)')], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('objective', sa.Text(), nullable=False, server_default=''),
        sa.Column('project_type_id', sa.String(length=36), nullable=True),
        sa.Column('lifecycle_type', sa.String(length=20), nullable=False, server_default='temporario'),
        sa.Column('has_monthly_maintenance', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='planejamento'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("lifecycle_type IN ('temporario', 'recorrente')", name='projects_lifecycle_type_check'),
        sa.CheckConstraint("status IN ('planejamento', 'andamento', 'concluido', 'cancelado')",
                           name='projects_status_check'),
        sa.ForeignKeyConstraint(['project_type_id'], ['project_types.id'], name='projects_project_type_id_fkey'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_projects_project_type_id', 'projects', ['project_type_id'])
    op.create_index('projects_name_lower_key', 'projects', [sa.text('lower(name)')], unique=True)

    op.create_table(
        'project_clients',
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('client_id', sa.String(length=36), nullable=False),
        sa.Column('role', sa.String(length=50), nullable=False, server_default=''),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], name='project_clients_client_id_fkey'),
        sa.PrimaryKeyConstraint('project_id', 'client_id'),
    )

    op.create_table(
        'project_managers',
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='project_managers_user_id_fkey'),
        sa.PrimaryKeyConstraint('project_id', 'user_id'),
    )

    op.create_table(
        'project_phases',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('objective', sa.Text(), nullable=False, server_default=''),
        sa.Column('starts_on', sa.Date(), nullable=True),
        sa.Column('ends_on', sa.Date(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_phases_project_id', 'project_phases', ['project_id'])
    op.create_table('project_phase_files', *_file_columns('project_phase_id', 'project_phases'))
    op.create_index('ix_project_phase_files_project_phase_id', 'project_phase_files', ['project_phase_id'])

    op.create_table(
        'project_tasks',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('project_phase_id', sa.String(length=36), nullable=True),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('objective', sa.Text(), nullable=False, server_default=''),
        sa.Column('responsible_user_id', sa.String(length=36), nullable=True),
        sa.Column('starts_on', sa.Date(), nullable=True),
        sa.Column('ends_on', sa.Date(), nullable=True),
        sa.Column('position', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='planejada'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint("status IN ('planejada', 'iniciada', 'concluida', 'cancelada')",
                           name='project_tasks_status_check'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['project_phase_id'], ['project_phases.id'], ondelete='SET NULL'),
        sa.ForeignKeyConstraint(['responsible_user_id'], ['users.id'],
                                name='project_tasks_responsible_user_id_fkey', ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_tasks_project_id', 'project_tasks', ['project_id'])
    op.create_index('ix_project_tasks_project_phase_id', 'project_tasks', ['project_phase_id'])
    op.create_table('project_task_files', *_file_columns('project_task_id', 'project_tasks'))
    op.create_index('ix_project_task_files_project_task_id', 'project_task_files', ['project_task_id'])

    op.create_table(
        'project_task_comments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('project_task_id', sa.String(length=36), nullable=False),
        sa.Column('parent_comment_id', sa.String(length=36), nullable=True),
        sa.Column('user_id', sa.String(length=36), nullable=True),
        sa.Column('client_id', sa.String(length=36), nullable=True),
        sa.Column('comment', sa.Text(), nullable=False),
        *_timestamps(),
        sa.CheckConstraint('(user_id IS NULL) <> (client_id IS NULL)', name='project_task_comments_author_check'),
        sa.ForeignKeyConstraint(['project_task_id'], ['project_tasks.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_comment_id'], ['project_task_comments.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], name='project_task_comments_user_id_fkey'),
        sa.ForeignKeyConstraint(['client_id'], ['clients.id'], name='project_task_comments_client_id_fkey'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_task_comments_project_task_id', 'project_task_comments', ['project_task_id'])
    op.create_table('project_task_comment_files',
                    *_file_columns('project_task_comment_id', 'project_task_comments'))
    op.create_index('ix_project_task_comment_files_project_task_comment_id', 'project_task_comment_files',
                    ['project_task_comment_id'])

    op.create_table(
        'project_revenues',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('objective', sa.Text(), nullable=False, server_default=''),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('expected_on', sa.Date(), nullable=True),
        sa.Column('received_on', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('amount >= 0', name='project_revenues_amount_check'),
        sa.CheckConstraint("status IN ('pendente', 'recebido', 'cancelado')", name='project_revenues_status_check'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_revenues_project_id', 'project_revenues', ['project_id'])
    op.create_table(
        'project_revenue_receipts',
        *_file_columns('project_revenue_id', 'project_revenues'),
        sa.Column('issued_on', sa.Date(), nullable=True),
    )
    op.create_index('ix_project_revenue_receipts_project_revenue_id', 'project_revenue_receipts',
                    ['project_revenue_id'])

    op.create_table(
        'project_monthly_charges',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('project_id', sa.String(length=36), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=False, server_default=''),
        sa.Column('installment', sa.String(length=100), nullable=False, server_default=''),
        sa.Column('amount', sa.Float(), nullable=False, server_default='0'),
        sa.Column('due_day', sa.Integer(), nullable=False, server_default='1'),
        sa.Column('starts_on', sa.Date(), nullable=True),
        sa.Column('ends_on', sa.Date(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='pendente'),
        sa.Column('active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.CheckConstraint('amount >= 0', name='project_monthly_charges_amount_check'),
        sa.CheckConstraint('due_day BETWEEN 1 AND 31', name='project_monthly_charges_due_day_check'),
        sa.CheckConstraint("status IN ('pendente', 'pago', 'cancelada')", name='project_monthly_charges_status_check'),
        sa.CheckConstraint('starts_on IS NULL OR ends_on IS NULL OR ends_on >= starts_on',
                           name='project_monthly_charges_dates_check'),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_project_monthly_charges_project_id', 'project_monthly_charges', ['project_id'])


def downgrade() -> None:
    """Downgrade schema."""
    op.drop_table('project_monthly_charges')
    op.drop_table('project_revenue_receipts')
    op.drop_table('project_revenues')
    op.drop_table('project_task_comment_files')
    op.drop_table('project_task_comments')
    op.drop_table('project_task_files')
    op.drop_table('project_tasks')
    op.drop_table('project_phase_files')
    op.drop_table('project_phases')
    op.drop_table('project_managers')
    op.drop_table('project_clients')
    op.drop_table('projects')
    op.drop_table('project_types')
    op.drop_table('project_categories')
    op.drop_table('audit_logs')
    op.drop_table('clients')
    op.drop_table('users')
