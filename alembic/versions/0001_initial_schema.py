"""initial schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 10:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('USER', 'PROJECT_MANAGER', 'SUB_PMO', 'MAIN_PMO', 'DEPARTMENT_DIRECTOR', 'EXECUTIVE', 'ADMINISTRATOR', name='userrole')
project_status = sa.Enum('PENDING', 'PLANNING', 'IN_PROGRESS', 'ON_HOLD', 'COMPLETED', 'CANCELLED', 'REJECTED', name='projectstatus')
task_status = sa.Enum('TODO', 'IN_PROGRESS', 'REVIEW', 'ON_HOLD', 'COMPLETED', name='taskstatus')
priority = sa.Enum('LOW', 'MEDIUM', 'HIGH', 'CRITICAL', name='priority')
milestone_status = sa.Enum('NOT_STARTED', 'IN_PROGRESS', 'COMPLETED', 'DELAYED', 'AT_RISK', name='milestonestatus')
risk_type = sa.Enum('RISK', 'ISSUE', name='risktype')
risk_status = sa.Enum('OPEN', 'IN_PROGRESS', 'RESOLVED', 'CLOSED', name='riskstatus')
risk_source_kind = sa.Enum(
    'PROJECT_DEADLINE_APPROACHING', 'PROJECT_DEADLINE_MISSED',
    'TASK_DEADLINE_APPROACHING', 'TASK_DEADLINE_MISSED',
    name='risksourcekind'
)


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, comment='创建时间'),
        sa.Column('updated_at', sa.DateTime(), nullable=True, comment='更新时间'),
    ]


def upgrade() -> None:
    op.create_table(
        'departments',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('code', sa.String(length=50), nullable=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('director_user_id', sa.String(length=25), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_departments_id', 'departments', ['id'])

    op.create_table(
        'users',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('username', sa.String(length=50), nullable=False),
        sa.Column('email', sa.String(length=100), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('department_id', sa.String(length=25), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_username', 'users', ['username'], unique=True)
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', project_status, nullable=False),
        sa.Column('priority', priority, nullable=True),
        sa.Column('budget', sa.Numeric(15, 2), nullable=True),
        sa.Column('actual_cost', sa.Numeric(15, 2), nullable=True),
        sa.Column('start_date', sa.DateTime(), nullable=True),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('department_id', sa.String(length=25), sa.ForeignKey('departments.id'), nullable=True),
        sa.Column('manager_user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_by_user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_projects_id', 'projects', ['id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('project_id', sa.String(length=25), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', task_status, nullable=False),
        sa.Column('priority', priority, nullable=True),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('assigned_user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('created_by_user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_tasks_id', 'tasks', ['id'])
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])

    op.create_table(
        'milestones',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('project_id', sa.String(length=25), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('deadline', sa.DateTime(), nullable=True),
        sa.Column('completion_percentage', sa.Integer(), nullable=False),
        sa.Column('status', milestone_status, nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_milestones_id', 'milestones', ['id'])
    op.create_index('ix_milestones_project_id', 'milestones', ['project_id'])

    op.create_table(
        'task_milestones',
        sa.Column('id', sa.String(length=27), primary_key=True),
        sa.Column('task_id', sa.String(length=25), sa.ForeignKey('tasks.id'), nullable=False),
        sa.Column('milestone_id', sa.String(length=25), sa.ForeignKey('milestones.id'), nullable=False),
        sa.Column('weight', sa.Float(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('task_id', 'milestone_id', name='uq_task_milestones_task_milestone'),
    )
    op.create_index('ix_task_milestones_id', 'task_milestones', ['id'])
    op.create_index('ix_task_milestones_task_id', 'task_milestones', ['task_id'])
    op.create_index('ix_task_milestones_milestone_id', 'task_milestones', ['milestone_id'])

    op.create_table(
        'risks_issues',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('project_id', sa.String(length=25), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('type', risk_type, nullable=False),
        sa.Column('title', sa.String(length=300), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('priority', priority, nullable=True),
        sa.Column('status', risk_status, nullable=False),
        sa.Column('created_by_user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('source_kind', risk_source_kind, nullable=True),
        sa.Column('source_entity_id', sa.String(length=25), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_risks_issues_id', 'risks_issues', ['id'])
    op.create_index('ix_risks_issues_project_id', 'risks_issues', ['project_id'])
    open_rows = sa.text("status NOT IN ('RESOLVED', 'CLOSED')")
    op.create_index(
        'uq_risks_issues_open_source', 'risks_issues', ['source_kind', 'source_entity_id'],
        unique=True, sqlite_where=open_rows, postgresql_where=open_rows,
    )

    op.create_table(
        'notifications',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('related_entity', sa.String(length=50), nullable=True),
        sa.Column('related_entity_id', sa.String(length=25), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('requires_approval', sa.Boolean(), nullable=False),
        sa.Column('last_reminder_sent', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notifications_id', 'notifications', ['id'])
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])

    op.create_table(
        'weekly_updates',
        sa.Column('id', sa.String(length=25), primary_key=True),
        sa.Column('project_id', sa.String(length=25), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('week_number', sa.Integer(), nullable=False),
        sa.Column('comments', sa.Text(), nullable=False),
        sa.Column('created_by_user_id', sa.String(length=25), sa.ForeignKey('users.id'), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('project_id', 'year', 'week_number', name='uq_weekly_updates_project_week'),
    )
    op.create_index('ix_weekly_updates_id', 'weekly_updates', ['id'])
    op.create_index('ix_weekly_updates_project_id', 'weekly_updates', ['project_id'])


def downgrade() -> None:
    op.drop_table('weekly_updates')
    op.drop_table('notifications')
    op.drop_index('uq_risks_issues_open_source', table_name='risks_issues')
    op.drop_table('risks_issues')
    op.drop_table('task_milestones')
    op.drop_table('milestones')
    op.drop_table('tasks')
    op.drop_table('projects')
    op.drop_table('users')
    op.drop_table('departments')

    bind = op.get_bind()
    for enum_type in (risk_source_kind, risk_status, risk_type, milestone_status, priority, task_status, project_status, user_role):
        enum_type.drop(bind, checkfirst=True)
