"""Initial schema: users, projects, tasks, submissions, activities.

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


json_type = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')

userrole = sa.Enum('STUDENT', 'FACULTY', 'ADMIN', name='userrole')
projectstatus = sa.Enum('ACTIVE', 'COMPLETED', 'ARCHIVED', name='projectstatus')
taskstatus = sa.Enum('TODO', 'IN_PROGRESS', 'DONE', name='taskstatus')
taskpriority = sa.Enum('LOW', 'MEDIUM', 'HIGH', name='taskpriority')
submissionstatus = sa.Enum('PENDING', 'APPROVED', 'REJECTED', 'NEEDS_REVISION', name='submissionstatus')
activitytype = sa.Enum(
    'TASK_CREATED', 'TASK_UPDATED', 'TASK_COMPLETED', 'MEMBER_ADDED',
    'FILE_UPLOADED', 'SUBMISSION_CREATED', 'FEEDBACK_ADDED', 'PROJECT_UPDATED',
    name='activitytype',
)


def timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.Text(), nullable=False),
        sa.Column('role', userrole, nullable=False),
        sa.Column('student_id', sa.String(50), nullable=True),
        sa.Column('department', sa.String(255), nullable=True),
        sa.Column('year', sa.Integer(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('groups', json_type, nullable=False),
        *timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'projects',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('faculty_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('members', json_type, nullable=False),
        sa.Column('status', projectstatus, nullable=False),
        sa.Column('progress', sa.Integer(), nullable=False),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        sa.Column('files', json_type, nullable=False),
        sa.Column('version', sa.Integer(), nullable=False),
        *timestamps(),
    )
    op.create_index('ix_projects_faculty_id', 'projects', ['faculty_id'])

    op.create_table(
        'tasks',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('project_id', sa.BigInteger(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column(
            'assigned_to_id', sa.BigInteger(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('status', taskstatus, nullable=False),
        sa.Column('priority', taskpriority, nullable=False),
        sa.Column('deadline', sa.DateTime(timezone=True), nullable=True),
        *timestamps(),
    )
    op.create_index('ix_tasks_project_id', 'tasks', ['project_id'])
    op.create_index('ix_tasks_assigned_to_id', 'tasks', ['assigned_to_id'])
    op.create_index('ix_tasks_status', 'tasks', ['status'])

    op.create_table(
        'submissions',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('project_id', sa.BigInteger(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('submitted_by_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('files', json_type, nullable=False),
        sa.Column('comments', sa.Text(), nullable=True),
        sa.Column('status', submissionstatus, nullable=False),
        sa.Column('grade', sa.Integer(), nullable=True),
        sa.Column('feedback', sa.Text(), nullable=True),
        sa.Column(
            'reviewed_by_id', sa.BigInteger(),
            sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True,
        ),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_submissions_project_id', 'submissions', ['project_id'])
    op.create_index('ix_submissions_submitted_by_id', 'submissions', ['submitted_by_id'])

    op.create_table(
        'activities',
        sa.Column('id', sa.BigInteger(), primary_key=True, autoincrement=True),
        sa.Column('project_id', sa.BigInteger(), sa.ForeignKey('projects.id'), nullable=False),
        sa.Column('user_id', sa.BigInteger(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('type', activitytype, nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('metadata', json_type, nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )
    op.create_index('ix_activities_project_id', 'activities', ['project_id'])
    op.create_index('ix_activities_user_id', 'activities', ['user_id'])
    op.create_index('ix_activities_type', 'activities', ['type'])
    op.create_index('ix_activities_created_at', 'activities', ['created_at'])


def downgrade() -> None:
    op.drop_table('activities')
    op.drop_table('submissions')
    op.drop_table('tasks')
    op.drop_table('projects')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (activitytype, submissionstatus, taskpriority, taskstatus, projectstatus, userrole):
        enum_type.drop(bind, checkfirst=True)
