"""initial timetable schema

Revision ID: 4f1c2a9e7b3d
Revises:
Create Date: 2026-10-18 09:12:40.118203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '4f1c2a9e7b3d'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'timetable_versions',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('version_number', sa.String(length=20), nullable=False),
        sa.Column('version_name', sa.String(length=120), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('effective_from', sa.Date(), nullable=False),
        sa.Column('effective_until', sa.Date(), nullable=True),
        sa.Column('created_by', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    op.create_index('ix_timetable_versions_version_number', 'timetable_versions', ['version_number'])
    op.create_index('ix_timetable_versions_effective_from', 'timetable_versions', ['effective_from'], unique=True)
    op.create_index('ix_timetable_versions_effective_until', 'timetable_versions', ['effective_until'])

    op.create_table(
        'periods',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'timetable_version_id',
            sa.Integer(),
            sa.ForeignKey('timetable_versions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('period_number', sa.SmallInteger(), nullable=False),
        sa.Column('period_name', sa.String(length=60), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('is_break', sa.Boolean(), nullable=False),
        sa.Column('break_duration_minutes', sa.SmallInteger(), nullable=False),
        sa.Column('display_order', sa.SmallInteger(), nullable=False),
        sa.UniqueConstraint('timetable_version_id', 'period_number', name='uq_periods_version_number'),
    )
    op.create_index('ix_periods_timetable_version_id', 'periods', ['timetable_version_id'])

    op.create_table(
        'weekly_class_schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'timetable_version_id',
            sa.Integer(),
            sa.ForeignKey('timetable_versions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('period_id', sa.Integer(), sa.ForeignKey('periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('class_id', sa.Integer(), nullable=True),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('subject_name', sa.String(length=200), nullable=False),
        sa.Column('session_type', sa.String(length=20), nullable=False),
        sa.Column('instructor_id', sa.Integer(), nullable=True),
        sa.Column('instructor_name', sa.String(length=120), nullable=True),
        sa.Column('lab_id', sa.Integer(), nullable=True),
        sa.Column('room_name', sa.String(length=120), nullable=True),
        sa.Column('day_of_week', sa.SmallInteger(), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=False),
        sa.Column('end_date', sa.Date(), nullable=False),
        sa.Column('exclude_second_saturdays', sa.Boolean(), nullable=False),
        sa.Column('exclude_sundays', sa.Boolean(), nullable=False),
        sa.Column('custom_holiday_dates', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
    )
    op.create_index('ix_weekly_class_schedules_timetable_version_id', 'weekly_class_schedules', ['timetable_version_id'])
    op.create_index('ix_weekly_class_schedules_period_id', 'weekly_class_schedules', ['period_id'])
    op.create_index('ix_weekly_class_schedules_class_id', 'weekly_class_schedules', ['class_id'])

    op.create_table(
        'schedules',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column(
            'timetable_version_id',
            sa.Integer(),
            sa.ForeignKey('timetable_versions.id', ondelete='CASCADE'),
            nullable=False,
        ),
        sa.Column('period_id', sa.Integer(), sa.ForeignKey('periods.id', ondelete='CASCADE'), nullable=False),
        sa.Column('schedule_date', sa.Date(), nullable=False),
        sa.Column('session_title', sa.String(length=200), nullable=False),
        sa.Column('session_type', sa.String(length=20), nullable=False),
        sa.Column('session_description', sa.Text(), nullable=True),
        sa.Column('lab_id', sa.Integer(), nullable=True),
        sa.Column('room_name', sa.String(length=120), nullable=True),
        sa.Column('instructor_id', sa.Integer(), nullable=True),
        sa.Column('instructor_name', sa.String(length=120), nullable=True),
        sa.Column('class_id', sa.Integer(), nullable=True),
        sa.Column('group_id', sa.Integer(), nullable=True),
        sa.Column('student_count', sa.SmallInteger(), nullable=False),
        sa.Column('max_capacity', sa.SmallInteger(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column(
            'weekly_schedule_id',
            sa.Integer(),
            sa.ForeignKey('weekly_class_schedules.id', ondelete='SET NULL'),
            nullable=True,
        ),
        sa.Column('created_by', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
    )
    for column in (
        'timetable_version_id',
        'period_id',
        'schedule_date',
        'lab_id',
        'instructor_id',
        'class_id',
        'group_id',
        'status',
        'weekly_schedule_id',
    ):
        op.create_index(f'ix_schedules_{column}', 'schedules', [column])

    op.create_table(
        'timetable_config',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('max_lectures_per_day', sa.SmallInteger(), nullable=False),
        sa.Column('lecture_duration_minutes', sa.SmallInteger(), nullable=False),
        sa.Column('break_duration_minutes', sa.SmallInteger(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('working_days', sa.JSON(), nullable=False),
    )

    op.create_table(
        'calendar_days',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('day', sa.Date(), nullable=False),
        sa.Column('is_school_day', sa.Boolean(), nullable=False),
        sa.Column('kind', sa.String(length=30), nullable=False),
        sa.Column('note', sa.String(length=255), nullable=True),
    )
    op.create_index('ix_calendar_days_day', 'calendar_days', ['day'], unique=True)


def downgrade() -> None:
    op.drop_table('calendar_days')
    op.drop_table('timetable_config')
    op.drop_table('schedules')
    op.drop_table('weekly_class_schedules')
    op.drop_table('periods')
    op.drop_table('timetable_versions')
