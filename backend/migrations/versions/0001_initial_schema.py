"""initial_schema

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'persons',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('username', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=False),
        sa.Column('academic_title', sa.String(length=64), nullable=True),
        sa.Column('position', sa.String(length=255), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('bio', sa.String(length=2000), nullable=True),
        sa.Column('facebook', sa.String(length=500), nullable=True),
        sa.Column('linkedin', sa.String(length=500), nullable=True),
        sa.Column('twitter', sa.String(length=500), nullable=True),
        sa.Column('instagram', sa.String(length=500), nullable=True),
        sa.Column('xing', sa.String(length=500), nullable=True),
        sa.Column('youtube', sa.String(length=500), nullable=True),
        sa.Column('mastodon', sa.String(length=500), nullable=True),
        sa.Column('areas', sa.JSON(), nullable=False),
        sa.Column('skills', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_persons_id'), 'persons', ['id'], unique=False)
    op.create_index(op.f('ix_persons_username'), 'persons', ['username'], unique=True)

    op.create_table(
        'organizations',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('kinds', sa.JSON(), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('street', sa.String(length=255), nullable=True),
        sa.Column('street_number', sa.String(length=32), nullable=True),
        sa.Column('zip_code', sa.String(length=16), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('bio', sa.String(length=2000), nullable=True),
        sa.Column('facebook', sa.String(length=500), nullable=True),
        sa.Column('linkedin', sa.String(length=500), nullable=True),
        sa.Column('twitter', sa.String(length=500), nullable=True),
        sa.Column('instagram', sa.String(length=500), nullable=True),
        sa.Column('youtube', sa.String(length=500), nullable=True),
        sa.Column('areas', sa.JSON(), nullable=False),
        sa.Column('focuses', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_organizations_id'), 'organizations', ['id'], unique=False)
    op.create_index(op.f('ix_organizations_slug'), 'organizations', ['slug'], unique=True)

    op.create_table(
        'events',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('participation_from', sa.DateTime(), nullable=True),
        sa.Column('participation_until', sa.DateTime(), nullable=True),
        sa.Column('participant_limit', sa.Integer(), nullable=True),
        sa.Column('parent_event_id', sa.UUID(), nullable=True),
        sa.Column('published', sa.Boolean(), nullable=False),
        sa.Column('canceled', sa.Boolean(), nullable=False),
        sa.Column('subline', sa.String(length=255), nullable=True),
        sa.Column('description', sa.String(length=5000), nullable=True),
        sa.Column('venue_name', sa.String(length=255), nullable=True),
        sa.Column('venue_street', sa.String(length=255), nullable=True),
        sa.Column('venue_zip_code', sa.String(length=16), nullable=True),
        sa.Column('venue_city', sa.String(length=255), nullable=True),
        sa.Column('conference_link', sa.String(length=500), nullable=True),
        sa.Column('conference_code', sa.String(length=255), nullable=True),
        sa.Column('areas', sa.JSON(), nullable=False),
        *_timestamps(),
        sa.ForeignKeyConstraint(['parent_event_id'], ['events.id'], ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_events_id'), 'events', ['id'], unique=False)
    op.create_index(op.f('ix_events_slug'), 'events', ['slug'], unique=True)
    op.create_index(op.f('ix_events_start_time'), 'events', ['start_time'], unique=False)
    op.create_index(op.f('ix_events_end_time'), 'events', ['end_time'], unique=False)
    op.create_index(op.f('ix_events_parent_event_id'), 'events', ['parent_event_id'], unique=False)

    op.create_table(
        'projects',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('slug', sa.String(length=255), nullable=False),
        sa.Column('published', sa.Boolean(), nullable=False),
        sa.Column('headline', sa.String(length=255), nullable=True),
        sa.Column('excerpt', sa.String(length=500), nullable=True),
        sa.Column('description', sa.String(length=5000), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('street', sa.String(length=255), nullable=True),
        sa.Column('zip_code', sa.String(length=16), nullable=True),
        sa.Column('city', sa.String(length=255), nullable=True),
        sa.Column('facebook', sa.String(length=500), nullable=True),
        sa.Column('linkedin', sa.String(length=500), nullable=True),
        sa.Column('instagram', sa.String(length=500), nullable=True),
        sa.Column('youtube', sa.String(length=500), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_projects_id'), 'projects', ['id'], unique=False)
    op.create_index(op.f('ix_projects_slug'), 'projects', ['slug'], unique=True)

    op.create_table(
        'relationships',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('subject_id', sa.UUID(), nullable=False),
        sa.Column('subject_kind', sa.String(length=32), nullable=False),
        sa.Column('object_id', sa.UUID(), nullable=False),
        sa.Column('object_kind', sa.String(length=32), nullable=False),
        sa.Column('role', sa.String(length=32), nullable=False),
        sa.Column('state', sa.String(length=32), nullable=False),
        sa.Column('created_by_id', sa.UUID(), nullable=True),
        sa.Column('requested_at', sa.DateTime(), nullable=False),
        sa.Column('activated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'subject_id', 'object_id', 'role', name='uq_relationships_subject_object_role'
        ),
    )
    op.create_index(op.f('ix_relationships_id'), 'relationships', ['id'], unique=False)
    op.create_index(op.f('ix_relationships_subject_id'), 'relationships', ['subject_id'], unique=False)
    op.create_index(op.f('ix_relationships_object_id'), 'relationships', ['object_id'], unique=False)
    op.create_index(op.f('ix_relationships_role'), 'relationships', ['role'], unique=False)
    op.create_index(op.f('ix_relationships_state'), 'relationships', ['state'], unique=False)
    op.create_index(op.f('ix_relationships_requested_at'), 'relationships', ['requested_at'], unique=False)

    op.create_table(
        'field_visibility',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('entity_id', sa.UUID(), nullable=False),
        sa.Column('field_name', sa.String(length=64), nullable=False),
        sa.Column('level', sa.String(length=16), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('entity_id', 'field_name', name='uq_field_visibility_entity_field'),
    )
    op.create_index(op.f('ix_field_visibility_entity_id'), 'field_visibility', ['entity_id'], unique=False)

    op.create_table(
        'notification_outbox',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('dedupe_key', sa.String(length=128), nullable=False),
        sa.Column('recipient_id', sa.UUID(), nullable=False),
        sa.Column('recipient_kind', sa.String(length=32), nullable=False),
        sa.Column('kind', sa.String(length=50), nullable=False),
        sa.Column('payload', sa.JSON(), nullable=False),
        sa.Column('attempts', sa.Integer(), nullable=False),
        sa.Column('last_error', sa.String(length=1000), nullable=True),
        sa.Column('dispatched_at', sa.DateTime(), nullable=True),
        sa.Column('failed', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_notification_outbox_id'), 'notification_outbox', ['id'], unique=False)
    op.create_index(op.f('ix_notification_outbox_dedupe_key'), 'notification_outbox', ['dedupe_key'], unique=True)
    op.create_index(op.f('ix_notification_outbox_recipient_id'), 'notification_outbox', ['recipient_id'], unique=False)
    op.create_index(op.f('ix_notification_outbox_dispatched_at'), 'notification_outbox', ['dispatched_at'], unique=False)
    op.create_index(op.f('ix_notification_outbox_failed'), 'notification_outbox', ['failed'], unique=False)
    op.create_index(op.f('ix_notification_outbox_created_at'), 'notification_outbox', ['created_at'], unique=False)

    op.create_table(
        'audit_entries',
        sa.Column('id', sa.UUID(), nullable=False),
        sa.Column('entity_id', sa.UUID(), nullable=False),
        sa.Column('actor_id', sa.UUID(), nullable=True),
        sa.Column('action', sa.String(length=50), nullable=False),
        sa.Column('field_name', sa.String(length=50), nullable=True),
        sa.Column('old_value', sa.String(length=1000), nullable=True),
        sa.Column('new_value', sa.String(length=1000), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_audit_entries_id'), 'audit_entries', ['id'], unique=False)
    op.create_index(op.f('ix_audit_entries_entity_id'), 'audit_entries', ['entity_id'], unique=False)
    op.create_index(op.f('ix_audit_entries_actor_id'), 'audit_entries', ['actor_id'], unique=False)
    op.create_index(op.f('ix_audit_entries_action'), 'audit_entries', ['action'], unique=False)
    op.create_index(op.f('ix_audit_entries_created_at'), 'audit_entries', ['created_at'], unique=False)


def downgrade() -> None:
    op.drop_table('audit_entries')
    op.drop_table('notification_outbox')
    op.drop_table('field_visibility')
    op.drop_table('relationships')
    op.drop_table('projects')
    op.drop_table('events')
    op.drop_table('organizations')
    op.drop_table('persons')
