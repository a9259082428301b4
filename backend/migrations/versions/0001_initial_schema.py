"""Initial schema: auth tables, projects, environments, API keys, events

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

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


def upgrade() -> None:
    # Users
    op.create_table('users',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('email_verified', sa.DateTime(timezone=True), nullable=True),
        sa.Column('image', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('email'),
    )

    # Provider accounts
    op.create_table('accounts',
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('type', sa.String(), nullable=False),
        sa.Column('provider', sa.String(), nullable=False),
        sa.Column('provider_account_id', sa.String(), nullable=False),
        sa.Column('refresh_token', sa.String(), nullable=True),
        sa.Column('access_token', sa.String(), nullable=True),
        sa.Column('expires_at', sa.Integer(), nullable=True),
        sa.Column('token_type', sa.String(), nullable=True),
        sa.Column('scope', sa.String(), nullable=True),
        sa.Column('id_token', sa.String(), nullable=True),
        sa.Column('session_state', sa.String(), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('provider', 'provider_account_id', name='accounts_pkey'),
    )
    op.create_index(op.f('ix_accounts_user_id'), 'accounts', ['user_id'], unique=False)

    # Sessions
    op.create_table('sessions',
        sa.Column('session_token', sa.String(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('expires', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('session_token'),
    )
    op.create_index(op.f('ix_sessions_user_id'), 'sessions', ['user_id'], unique=False)

    # Verification tokens
    op.create_table('verification_tokens',
        sa.Column('identifier', sa.String(), nullable=False),
        sa.Column('token', sa.String(), nullable=False),
        sa.Column('expires', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('identifier', 'token', name='verification_tokens_pkey'),
    )

    # Projects
    op.create_table('projects',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('slug', sa.String(), nullable=False),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('projects_user_id_idx', 'projects', ['user_id'], unique=False)
    op.create_index('projects_slug_idx', 'projects', ['user_id', 'slug'], unique=True)

    # Environments
    op.create_table('environments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('project_id', sa.Uuid(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('environments_project_id_idx', 'environments', ['project_id'], unique=False)
    op.create_index('environments_name_project_idx', 'environments', ['project_id', 'name'], unique=True)

    # API keys
    op.create_table('api_keys',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('key_hash', sa.String(), nullable=False),
        sa.Column('key_prefix', sa.String(), nullable=False),
        sa.Column('environment_id', sa.Uuid(), nullable=False),
        sa.Column('last_used_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['environment_id'], ['environments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('api_keys_environment_id_idx', 'api_keys', ['environment_id'], unique=False)
    op.create_index('api_keys_key_hash_idx', 'api_keys', ['key_hash'], unique=True)

    # Events
    op.create_table('events',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('event_name', sa.String(), nullable=False),
        sa.Column('payload', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('url', sa.String(), nullable=True),
        sa.Column('referrer', sa.String(), nullable=True),
        sa.Column('user_agent', sa.String(), nullable=True),
        sa.Column('ip', sa.String(), nullable=True),
        sa.Column('environment_id', sa.Uuid(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.ForeignKeyConstraint(['environment_id'], ['environments.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('events_environment_id_idx', 'events', ['environment_id'], unique=False)
    op.create_index('events_timestamp_idx', 'events', ['timestamp'], unique=False)
    op.create_index('events_environment_timestamp_idx', 'events', ['environment_id', 'timestamp'], unique=False)


def downgrade() -> None:
    op.drop_index('events_environment_timestamp_idx', table_name='events')
    op.drop_index('events_timestamp_idx', table_name='events')
    op.drop_index('events_environment_id_idx', table_name='events')
    op.drop_table('events')
    op.drop_index('api_keys_key_hash_idx', table_name='api_keys')
    op.drop_index('api_keys_environment_id_idx', table_name='api_keys')
    op.drop_table('api_keys')
    op.drop_index('environments_name_project_idx', table_name='environments')
    op.drop_index('environments_project_id_idx', table_name='environments')
    op.drop_table('environments')
    op.drop_index('projects_slug_idx', table_name='projects')
    op.drop_index('projects_user_id_idx', table_name='projects')
    op.drop_table('projects')
    op.drop_table('verification_tokens')
    op.drop_index(op.f('ix_sessions_user_id'), table_name='sessions')
    op.drop_table('sessions')
    op.drop_index(op.f('ix_accounts_user_id'), table_name='accounts')
    op.drop_table('accounts')
    op.drop_table('users')
